"""TubeBrief CLI entry point."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

env_file = Path(__file__).parent.parent / ".env"
load_dotenv(env_file)

from tubebrief import __version__
from tubebrief.config import get_settings
from tubebrief.observability import configure_logging

configure_logging()

logger = logging.getLogger(__name__)


def _init_logfire() -> None:
    """Initialize Logfire if available, without failing commands."""
    try:
        from tubebrief.observability import initialize_logfire

        initialize_logfire(get_settings())
    except Exception as e:
        logger.warning(f"Failed to initialize Logfire: {e}")


def _recent_store():
    from tubebrief.companion import RecentBriefStore

    settings = get_settings()
    return RecentBriefStore(
        settings.data_dir / "recent_briefs.yaml",
        max_recent=settings.companion.max_recent,
    )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the API server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tubebrief.api.server:create_app",
        factory=True,
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create database tables."""
    from tubebrief.database import close_db, get_db_info, init_db

    async def _init():
        try:
            await init_db()
        finally:
            await close_db()

    try:
        asyncio.run(_init())
        info = get_db_info()
        print(f"\n✓ Database initialized ({info['url']})\n")
        return 0
    except Exception as e:
        logger.error(f"Database init failed: {e}", exc_info=True)
        print(f"\n❌ Database init failed: {e}\n")
        return 1


def cmd_config(args: argparse.Namespace) -> int:
    """Display merged configuration."""
    try:
        settings = get_settings()

        print("\n=== TubeBrief Configuration ===\n")
        print(f"Environment: {settings.environment}")
        print(f"Data Directory: {settings.data_dir}\n")

        print("Briefs:")
        print(f"  Freshness: {settings.briefs.freshness_hours}h")
        print(f"  Pending Window: {settings.briefs.pending_window_minutes} min")
        print(f"  Stall Timeout: {settings.briefs.stall_timeout_minutes} min")
        print(f"  Max Tags per Brief: {settings.briefs.max_tags_per_brief}\n")

        print("Jobs:")
        print(f"  Backend: {settings.jobs.backend}")
        print(f"  Expire Stalled Every: {settings.jobs.expire_stalled_seconds:.0f}s\n")

        print("Summarizer:")
        print(f"  Model: {settings.summarizer.model}")
        print(f"  Temperature: {settings.summarizer.temperature}")
        print(f"  Max Tokens: {settings.summarizer.max_tokens}\n")

        print("Access:")
        emails = settings.allowed_email_set
        print(f"  Allowed Emails: {len(emails) if emails else 'none (generation disabled)'}\n")

        print("Companion:")
        print(f"  App URL: {settings.companion.app_url}")
        print(f"  Notifier: {settings.companion.notifier}\n")

        print("API Keys:")
        print(f"  Anthropic: {'✓ Set' if settings.anthropic_api_key else '✗ Not set'}")
        print(f"  YouTube: {'✓ Set' if settings.youtube_api_key else '✗ Not set'}")
        print(f"  Logfire: {'✓ Set' if settings.logfire_token else '✗ Not set'}\n")

        return 0

    except ValidationError as e:
        print("\n❌ Configuration Error:\n")
        for error in e.errors():
            print(f"  • {'.'.join(str(x) for x in error['loc'])}: {error['msg']}")
        print()
        return 1
    except Exception as e:
        logger.error(f"Failed to load config: {e}")
        print(f"\n❌ Failed to load configuration: {e}\n")
        return 1


def cmd_backfill_search(args: argparse.Namespace) -> int:
    """Fill search_text for briefs missing search text."""
    _init_logfire()
    from tubebrief.database import close_db, get_db_session
    from tubebrief.services.brief_service import brief_service

    async def _backfill():
        try:
            async with get_db_session() as db:
                return await brief_service.backfill_search_text(db, dry_run=args.dry_run)
        finally:
            await close_db()

    try:
        count = asyncio.run(_backfill())
        verb = "Would update" if args.dry_run else "Updated"
        print(f"\n✓ {verb} {count} briefs\n")
        return 0
    except Exception as e:
        logger.error(f"Backfill failed: {e}", exc_info=True)
        print(f"\n❌ Backfill failed: {e}\n")
        return 1


def cmd_expire_stalled(args: argparse.Namespace) -> int:
    """Fail queued/processing briefs that exceeded the stall timeout."""
    _init_logfire()
    from tubebrief.database import close_db, get_db_session
    from tubebrief.services.brief_service import brief_service

    async def _expire():
        try:
            async with get_db_session() as db:
                return await brief_service.expire_stalled_briefs(db)
        finally:
            await close_db()

    try:
        count = asyncio.run(_expire())
        print(f"\n✓ Expired {count} stalled briefs\n")
        return 0
    except Exception as e:
        logger.error(f"Expire failed: {e}", exc_info=True)
        print(f"\n❌ Expire failed: {e}\n")
        return 1


def cmd_companion_create(args: argparse.Namespace) -> int:
    """Request a brief and optionally wait for it."""
    from tubebrief.companion import (
        AuthError,
        BriefApiClient,
        BriefApiError,
        BriefPoller,
        create_notifier,
    )

    settings = get_settings()
    store = _recent_store()

    async def _create():
        async with BriefApiClient(settings.companion) as api:
            poller = BriefPoller(api, store, create_notifier(settings), settings.companion)
            job_id = await poller.submit(args.url, args.title or "")
            if args.wait:
                await poller.wait()
            else:
                poller.stop()
            return job_id

    try:
        job_id = asyncio.run(_create())
        entry = next((b for b in store.load() if b.job_id == job_id), None)
        print(f"\n✓ Job {job_id}: {entry.status if entry else 'unknown'}\n")
        return 0
    except AuthError as e:
        print(f"\n❌ {e}. Set companion.access_token in data/config.yaml\n")
        return 1
    except BriefApiError as e:
        print(f"\n❌ {e.message}\n")
        return 1


def cmd_companion_list(args: argparse.Namespace) -> int:
    """Show recent briefs."""
    from tubebrief.companion import unseen_count

    store = _recent_store()
    briefs = store.load()

    print("\n=== Recent Briefs ===\n")
    if not briefs:
        print("  (None)\n")
        return 0

    for brief in briefs:
        created = datetime.fromtimestamp(brief.created_at).strftime("%Y-%m-%d %H:%M")
        label = brief.video_title or brief.video_url
        marker = "*" if brief.status == "completed" and not brief.seen else " "
        print(f" {marker} [{brief.status:<10}] {label} ({created})")
        if brief.error:
            print(f"      {brief.error}")

    print(f"\nUnseen: {unseen_count(briefs)}\n")
    store.mark_all_seen()
    return 0


def cmd_companion_watch(args: argparse.Namespace) -> int:
    """Poll leftover jobs until none are processing."""
    from tubebrief.companion import BriefApiClient, BriefPoller, create_notifier

    settings = get_settings()
    store = _recent_store()

    async def _watch():
        async with BriefApiClient(settings.companion) as api:
            poller = BriefPoller(api, store, create_notifier(settings), settings.companion)
            await poller.verify_completed_briefs()
            if poller.resume() is None:
                print("No processing jobs.")
            await poller.wait()
            return poller.badge_text()

    try:
        badge = asyncio.run(_watch())
        print(f"\n✓ Unseen briefs: {badge or 0}\n")
        return 0
    except KeyboardInterrupt:
        print("\n\nStopped.\n")
        return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="TubeBrief: AI briefs for YouTube videos",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"TubeBrief {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_serve = subparsers.add_parser("serve", help="Run the API server")
    parser_serve.add_argument("--host", default=None)
    parser_serve.add_argument("--port", type=int, default=None)
    parser_serve.add_argument("--reload", action="store_true", help="Reload on code changes")
    parser_serve.set_defaults(func=cmd_serve)

    parser_init_db = subparsers.add_parser("init-db", help="Create database tables")
    parser_init_db.set_defaults(func=cmd_init_db)

    parser_config = subparsers.add_parser("config", help="Display merged configuration")
    parser_config.set_defaults(func=cmd_config)

    parser_backfill = subparsers.add_parser(
        "backfill-search",
        help="Fill search text for briefs missing it",
    )
    parser_backfill.add_argument(
        "--dry-run",
        action="store_true",
        help="Count briefs that would change without writing",
    )
    parser_backfill.set_defaults(func=cmd_backfill_search)

    parser_expire = subparsers.add_parser(
        "expire-stalled",
        help="Mark stalled jobs as failed",
    )
    parser_expire.set_defaults(func=cmd_expire_stalled)

    parser_companion = subparsers.add_parser("companion", help="Companion client commands")
    companion_sub = parser_companion.add_subparsers(dest="companion_command")

    parser_create = companion_sub.add_parser("create", help="Request a brief for a video URL")
    parser_create.add_argument("url", help="YouTube video URL")
    parser_create.add_argument("--title", default=None, help="Video title for notifications")
    parser_create.add_argument(
        "--wait",
        action="store_true",
        help="Keep polling until the job finishes",
    )
    parser_create.set_defaults(func=cmd_companion_create)

    parser_list = companion_sub.add_parser("list", help="Show recent briefs")
    parser_list.set_defaults(func=cmd_companion_list)

    parser_watch = companion_sub.add_parser("watch", help="Poll processing jobs")
    parser_watch.set_defaults(func=cmd_companion_watch)

    args = parser.parse_args()

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
