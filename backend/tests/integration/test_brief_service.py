"""
Integration Tests: Brief Service

Persistence, caching lookups, library listing, sharing and the job
placeholder lifecycle against an in-memory database.
"""

from datetime import date, datetime, timedelta, timezone

from sqlalchemy import update

from conftest import make_generated
from tubebrief.database.base import utc_now
from tubebrief.models import PLACEHOLDER_TITLE, Brief
from tubebrief.services.brief_service import (
    STALLED_MESSAGE,
    brief_service,
    build_ts_query,
    end_of_day,
)
from tubebrief.services.tag_service import tag_service

ALICE = "user_alice"
BOB = "user_bob"


async def _set_times(db, brief_id, when: datetime) -> None:
    await db.execute(
        update(Brief).where(Brief.id == brief_id).values(created_at=when, updated_at=when)
    )
    await db.commit()


def test_build_ts_query_strips_syntax():
    assert build_ts_query("Neural  nets!") == "neural:* & nets:*"
    assert build_ts_query("a&b | (c)") == "a:* & b:* & c:*"
    assert build_ts_query("   ") == ""


def test_end_of_day_includes_whole_day():
    assert end_of_day(date(2025, 3, 1)) == datetime(2025, 3, 1, 23, 59, 59, 999999, tzinfo=timezone.utc)


def test_save_and_lookup(run_db):
    async def scenario(factory):
        async with factory() as db:
            saved = await brief_service.save_brief(db, ALICE, make_generated())

            assert saved.status == "completed"
            assert saved.channel_slug == "rick-astley"
            assert "Never gonna give you up" in saved.search_text
            assert saved.sections[0]["keyPoints"] == ["Never gonna give you up"]

            fetched = await brief_service.get_brief_by_id(db, saved.id, ALICE)
            assert fetched.tags == []
            assert await brief_service.get_brief_by_id(db, saved.id, BOB) is None

            cached = await brief_service.get_brief_by_video_id(db, ALICE, "dQw4w9WgXcQ")
            assert cached.id == saved.id
            assert await brief_service.get_brief_by_video_id(db, BOB, "dQw4w9WgXcQ") is None

            global_hit = await brief_service.find_global_brief_by_video_id(db, "dQw4w9WgXcQ")
            copy = await brief_service.copy_brief_for_user(db, global_hit, BOB)
            assert copy.id != saved.id
            assert copy.user_id == BOB
            assert copy.summary == saved.summary
            assert not copy.is_shared

    run_db(scenario)


def test_update_brief_keeps_identity(run_db):
    async def scenario(factory):
        async with factory() as db:
            saved = await brief_service.save_brief(db, ALICE, make_generated())
            await brief_service.toggle_sharing(db, ALICE, saved.id, True)

            updated = await brief_service.update_brief(
                db, ALICE, saved.id, make_generated(summary="Refreshed summary")
            )

            assert updated.id == saved.id
            assert updated.summary == "Refreshed summary"
            assert updated.is_shared
            assert await brief_service.update_brief(db, BOB, saved.id, make_generated()) is None

    run_db(scenario)


def test_list_briefs_search_tags_dates_and_paging(run_db):
    async def scenario(factory):
        async with factory() as db:
            rick = await brief_service.save_brief(db, ALICE, make_generated())
            python = await brief_service.save_brief(
                db,
                ALICE,
                make_generated("aaaaaaaaaaa", title="Python Async Deep Dive", summary="Event loops explained."),
            )
            rust = await brief_service.save_brief(
                db,
                ALICE,
                make_generated("bbbbbbbbbbb", title="Rust Ownership", summary="Borrow checker explained."),
            )
            await brief_service.save_brief(db, BOB, make_generated("ccccccccccc", title="Bob's video"))
            await brief_service.create_pending_brief(db, ALICE, "ddddddddddd")

            await _set_times(db, rick.id, datetime(2025, 1, 10, 8, tzinfo=timezone.utc))
            await _set_times(db, python.id, datetime(2025, 2, 10, 8, tzinfo=timezone.utc))
            await _set_times(db, rust.id, datetime(2025, 3, 10, 23, tzinfo=timezone.utc))

            await tag_service.add_tag_to_brief(db, ALICE, python.id, "Programming")
            await tag_service.add_tag_to_brief(db, ALICE, python.id, "python")
            await tag_service.add_tag_to_brief(db, ALICE, rust.id, "programming")

            page = await brief_service.list_briefs(db, ALICE)
            assert [b.id for b in page.briefs] == [rust.id, python.id, rick.id]
            assert page.total == 3
            assert not page.has_more

            page = await brief_service.list_briefs(db, ALICE, search="explained")
            assert {b.id for b in page.briefs} == {python.id, rust.id}

            page = await brief_service.list_briefs(db, ALICE, search="borrow expl")
            assert [b.id for b in page.briefs] == [rust.id]

            page = await brief_service.list_briefs(db, ALICE, tags=["programming"])
            assert {b.id for b in page.briefs} == {python.id, rust.id}

            page = await brief_service.list_briefs(db, ALICE, tags=["programming", "Python"])
            assert [b.id for b in page.briefs] == [python.id]
            assert [t.name for t in page.briefs[0].tags] == ["programming", "python"]

            page = await brief_service.list_briefs(
                db, ALICE, date_from=date(2025, 2, 1), date_to=date(2025, 3, 10)
            )
            assert [b.id for b in page.briefs] == [rust.id, python.id]

            page = await brief_service.list_briefs(db, ALICE, limit=2, offset=0)
            assert len(page.briefs) == 2
            assert page.has_more
            page = await brief_service.list_briefs(db, ALICE, limit=2, offset=2)
            assert [b.id for b in page.briefs] == [rick.id]
            assert not page.has_more

            assert await brief_service.has_briefs(db, BOB)
            assert not await brief_service.has_briefs(db, "user_nobody")

    run_db(scenario)


def test_sharing_slugs(run_db):
    async def scenario(factory):
        async with factory() as db:
            first = await brief_service.save_brief(db, ALICE, make_generated())
            second = await brief_service.save_brief(db, BOB, make_generated())

            assert await brief_service.get_shared_brief_by_slug(db, "never-gonna-give-you-up") is None

            result = await brief_service.toggle_sharing(db, ALICE, first.id, True)
            assert result == {"is_shared": True, "slug": "never-gonna-give-you-up"}

            result = await brief_service.toggle_sharing(db, BOB, second.id, True)
            assert result["slug"] == "never-gonna-give-you-up-2"

            shared = await brief_service.get_shared_brief_by_slug(db, "never-gonna-give-you-up")
            assert shared.id == first.id

            result = await brief_service.toggle_sharing(db, ALICE, first.id, False)
            assert result == {"is_shared": False, "slug": "never-gonna-give-you-up"}
            assert await brief_service.get_shared_brief_by_slug(db, "never-gonna-give-you-up") is None

            result = await brief_service.toggle_sharing(db, ALICE, first.id, True)
            assert result["slug"] == "never-gonna-give-you-up"

            assert await brief_service.toggle_sharing(db, BOB, first.id, True) is None

    run_db(scenario)


def test_custom_share_title(run_db):
    async def scenario(factory):
        async with factory() as db:
            brief = await brief_service.save_brief(db, ALICE, make_generated())
            result = await brief_service.toggle_sharing(db, ALICE, brief.id, True, title="My Favourite Song")
            assert result["slug"] == "my-favourite-song"

    run_db(scenario)


def test_delete_brief_removes_tag_links(run_db):
    async def scenario(factory):
        async with factory() as db:
            brief = await brief_service.save_brief(db, ALICE, make_generated())
            await tag_service.add_tag_to_brief(db, ALICE, brief.id, "music")

            assert not await brief_service.delete_brief(db, BOB, brief.id)
            assert await brief_service.delete_brief(db, ALICE, brief.id)

            assert await brief_service.get_brief_by_id(db, brief.id) is None
            tags = await tag_service.get_user_tags(db, ALICE)
            assert [(t["name"], t["usage_count"]) for t in tags] == [("music", 0)]

    run_db(scenario)


def test_pending_lifecycle(run_db):
    async def scenario(factory):
        async with factory() as db:
            job = await brief_service.create_pending_brief(db, ALICE, "dQw4w9WgXcQ")
            assert job.title == PLACEHOLDER_TITLE
            assert job.status == "queued"

            pending = await brief_service.get_pending_brief_by_video_id(db, ALICE, "dQw4w9WgXcQ")
            assert pending.id == job.id
            assert await brief_service.get_pending_brief_by_video_id(db, BOB, "dQw4w9WgXcQ") is None
            assert await brief_service.get_brief_by_video_id(db, ALICE, "dQw4w9WgXcQ") is None

            await brief_service.update_brief_status(db, job.id, "processing")
            assert await brief_service.get_brief_status(db, job.id, ALICE) == {
                "status": "processing",
                "brief_id": job.id,
            }

            await brief_service.complete_pending_brief(db, ALICE, job.id, make_generated())
            db.expire_all()
            brief = await brief_service.get_brief_by_id(db, job.id, ALICE)
            assert brief.status == "completed"
            assert brief.title == "Never Gonna Give You Up"
            assert await brief_service.get_brief_status(db, job.id, BOB) is None

    run_db(scenario)


def test_pending_window_expires(run_db):
    async def scenario(factory):
        async with factory() as db:
            job = await brief_service.create_pending_brief(db, ALICE, "dQw4w9WgXcQ")
            await _set_times(db, job.id, utc_now() - timedelta(minutes=6))
            assert await brief_service.get_pending_brief_by_video_id(db, ALICE, "dQw4w9WgXcQ") is None

    run_db(scenario)


def test_failed_status_includes_error(run_db):
    async def scenario(factory):
        async with factory() as db:
            job = await brief_service.create_pending_brief(db, ALICE, "dQw4w9WgXcQ")
            await brief_service.update_brief_status(db, job.id, "failed", "No captions")
            assert await brief_service.get_brief_status(db, job.id, ALICE) == {
                "status": "failed",
                "brief_id": job.id,
                "error": "No captions",
            }

    run_db(scenario)


def test_expire_stalled_briefs(run_db):
    async def scenario(factory):
        async with factory() as db:
            stalled = await brief_service.create_pending_brief(db, ALICE, "aaaaaaaaaaa")
            recent = await brief_service.create_pending_brief(db, ALICE, "bbbbbbbbbbb")
            done = await brief_service.save_brief(db, ALICE, make_generated())
            await _set_times(db, stalled.id, utc_now() - timedelta(minutes=30))
            await _set_times(db, done.id, utc_now() - timedelta(minutes=30))

            assert await brief_service.expire_stalled_briefs(db, timeout_minutes=10) == 1

            status = await brief_service.get_brief_status(db, stalled.id, ALICE)
            assert status["status"] == "failed"
            assert status["error"] == STALLED_MESSAGE
            assert (await brief_service.get_brief_status(db, recent.id, ALICE))["status"] == "queued"
            assert (await brief_service.get_brief_status(db, done.id, ALICE))["status"] == "completed"

    run_db(scenario)


def test_backfill_search_text(run_db):
    async def scenario(factory):
        async with factory() as db:
            brief = await brief_service.save_brief(db, ALICE, make_generated())
            await db.execute(update(Brief).where(Brief.id == brief.id).values(search_text=None))
            await db.commit()

            assert await brief_service.backfill_search_text(db, dry_run=True) == 1
            assert await brief_service.backfill_search_text(db) == 1
            assert await brief_service.backfill_search_text(db) == 0

            db.expire_all()
            refreshed = await brief_service.get_brief_by_id(db, brief.id)
            assert "A song about commitment." in refreshed.search_text

    run_db(scenario)
