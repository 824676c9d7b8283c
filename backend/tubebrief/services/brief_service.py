"""Brief persistence service."""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import delete, distinct, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.config import get_settings
from tubebrief.database.base import utc_now
from tubebrief.models import PENDING_STATUSES, PLACEHOLDER_TITLE, Brief, Tag, brief_tags
from tubebrief.parsing import build_search_text, create_slug, thumbnail_url
from tubebrief.services.generator import GeneratedBrief
from tubebrief.services.tag_service import tag_service

logger = logging.getLogger(__name__)

TSQUERY_SPECIAL_CHARS = re.compile(r"[&|!():*<>'\"\\]")
STALLED_MESSAGE = "Processing timed out"


def build_ts_query(search: str) -> str:
    """Prefix-matching tsquery with all terms ANDed and syntax characters removed."""
    terms = TSQUERY_SPECIAL_CHARS.sub(" ", search.strip().lower()).split()
    return " & ".join(f"{term}:*" for term in terms)


def search_terms(search: str) -> list[str]:
    return TSQUERY_SPECIAL_CHARS.sub(" ", search.strip().lower()).split()


def end_of_day(day: date) -> datetime:
    """Last instant of a calendar day, so date filters include the whole day."""
    return datetime.combine(day, time.max, tzinfo=timezone.utc)


def start_of_day(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def content_columns(generated: GeneratedBrief) -> dict:
    """Column values for a freshly generated brief."""
    metadata = generated.metadata
    columns = generated.content.to_columns()
    return {
        "title": metadata.title,
        "channel_name": metadata.channel_title,
        "channel_slug": create_slug(metadata.channel_title),
        "duration": metadata.duration,
        "published_at": metadata.published_at,
        "thumbnail_url": thumbnail_url(metadata.video_id),
        "has_creator_chapters": generated.has_creator_chapters,
        "search_text": build_search_text(
            columns["summary"],
            columns["sections"],
            columns["related_links"],
            columns["other_links"],
        ),
        **columns,
    }


@dataclass
class BriefPage:
    """One page of the library listing."""

    briefs: list[Brief]
    total: int
    has_more: bool


class BriefService:
    """
    Stores and retrieves briefs.
    Handles caching lookups, the job placeholder lifecycle, sharing and the library listing.
    """

    # ------------------------------------------------------------------
    # Completed briefs
    # ------------------------------------------------------------------

    async def save_brief(
        self,
        db: AsyncSession,
        user_id: str,
        generated: GeneratedBrief,
    ) -> Brief:
        """Insert a completed brief."""
        brief = Brief(
            user_id=user_id,
            video_id=generated.metadata.video_id,
            status="completed",
            **content_columns(generated),
        )
        db.add(brief)
        await db.commit()
        await db.refresh(brief)
        logger.info(f"Saved brief {brief.id} for video {brief.video_id}")
        return brief

    async def update_brief(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
        generated: GeneratedBrief,
    ) -> Optional[Brief]:
        """Refresh a stale brief in place, keeping its id, tags and sharing state."""
        brief = await self._get_owned(db, brief_id, user_id)
        if brief is None:
            return None
        for key, value in content_columns(generated).items():
            setattr(brief, key, value)
        brief.status = "completed"
        brief.error_message = None
        brief.updated_at = utc_now()
        await db.commit()
        await db.refresh(brief)
        logger.info(f"Refreshed brief {brief.id}")
        return brief

    async def get_brief_by_id(
        self,
        db: AsyncSession,
        brief_id: UUID,
        user_id: Optional[str] = None,
    ) -> Optional[Brief]:
        """Get a brief with its tags, optionally restricted to its owner."""
        query = select(Brief).where(Brief.id == brief_id)
        if user_id is not None:
            query = query.where(Brief.user_id == user_id)
        brief = (await db.execute(query)).scalar_one_or_none()
        if brief is not None:
            brief.tags = await tag_service.get_brief_tags(db, brief.id)
        return brief

    async def get_brief_by_video_id(
        self,
        db: AsyncSession,
        user_id: str,
        video_id: str,
    ) -> Optional[Brief]:
        """User cache lookup: the user's latest completed brief for a video."""
        result = await db.execute(
            select(Brief)
            .where(
                Brief.user_id == user_id,
                Brief.video_id == video_id,
                Brief.status == "completed",
            )
            .order_by(Brief.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_global_brief_by_video_id(
        self,
        db: AsyncSession,
        video_id: str,
    ) -> Optional[Brief]:
        """Global cache lookup: the latest completed brief for a video from any user."""
        result = await db.execute(
            select(Brief)
            .where(Brief.video_id == video_id, Brief.status == "completed")
            .order_by(Brief.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def copy_brief_for_user(
        self,
        db: AsyncSession,
        source: Brief,
        user_id: str,
    ) -> Brief:
        """Copy another user's brief into this user's library (unshared, untagged)."""
        brief = Brief(
            user_id=user_id,
            video_id=source.video_id,
            title=source.title,
            channel_name=source.channel_name,
            channel_slug=source.channel_slug,
            duration=source.duration,
            published_at=source.published_at,
            thumbnail_url=source.thumbnail_url,
            summary=source.summary,
            sections=list(source.sections or []),
            related_links=list(source.related_links or []),
            other_links=list(source.other_links or []),
            has_creator_chapters=source.has_creator_chapters,
            search_text=build_search_text(
                source.summary,
                source.sections,
                source.related_links,
                source.other_links,
            ),
            status="completed",
        )
        db.add(brief)
        await db.commit()
        await db.refresh(brief)
        logger.info(f"Copied brief {source.id} to user {user_id} as {brief.id}")
        return brief

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    async def list_briefs(
        self,
        db: AsyncSession,
        user_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
        search: Optional[str] = None,
        tags: Optional[list[str]] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> BriefPage:
        """
        List a user's completed briefs.

        Search matches every term as a prefix (full-text ranking on PostgreSQL),
        tag filtering requires all given tags, and date_to includes the whole day.
        """
        config = get_settings().briefs
        limit = min(limit or config.page_size_default, config.page_size_max)
        conditions = [Brief.user_id == user_id, Brief.status == "completed"]

        rank = None
        if search and search_terms(search):
            if db.bind.dialect.name == "postgresql":
                vector = func.to_tsvector("english", func.coalesce(Brief.search_text, ""))
                query = func.to_tsquery("english", build_ts_query(search))
                conditions.append(vector.op("@@")(query))
                rank = func.ts_rank(vector, query)
            else:
                for term in search_terms(search):
                    conditions.append(
                        or_(
                            Brief.search_text.ilike(f"%{term}%"),
                            Brief.title.ilike(f"%{term}%"),
                        )
                    )

        tag_names = sorted({name.strip().lower() for name in tags or [] if name.strip()})
        if tag_names:
            tagged = (
                select(brief_tags.c.brief_id)
                .join(Tag, Tag.id == brief_tags.c.tag_id)
                .where(Tag.user_id == user_id, Tag.name.in_(tag_names))
                .group_by(brief_tags.c.brief_id)
                .having(func.count(distinct(Tag.name)) == len(tag_names))
            )
            conditions.append(Brief.id.in_(tagged))

        if date_from:
            conditions.append(Brief.created_at >= start_of_day(date_from))
        if date_to:
            conditions.append(Brief.created_at <= end_of_day(date_to))

        total = (
            await db.execute(select(func.count()).select_from(Brief).where(*conditions))
        ).scalar_one()

        order = [Brief.created_at.desc()]
        if rank is not None:
            order.insert(0, rank.desc())

        result = await db.execute(
            select(Brief).where(*conditions).order_by(*order).offset(offset).limit(limit)
        )
        briefs = list(result.scalars().all())
        tags_by_brief = await tag_service.get_tags_for_briefs(db, [b.id for b in briefs])
        for brief in briefs:
            brief.tags = tags_by_brief.get(brief.id, [])

        return BriefPage(
            briefs=briefs,
            total=total,
            has_more=offset + len(briefs) < total,
        )

    async def has_briefs(self, db: AsyncSession, user_id: str) -> bool:
        result = await db.execute(select(Brief.id).where(Brief.user_id == user_id).limit(1))
        return result.first() is not None

    async def delete_brief(self, db: AsyncSession, user_id: str, brief_id: UUID) -> bool:
        """Delete an owned brief and its tag associations."""
        brief = await self._get_owned(db, brief_id, user_id)
        if brief is None:
            return False
        await db.execute(delete(brief_tags).where(brief_tags.c.brief_id == brief_id))
        await db.delete(brief)
        await db.commit()
        logger.info(f"Deleted brief {brief_id}")
        return True

    # ------------------------------------------------------------------
    # Sharing
    # ------------------------------------------------------------------

    async def get_shared_brief_by_slug(self, db: AsyncSession, slug: str) -> Optional[Brief]:
        result = await db.execute(
            select(Brief).where(Brief.slug == slug, Brief.is_shared.is_(True))
        )
        return result.scalar_one_or_none()

    async def _unique_slug(self, db: AsyncSession, base: str, brief_id: UUID) -> str:
        candidate = base
        suffix = 2
        while True:
            taken = await db.execute(
                select(Brief.id).where(Brief.slug == candidate, Brief.id != brief_id)
            )
            if taken.first() is None:
                return candidate
            candidate = f"{base}-{suffix}"
            suffix += 1

    async def toggle_sharing(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
        is_shared: bool,
        title: Optional[str] = None,
    ) -> Optional[dict]:
        """
        Enable or disable public sharing.

        The slug is generated on first enable and kept when sharing is
        disabled so re-enabling restores the same link.
        """
        brief = await self._get_owned(db, brief_id, user_id)
        if brief is None:
            return None

        if is_shared and not brief.slug:
            base = create_slug(title or brief.title) or brief.video_id.lower()
            brief.slug = await self._unique_slug(db, base, brief.id)

        brief.is_shared = is_shared
        brief.updated_at = utc_now()
        await db.commit()
        logger.info(f"Brief {brief_id} sharing={'on' if is_shared else 'off'} slug={brief.slug}")
        return {"is_shared": brief.is_shared, "slug": brief.slug}

    # ------------------------------------------------------------------
    # Job lifecycle
    # ------------------------------------------------------------------

    async def get_pending_brief_by_video_id(
        self,
        db: AsyncSession,
        user_id: str,
        video_id: str,
    ) -> Optional[Brief]:
        """Queued or processing job for the same video created within the pending window."""
        window = timedelta(minutes=get_settings().briefs.pending_window_minutes)
        result = await db.execute(
            select(Brief)
            .where(
                Brief.user_id == user_id,
                Brief.video_id == video_id,
                Brief.status.in_(PENDING_STATUSES),
                Brief.created_at > utc_now() - window,
            )
            .order_by(Brief.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def create_pending_brief(self, db: AsyncSession, user_id: str, video_id: str) -> Brief:
        """Insert the placeholder row that tracks a queued job."""
        brief = Brief(
            user_id=user_id,
            video_id=video_id,
            title=PLACEHOLDER_TITLE,
            channel_name="",
            channel_slug="",
            thumbnail_url=thumbnail_url(video_id),
            summary="",
            sections=[],
            related_links=[],
            other_links=[],
            status="queued",
        )
        db.add(brief)
        await db.commit()
        await db.refresh(brief)
        logger.info(f"Queued brief job {brief.id} for video {video_id}")
        return brief

    async def update_brief_status(
        self,
        db: AsyncSession,
        brief_id: UUID,
        status: str,
        error_message: Optional[str] = None,
    ) -> None:
        await db.execute(
            update(Brief)
            .where(Brief.id == brief_id)
            .values(status=status, error_message=error_message, updated_at=utc_now())
        )
        await db.commit()

    async def complete_pending_brief(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
        generated: GeneratedBrief,
    ) -> None:
        """Fill a placeholder with generated content and mark it completed."""
        await db.execute(
            update(Brief)
            .where(Brief.id == brief_id, Brief.user_id == user_id)
            .values(
                status="completed",
                error_message=None,
                updated_at=utc_now(),
                **content_columns(generated),
            )
        )
        await db.commit()
        logger.info(f"Completed brief job {brief_id}")

    async def get_brief_status(
        self,
        db: AsyncSession,
        brief_id: UUID,
        user_id: str,
    ) -> Optional[dict]:
        result = await db.execute(
            select(Brief.id, Brief.status, Brief.error_message).where(
                Brief.id == brief_id, Brief.user_id == user_id
            )
        )
        row = result.first()
        if row is None:
            return None
        status = {"status": row.status, "brief_id": row.id}
        if row.error_message:
            status["error"] = row.error_message
        return status

    async def expire_stalled_briefs(
        self,
        db: AsyncSession,
        timeout_minutes: Optional[int] = None,
    ) -> int:
        """Mark queued/processing jobs that stopped progressing as failed."""
        if timeout_minutes is None:
            timeout_minutes = get_settings().briefs.stall_timeout_minutes
        cutoff = utc_now() - timedelta(minutes=timeout_minutes)
        result = await db.execute(
            update(Brief)
            .where(Brief.status.in_(PENDING_STATUSES), Brief.updated_at < cutoff)
            .values(status="failed", error_message=STALLED_MESSAGE, updated_at=utc_now())
        )
        await db.commit()
        if result.rowcount:
            logger.warning(f"Expired {result.rowcount} stalled brief jobs")
        return result.rowcount or 0

    async def backfill_search_text(self, db: AsyncSession, dry_run: bool = False) -> int:
        """Populate search_text for completed briefs saved without it."""
        result = await db.execute(
            select(Brief).where(
                Brief.status == "completed",
                or_(Brief.search_text.is_(None), Brief.search_text == ""),
            )
        )
        briefs = list(result.scalars().all())
        for brief in briefs:
            text = build_search_text(
                brief.summary, brief.sections, brief.related_links, brief.other_links
            )
            logger.info(f"Backfill {brief.id}: {len(text)} chars{' (dry run)' if dry_run else ''}")
            if not dry_run:
                brief.search_text = text
        if dry_run:
            await db.rollback()
        else:
            await db.commit()
        return len(briefs)

    async def _get_owned(self, db: AsyncSession, brief_id: UUID, user_id: str) -> Optional[Brief]:
        result = await db.execute(
            select(Brief).where(Brief.id == brief_id, Brief.user_id == user_id)
        )
        return result.scalar_one_or_none()


# Singleton instance
brief_service = BriefService()
