"""Tag vocabulary and brief tagging service."""

import logging
from collections import defaultdict
from uuid import UUID

from sqlalchemy import Table, delete, func, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.config import get_settings
from tubebrief.models import Brief, Tag, brief_tags
from tubebrief.services.exceptions import (
    BriefNotFoundError,
    TagLimitError,
    TagValidationError,
)

logger = logging.getLogger(__name__)


def insert_ignoring_conflicts(db: AsyncSession, table: Table, conflict_columns: list[str]):
    """INSERT that skips rows hitting a unique key (ON CONFLICT DO NOTHING where supported)."""
    dialect = db.bind.dialect.name
    if dialect == "postgresql":
        return postgresql.insert(table).on_conflict_do_nothing(index_elements=conflict_columns)
    if dialect == "sqlite":
        return sqlite.insert(table).on_conflict_do_nothing(index_elements=conflict_columns)
    return insert(table)


def normalize_tag_name(name: str) -> str:
    """Lower-case and trim a tag name, validating its length."""
    normalized = (name or "").strip().lower()
    max_length = get_settings().briefs.max_tag_length
    if not normalized:
        raise TagValidationError("Tag name cannot be empty")
    if len(normalized) > max_length:
        raise TagValidationError(f"Tag name cannot exceed {max_length} characters")
    return normalized


class TagService:
    """Manages per-user tag vocabularies and brief/tag associations."""

    async def get_user_tags(self, db: AsyncSession, user_id: str) -> list[dict]:
        """All of a user's tags, name-ascending, with usage counts."""
        result = await db.execute(
            select(Tag, func.count(brief_tags.c.brief_id).label("usage_count"))
            .outerjoin(brief_tags, brief_tags.c.tag_id == Tag.id)
            .where(Tag.user_id == user_id)
            .group_by(Tag.id)
            .order_by(Tag.name.asc())
        )
        return [
            {"id": tag.id, "name": tag.name, "created_at": tag.created_at, "usage_count": count}
            for tag, count in result.all()
        ]

    async def get_brief_tags(self, db: AsyncSession, brief_id: UUID) -> list[Tag]:
        result = await db.execute(
            select(Tag)
            .join(brief_tags, brief_tags.c.tag_id == Tag.id)
            .where(brief_tags.c.brief_id == brief_id)
            .order_by(Tag.name.asc())
        )
        return list(result.scalars().all())

    async def get_tags_for_briefs(
        self,
        db: AsyncSession,
        brief_ids: list[UUID],
    ) -> dict[UUID, list[Tag]]:
        """Tags for many briefs in one query."""
        if not brief_ids:
            return {}
        result = await db.execute(
            select(brief_tags.c.brief_id, Tag)
            .join(Tag, brief_tags.c.tag_id == Tag.id)
            .where(brief_tags.c.brief_id.in_(brief_ids))
            .order_by(Tag.name.asc())
        )
        tags_by_brief: dict[UUID, list[Tag]] = defaultdict(list)
        for brief_id, tag in result.all():
            tags_by_brief[brief_id].append(tag)
        return dict(tags_by_brief)

    async def add_tag_to_brief(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
        tag_name: str,
    ) -> Tag:
        """
        Attach a tag to an owned brief, creating it in the user's vocabulary on demand.

        Raises:
            TagValidationError: name empty or too long
            BriefNotFoundError: brief missing or owned by someone else
            TagLimitError: brief already has the maximum number of tags
        """
        name = normalize_tag_name(tag_name)

        owned = await db.execute(
            select(Brief.id).where(Brief.id == brief_id, Brief.user_id == user_id)
        )
        if owned.first() is None:
            raise BriefNotFoundError()

        max_tags = get_settings().briefs.max_tags_per_brief
        count = (
            await db.execute(
                select(func.count()).select_from(brief_tags).where(brief_tags.c.brief_id == brief_id)
            )
        ).scalar_one()
        if count >= max_tags:
            raise TagLimitError(f"Maximum of {max_tags} tags per brief")

        tag = await self._get_tag_by_name(db, user_id, name)
        if tag is None:
            result = await db.execute(
                insert_ignoring_conflicts(db, Tag.__table__, ["user_id", "name"]).values(
                    user_id=user_id, name=name
                )
            )
            if result.rowcount:
                logger.info(f"Created tag {name!r} for user {user_id}")
            tag = await self._get_tag_by_name(db, user_id, name)

        linked = await db.execute(
            select(brief_tags.c.tag_id).where(
                brief_tags.c.brief_id == brief_id, brief_tags.c.tag_id == tag.id
            )
        )
        if linked.first() is None:
            await db.execute(
                insert_ignoring_conflicts(db, brief_tags, ["brief_id", "tag_id"]).values(
                    brief_id=brief_id, tag_id=tag.id
                )
            )

        await db.commit()
        await db.refresh(tag)
        return tag

    async def _get_tag_by_name(self, db: AsyncSession, user_id: str, name: str) -> Tag | None:
        result = await db.execute(select(Tag).where(Tag.user_id == user_id, Tag.name == name))
        return result.scalar_one_or_none()

    async def remove_tag_from_brief(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
        tag_id: UUID,
    ) -> bool:
        """Remove a tag association from an owned brief (the tag itself stays)."""
        owned = await db.execute(
            select(Brief.id).where(Brief.id == brief_id, Brief.user_id == user_id)
        )
        if owned.first() is None:
            return False
        result = await db.execute(
            delete(brief_tags).where(
                brief_tags.c.brief_id == brief_id, brief_tags.c.tag_id == tag_id
            )
        )
        await db.commit()
        return (result.rowcount or 0) > 0

    async def delete_tag(self, db: AsyncSession, user_id: str, tag_id: UUID) -> bool:
        """Delete a tag from the user's vocabulary along with all its associations."""
        tag = (
            await db.execute(select(Tag).where(Tag.id == tag_id, Tag.user_id == user_id))
        ).scalar_one_or_none()
        if tag is None:
            return False
        await db.execute(delete(brief_tags).where(brief_tags.c.tag_id == tag_id))
        await db.delete(tag)
        await db.commit()
        logger.info(f"Deleted tag {tag_id} for user {user_id}")
        return True


# Singleton instance
tag_service = TagService()
