"""Brief database model."""

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB

from tubebrief.database.base import Base, TimestampMixin, UUIDMixin, utc_now

JSONType = JSON().with_variant(JSONB(), "postgresql")

BRIEF_STATUSES = ("queued", "processing", "completed", "failed")
PENDING_STATUSES = ("queued", "processing")
PLACEHOLDER_TITLE = "Processing..."


class Brief(Base, UUIDMixin, TimestampMixin):
    """AI-generated brief of a single YouTube video, owned by one user."""

    __tablename__ = "briefs"

    # Ownership
    user_id = Column(String(255), nullable=False, index=True)

    # Video metadata
    video_id = Column(String(20), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    channel_name = Column(String(255), nullable=False, default="")
    channel_slug = Column(String(255), nullable=False, default="")
    duration = Column(String(32), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    thumbnail_url = Column(String(500), nullable=True)

    # Generated content
    summary = Column(Text, nullable=False, default="")
    sections = Column(JSONType, nullable=False, default=list)
    related_links = Column(JSONType, nullable=False, default=list)
    other_links = Column(JSONType, nullable=False, default=list)
    has_creator_chapters = Column(Boolean, nullable=False, default=False)
    search_text = Column(Text, nullable=True)

    # Sharing
    is_shared = Column(Boolean, nullable=False, default=False)
    slug = Column(String(80), nullable=True, unique=True)

    # Job lifecycle
    status = Column(String(20), nullable=False, default="completed")
    error_message = Column(Text, nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint(
            "status IN ('queued', 'processing', 'completed', 'failed')",
            name="valid_brief_status",
        ),
        Index("idx_briefs_user_video", "user_id", "video_id"),
        Index("idx_briefs_user_created", "user_id", "created_at"),
        Index("idx_briefs_status_created", "status", "created_at"),
        Index(
            "idx_briefs_search",
            text("to_tsvector('english', coalesce(search_text, ''))"),
            postgresql_using="gin",
        ).ddl_if(dialect="postgresql"),
    )

    @property
    def last_refreshed_at(self) -> Optional[datetime]:
        return self.updated_at or self.created_at

    def is_stale(self, freshness_hours: int = 24, now: Optional[datetime] = None) -> bool:
        """True when the brief is older than the freshness window."""
        refreshed = self.last_refreshed_at
        if refreshed is None:
            return True
        if refreshed.tzinfo is None:
            # SQLite hands back naive datetimes
            refreshed = refreshed.replace(tzinfo=timezone.utc)
        now = now or utc_now()
        return now - refreshed > timedelta(hours=freshness_hours)

    def __repr__(self) -> str:
        return f"<Brief {self.video_id} {self.title[:50]!r} ({self.status})>"
