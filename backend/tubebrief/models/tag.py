"""Tag database model and the brief/tag association table."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    String,
    Table,
    UniqueConstraint,
    Uuid,
)

from tubebrief.database.base import Base, UUIDMixin, utc_now

brief_tags = Table(
    "brief_tags",
    Base.metadata,
    Column("brief_id", Uuid(as_uuid=True), ForeignKey("briefs.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", Uuid(as_uuid=True), ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
    Column("created_at", DateTime(timezone=True), nullable=False, default=utc_now),
    Index("idx_brief_tags_tag", "tag_id"),
)


class Tag(Base, UUIDMixin):
    """User-defined label, unique per user by normalized name."""

    __tablename__ = "tags"

    user_id = Column(String(255), nullable=False, index=True)
    name = Column(String(50), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utc_now)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tags_user_name"),
    )

    def __repr__(self) -> str:
        return f"<Tag {self.name}>"
