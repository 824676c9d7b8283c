"""SQLAlchemy database models for TubeBrief."""

from tubebrief.models.brief import (
    BRIEF_STATUSES,
    PENDING_STATUSES,
    PLACEHOLDER_TITLE,
    Brief,
)
from tubebrief.models.tag import Tag, brief_tags

__all__ = [
    "Brief",
    "Tag",
    "brief_tags",
    "BRIEF_STATUSES",
    "PENDING_STATUSES",
    "PLACEHOLDER_TITLE",
]
