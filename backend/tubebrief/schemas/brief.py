"""Brief Pydantic schemas."""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from pydantic import Field, StrictBool

from tubebrief.schemas.common import BaseSchema
from tubebrief.schemas.tag import TagResponse


class BriefStatus(str, Enum):
    """Brief job status enum."""

    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class CreateBriefRequest(BaseSchema):
    """Body of POST /api/briefs."""

    url: Optional[str] = None


class CreateBriefResponse(BaseSchema):
    """Job handle returned when a brief is requested."""

    job_id: UUID
    status: BriefStatus
    brief_id: Optional[UUID] = None


class BriefStatusResponse(BaseSchema):
    """Current state of a brief job."""

    status: BriefStatus
    brief_id: UUID
    error: Optional[str] = None


class BriefSummaryResponse(BaseSchema):
    """Brief card for library listings."""

    id: UUID
    video_id: str
    title: str
    channel_name: str
    channel_slug: str
    duration: Optional[str] = None
    thumbnail_url: Optional[str] = None
    summary: str
    is_shared: bool
    slug: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    tags: list[TagResponse] = Field(default_factory=list)


class BriefDetailResponse(BriefSummaryResponse):
    """Full brief with generated content."""

    user_id: str
    published_at: Optional[datetime] = None
    sections: list[dict[str, Any]] = Field(default_factory=list)
    related_links: list[dict[str, Any]] = Field(default_factory=list)
    other_links: list[dict[str, Any]] = Field(default_factory=list)
    has_creator_chapters: bool
    status: BriefStatus
    error_message: Optional[str] = None


class SharedBriefResponse(BaseSchema):
    """Public view of a shared brief (no ownership details)."""

    id: UUID
    video_id: str
    title: str
    channel_name: str
    duration: Optional[str] = None
    published_at: Optional[datetime] = None
    thumbnail_url: Optional[str] = None
    summary: str
    sections: list[dict[str, Any]] = Field(default_factory=list)
    related_links: list[dict[str, Any]] = Field(default_factory=list)
    other_links: list[dict[str, Any]] = Field(default_factory=list)
    has_creator_chapters: bool
    slug: Optional[str] = None
    created_at: datetime


class BriefListResponse(BaseSchema):
    """Paginated library listing."""

    briefs: list[BriefSummaryResponse]
    total: int
    has_more: bool


class ShareRequest(BaseSchema):
    """Body of PATCH /api/brief/{id}/share."""

    is_shared: StrictBool
    title: Optional[str] = None


class ShareResponse(BaseSchema):
    """Sharing state after a toggle."""

    is_shared: bool
    slug: Optional[str] = None
