"""Pydantic request/response schemas (camelCase on the wire)."""

from tubebrief.schemas.brief import (
    BriefDetailResponse,
    BriefListResponse,
    BriefStatus,
    BriefStatusResponse,
    BriefSummaryResponse,
    CreateBriefRequest,
    CreateBriefResponse,
    SharedBriefResponse,
    ShareRequest,
    ShareResponse,
)
from tubebrief.schemas.common import BaseSchema, SuccessResponse
from tubebrief.schemas.content import BriefLink, BriefSection, StructuredBrief
from tubebrief.schemas.tag import TagCreate, TagResponse, TagWithCountResponse

__all__ = [
    "BaseSchema",
    "SuccessResponse",
    "BriefLink",
    "BriefSection",
    "StructuredBrief",
    "BriefStatus",
    "CreateBriefRequest",
    "CreateBriefResponse",
    "BriefStatusResponse",
    "BriefSummaryResponse",
    "BriefDetailResponse",
    "SharedBriefResponse",
    "BriefListResponse",
    "ShareRequest",
    "ShareResponse",
    "TagCreate",
    "TagResponse",
    "TagWithCountResponse",
]
