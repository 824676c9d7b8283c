"""Tag Pydantic schemas."""

from datetime import datetime
from uuid import UUID

from tubebrief.schemas.common import BaseSchema


class TagCreate(BaseSchema):
    """Body of POST /api/brief/{id}/tags."""

    name: str = ""


class TagResponse(BaseSchema):
    """Tag attached to a brief."""

    id: UUID
    name: str
    created_at: datetime


class TagWithCountResponse(TagResponse):
    """Tag in the user's vocabulary with the number of briefs using it."""

    usage_count: int = 0
