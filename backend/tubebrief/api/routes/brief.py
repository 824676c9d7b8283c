"""Single brief API routes: detail, delete, sharing, regeneration and tags."""

import json
import logging
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import StreamingResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.api.auth import CurrentUser, get_current_user, require_generation_access
from tubebrief.database.dependencies import get_db
from tubebrief.schemas import (
    BriefDetailResponse,
    ShareRequest,
    ShareResponse,
    SuccessResponse,
    TagResponse,
)
from tubebrief.services.brief_service import brief_service
from tubebrief.services.exceptions import BriefServiceError
from tubebrief.services.job_service import job_service
from tubebrief.services.tag_service import tag_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/brief", tags=["Brief"])


@router.get("/{brief_id}", response_model=BriefDetailResponse)
async def get_brief(
    brief_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get a brief with its tags."""
    brief = await brief_service.get_brief_by_id(db, brief_id, user.id)
    if brief is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return BriefDetailResponse.model_validate(brief)


@router.delete("/{brief_id}", response_model=SuccessResponse)
async def delete_brief(
    brief_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a brief."""
    if not await brief_service.delete_brief(db, user.id, brief_id):
        raise HTTPException(status_code=404, detail="Brief not found")
    return SuccessResponse()


@router.patch("/{brief_id}/share", response_model=ShareResponse)
async def update_sharing(
    brief_id: UUID,
    body: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Enable or disable the public link of a brief."""
    if not isinstance(body.get("isShared"), bool):
        raise HTTPException(status_code=400, detail="isShared must be a boolean")
    request = ShareRequest.model_validate(body)

    result = await brief_service.toggle_sharing(
        db, user.id, brief_id, request.is_shared, request.title
    )
    if result is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return ShareResponse(**result)


@router.post("/{brief_id}/regenerate")
async def regenerate_brief(
    brief_id: UUID,
    user: CurrentUser = Depends(require_generation_access),
):
    """Regenerate a brief, streaming progress as Server-Sent Events."""

    async def event_stream():
        async for event in job_service.regenerate_brief(user.id, brief_id):
            yield f"data: {json.dumps(event)}\n\n"

    return StreamingResponse(
        event_stream(),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
    )


@router.get("/{brief_id}/tags", response_model=list[TagResponse])
async def get_brief_tags(
    brief_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the tags of a brief."""
    brief = await brief_service.get_brief_by_id(db, brief_id, user.id)
    if brief is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return [TagResponse.model_validate(tag) for tag in brief.tags]


@router.post("/{brief_id}/tags", response_model=TagResponse)
async def add_tag(
    brief_id: UUID,
    body: dict[str, Any] = Body(...),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Attach a tag (created on demand) to a brief."""
    name = body.get("name")
    if not name or not isinstance(name, str):
        raise HTTPException(status_code=400, detail="Tag name is required")

    try:
        tag = await tag_service.add_tag_to_brief(db, user.id, brief_id, name)
    except BriefServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return TagResponse.model_validate(tag)


@router.delete("/{brief_id}/tags/{tag_id}", response_model=SuccessResponse)
async def remove_tag(
    brief_id: UUID,
    tag_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Detach a tag from a brief."""
    if not await tag_service.remove_tag_from_brief(db, user.id, brief_id, tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return SuccessResponse()
