"""Tag vocabulary API routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.api.auth import CurrentUser, get_current_user
from tubebrief.database.dependencies import get_db
from tubebrief.schemas import SuccessResponse, TagWithCountResponse
from tubebrief.services.tag_service import tag_service

router = APIRouter(prefix="/api/tags", tags=["Tags"])


@router.get("", response_model=list[TagWithCountResponse])
async def list_tags(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The user's tag vocabulary with usage counts."""
    tags = await tag_service.get_user_tags(db, user.id)
    return [TagWithCountResponse(**tag) for tag in tags]


@router.delete("/{tag_id}", response_model=SuccessResponse)
async def delete_tag(
    tag_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Delete a tag and remove it from every brief."""
    if not await tag_service.delete_tag(db, user.id, tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return SuccessResponse()
