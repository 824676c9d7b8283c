"""Public shared brief route (no authentication)."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.database.dependencies import get_db
from tubebrief.schemas import SharedBriefResponse
from tubebrief.services.brief_service import brief_service

router = APIRouter(prefix="/api/share", tags=["Sharing"])


@router.get("/{slug}", response_model=SharedBriefResponse)
async def get_shared_brief(slug: str, db: AsyncSession = Depends(get_db)):
    """Get a brief by its public slug."""
    brief = await brief_service.get_shared_brief_by_slug(db, slug)
    if brief is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return SharedBriefResponse.model_validate(brief)
