"""Brief creation, job status and library API routes."""

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.api.auth import CurrentUser, get_current_user, require_generation_access
from tubebrief.config import get_settings
from tubebrief.database.dependencies import get_db
from tubebrief.schemas import (
    BriefListResponse,
    BriefStatusResponse,
    BriefSummaryResponse,
    CreateBriefRequest,
)
from tubebrief.services.brief_service import brief_service
from tubebrief.services.job_service import Dispatcher, job_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/briefs", tags=["Briefs"])


def get_dispatcher(background_tasks: BackgroundTasks) -> Dispatcher:
    """Hand queued jobs to Celery or to in-process background tasks."""
    if get_settings().jobs.backend == "celery":
        from tubebrief.tasks.brief_tasks import process_brief_task

        def dispatch(job_id: UUID, user_id: str, video_id: str) -> None:
            process_brief_task.delay(str(job_id), user_id, video_id)
    else:
        def dispatch(job_id: UUID, user_id: str, video_id: str) -> None:
            background_tasks.add_task(job_service.process_brief, job_id, user_id, video_id)

    return dispatch


@router.post("")
async def create_brief(
    body: CreateBriefRequest,
    user: CurrentUser = Depends(require_generation_access),
    dispatch: Dispatcher = Depends(get_dispatcher),
    db: AsyncSession = Depends(get_db),
):
    """Request a brief; returns a cached brief, an in-flight job or a new queued job."""
    response, status_code = await job_service.request_brief(db, user.id, body.url, dispatch)
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.get("", response_model=BriefListResponse)
async def list_briefs(
    search: Optional[str] = None,
    tags: Optional[str] = Query(None, description="Comma-separated tag names (all must match)"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    limit: Optional[int] = Query(None, ge=1),
    offset: int = Query(0, ge=0),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """List the user's completed briefs with search, tag and date filters."""
    tag_names = [name for name in (tags or "").split(",") if name.strip()]
    page = await brief_service.list_briefs(
        db,
        user.id,
        limit=limit,
        offset=offset,
        search=search,
        tags=tag_names,
        date_from=date_from,
        date_to=date_to,
    )
    return BriefListResponse(
        briefs=[BriefSummaryResponse.model_validate(b) for b in page.briefs],
        total=page.total,
        has_more=page.has_more,
    )


@router.get(
    "/{brief_id}/status",
    response_model=BriefStatusResponse,
    response_model_exclude_none=True,
)
async def get_brief_status(
    brief_id: UUID,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Poll the status of a brief job."""
    status = await brief_service.get_brief_status(db, brief_id, user.id)
    if status is None:
        raise HTTPException(status_code=404, detail="Brief not found")
    return BriefStatusResponse(**status)
