"""Brief Celery tasks."""

import asyncio
import logging
from uuid import UUID

from tubebrief.database.session import close_db, get_db_session
from tubebrief.services.brief_service import brief_service
from tubebrief.services.job_service import job_service
from tubebrief.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="tasks.process_brief", queue="ai")
def process_brief_task(job_id: str, user_id: str, video_id: str) -> dict:
    """
    Triggered: POST /api/briefs when no cached brief exists

    Generates the brief for a queued job. Failures are stored on the brief.
    """

    async def _process():
        try:
            await job_service.process_brief(UUID(job_id), user_id, video_id)
            async with get_db_session() as db:
                return await brief_service.get_brief_status(db, UUID(job_id), user_id)
        finally:
            # Engine pools are bound to the event loop created by asyncio.run
            await close_db()

    status = asyncio.run(_process()) or {"status": "missing"}
    logger.info(f"Job {job_id} finished with status {status['status']}")
    return {"job_id": job_id, "status": status["status"], "error": status.get("error")}


@celery_app.task(name="tasks.expire_stalled_briefs", queue="maintenance")
def expire_stalled_briefs_task() -> dict:
    """
    Scheduled: every jobs.expire_stalled_seconds

    Marks queued/processing briefs that exceeded the stall timeout as failed.
    """

    async def _expire():
        try:
            async with get_db_session() as db:
                return await brief_service.expire_stalled_briefs(db)
        finally:
            await close_db()

    return {"expired": asyncio.run(_expire())}
