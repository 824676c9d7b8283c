"""
Brief job lifecycle.

Resolves brief requests against the user and global caches, queues new
generation jobs and runs them to completion or failure.
"""

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from typing import AsyncIterator, Callable, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tubebrief.config import get_settings
from tubebrief.database.session import get_db_session
from tubebrief.parsing import extract_video_id
from tubebrief.schemas.brief import BriefStatus, CreateBriefResponse
from tubebrief.services.brief_service import brief_service
from tubebrief.services.exceptions import BriefNotFoundError, InvalidVideoURLError
from tubebrief.services.generator import BriefGenerator

logger = logging.getLogger(__name__)

Dispatcher = Callable[[UUID, str, str], None]
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]

STEP_MESSAGES = {
    "metadata": "Fetching video info...",
    "transcript": "Extracting transcript...",
    "analyzing": "Analyzing content...",
    "saving": "Saving brief...",
    "complete": "Done!",
}


def progress_event(step: str, message: Optional[str] = None) -> dict:
    return {"step": step, "message": message or STEP_MESSAGES.get(step, "")}


class JobService:
    """Creates, runs and regenerates brief jobs."""

    def __init__(
        self,
        generator_factory: Callable[[], BriefGenerator] = BriefGenerator,
        session_factory: SessionFactory = get_db_session,
    ):
        self._generator_factory = generator_factory
        self._session_factory = session_factory

    async def request_brief(
        self,
        db: AsyncSession,
        user_id: str,
        url: Optional[str],
        dispatch: Dispatcher,
    ) -> tuple[CreateBriefResponse, int]:
        """
        Resolve a brief request.

        Order: fresh user cache, pending job in the pending window, fresh
        global cache (copied to the user), otherwise a new queued job.

        Returns:
            The job handle and the HTTP status code (200 for reuse, 202 when queued).
        """
        if not url:
            raise InvalidVideoURLError("URL is required")
        video_id = extract_video_id(url)
        if not video_id:
            raise InvalidVideoURLError("Invalid YouTube URL")

        freshness_hours = get_settings().briefs.freshness_hours

        user_brief = await brief_service.get_brief_by_video_id(db, user_id, video_id)
        if user_brief and not user_brief.is_stale(freshness_hours):
            logger.info(f"User cache hit for {video_id}: {user_brief.id}")
            return (
                CreateBriefResponse(
                    job_id=user_brief.id,
                    status=BriefStatus.COMPLETED,
                    brief_id=user_brief.id,
                ),
                200,
            )

        pending = await brief_service.get_pending_brief_by_video_id(db, user_id, video_id)
        if pending:
            logger.info(f"Reusing pending job {pending.id} for {video_id}")
            return CreateBriefResponse(job_id=pending.id, status=BriefStatus(pending.status)), 200

        global_brief = await brief_service.find_global_brief_by_video_id(db, video_id)
        if global_brief and not global_brief.is_stale(freshness_hours):
            copied = await brief_service.copy_brief_for_user(db, global_brief, user_id)
            logger.info(f"Global cache hit for {video_id}: copied {global_brief.id} -> {copied.id}")
            return (
                CreateBriefResponse(
                    job_id=copied.id,
                    status=BriefStatus.COMPLETED,
                    brief_id=copied.id,
                ),
                200,
            )

        job = await brief_service.create_pending_brief(db, user_id, video_id)
        dispatch(job.id, user_id, video_id)
        return CreateBriefResponse(job_id=job.id, status=BriefStatus.QUEUED), 202

    async def process_brief(self, job_id: UUID, user_id: str, video_id: str) -> None:
        """Run a queued job; failures are recorded on the brief, never raised."""
        async with self._session_factory() as db:
            try:
                await brief_service.update_brief_status(db, job_id, "processing")
                generated = await self._generator_factory().generate(video_id)
                await brief_service.complete_pending_brief(db, user_id, job_id, generated)
                logger.info(f"Brief job completed: {job_id}")
            except Exception as e:
                logger.error(f"Brief job failed: {job_id}: {e}")
                message = str(e) or "Failed to create brief"
                try:
                    await db.rollback()
                    await brief_service.update_brief_status(db, job_id, "failed", message)
                except Exception as status_error:
                    logger.error(f"Failed to mark job {job_id} as failed: {status_error}")

    async def regenerate_brief(self, user_id: str, brief_id: UUID) -> AsyncIterator[dict]:
        """Refresh an owned brief in place, yielding progress events."""
        async with self._session_factory() as db:
            async for event in self._regenerate(db, user_id, brief_id):
                yield event

    async def _regenerate(
        self,
        db: AsyncSession,
        user_id: str,
        brief_id: UUID,
    ) -> AsyncIterator[dict]:
        try:
            existing = await brief_service.get_brief_by_id(db, brief_id, user_id)
            if existing is None:
                raise BriefNotFoundError()

            logger.info(f"Regenerating brief {brief_id} (video {existing.video_id})")
            generator = self._generator_factory()
            generator.ensure_configured()

            steps: asyncio.Queue[str] = asyncio.Queue()
            task = asyncio.create_task(
                generator.generate(existing.video_id, progress=steps.put)
            )
            try:
                while not task.done():
                    next_step = asyncio.ensure_future(steps.get())
                    await asyncio.wait({task, next_step}, return_when=asyncio.FIRST_COMPLETED)
                    if next_step.done():
                        yield progress_event(next_step.result())
                    else:
                        next_step.cancel()
                while not steps.empty():
                    yield progress_event(steps.get_nowait())
            finally:
                if not task.done():
                    task.cancel()
            generated = task.result()

            yield progress_event("saving")
            await brief_service.update_brief(db, user_id, brief_id, generated)
            yield progress_event("complete")
        except Exception as e:
            logger.error(f"Regeneration failed for {brief_id}: {e}")
            yield progress_event("error", str(e) or "Failed to regenerate brief")


# Singleton instance
job_service = JobService()
