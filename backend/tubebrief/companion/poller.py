"""Background polling for queued brief jobs."""

from __future__ import annotations

import asyncio
import logging
import time

from tubebrief.companion.api import AuthError, BriefApiClient, BriefApiError
from tubebrief.companion.notifier import Notifier
from tubebrief.companion.storage import (
    RecentBriefStore,
    processing_briefs,
    unseen_count,
)
from tubebrief.config import CompanionConfig

logger = logging.getLogger(__name__)

TIMED_OUT_MESSAGE = "Timed out — please try again."
NOT_FOUND_MESSAGE = "Brief not found"


class BriefPoller:
    """
    Polls job status for processing entries in the recent brief store.

    A single poll task runs at a time. Calling start() while one is pending
    replaces it.
    """

    def __init__(
        self,
        api: BriefApiClient,
        store: RecentBriefStore,
        notifier: Notifier,
        config: CompanionConfig | None = None,
    ):
        self.api = api
        self.store = store
        self.notifier = notifier
        self.config = config or CompanionConfig()
        self._task: asyncio.Task | None = None

    @property
    def is_polling(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self, delay: float | None = None) -> asyncio.Task:
        """Schedule a poll after `delay` seconds, repeating while jobs are processing."""
        if delay is None:
            delay = self.config.poll_delay_seconds
        if self.is_polling:
            self._task.cancel()
        self._task = asyncio.create_task(self._run(delay))
        return self._task

    def resume(self) -> asyncio.Task | None:
        """Start polling immediately if processing jobs were left from a previous run."""
        if processing_briefs(self.store.load()):
            logger.info("Resuming polling for leftover jobs")
            return self.start(0)
        return None

    async def wait(self) -> None:
        if self._task is not None:
            try:
                await self._task
            except asyncio.CancelledError:
                pass

    def stop(self) -> None:
        if self.is_polling:
            self._task.cancel()
        self._task = None

    async def _run(self, delay: float) -> None:
        await asyncio.sleep(delay)
        while True:
            auth_ok = await self.poll_pending_jobs()
            if not auth_ok or not processing_briefs(self.store.load()):
                return
            await asyncio.sleep(self.config.poll_interval_seconds)

    async def poll_pending_jobs(self) -> bool:
        """Check every processing job once. Returns False when authentication failed."""
        processing = processing_briefs(self.store.load())
        stale_after = self.config.stale_job_minutes * 60

        for job in processing:
            if time.time() - job.created_at > stale_after:
                logger.info(f"Job {job.job_id} timed out")
                self.store.update_status(job.job_id, "failed", error=TIMED_OUT_MESSAGE)
                continue

            try:
                result = await self.api.check_brief_status(job.job_id)
            except AuthError:
                logger.warning("Not authenticated, stopping polling")
                return False
            except BriefApiError as e:
                if e.message == NOT_FOUND_MESSAGE:
                    self.store.remove(job.job_id)
                else:
                    logger.warning(f"Status check failed for job {job.job_id}: {e.message}")
                continue

            if result.status == "completed":
                self.store.update_status(job.job_id, "completed", brief_id=result.brief_id)
                message = (
                    f'Your brief for "{job.video_title}" is ready!'
                    if job.video_title
                    else "Your brief is ready!"
                )
                await self.notifier.notify(
                    f"brief-complete-{result.brief_id}", "Brief Ready", message
                )
            elif result.status == "failed":
                self.store.update_status(job.job_id, "failed", error=result.error)
                await self.notifier.notify(
                    f"brief-failed-{job.job_id}",
                    "Brief Failed",
                    result.error or "Something went wrong creating your brief.",
                )

        return True

    async def verify_completed_briefs(self) -> int:
        """Drop completed entries whose brief was deleted on the server."""
        removed = 0
        for brief in self.store.load():
            if brief.status != "completed":
                continue
            try:
                await self.api.check_brief_status(brief.job_id)
            except AuthError:
                break
            except BriefApiError as e:
                if e.message == NOT_FOUND_MESSAGE:
                    self.store.remove(brief.job_id)
                    removed += 1
        return removed

    def badge_text(self) -> str:
        count = unseen_count(self.store.load())
        return str(count) if count > 0 else ""

    async def submit(self, video_url: str, video_title: str = "") -> str:
        """
        Request a brief and track it.

        Cached briefs are recorded as completed right away. New jobs are
        recorded as processing and polling starts after the configured delay.
        Returns the job id.
        """
        response = await self.api.create_brief(video_url)
        job_id = str(response.job_id)
        if response.status == "completed" and response.brief_id:
            self.store.add_completed(job_id, video_url, video_title, str(response.brief_id))
        else:
            self.store.add(job_id, video_url, video_title)
            self.start()
        return job_id
