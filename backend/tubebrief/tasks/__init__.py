"""Celery tasks module."""

from tubebrief.tasks.brief_tasks import expire_stalled_briefs_task, process_brief_task
from tubebrief.tasks.celery_app import celery_app

__all__ = [
    "celery_app",
    "process_brief_task",
    "expire_stalled_briefs_task",
]
