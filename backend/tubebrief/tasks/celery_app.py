"""
Celery configuration for brief processing.

This module configures the Celery application with:
- Redis broker and result backend
- Task routing to queues
- Beat schedule for stalled-job cleanup
- Logfire instrumentation for observability
"""

import logging

from celery import Celery
from celery.signals import worker_process_init

from tubebrief.config import get_settings
from tubebrief.observability import configure_logging, initialize_logfire

logger = logging.getLogger(__name__)

_settings = get_settings()

# Initialize Celery application
celery_app = Celery(
    "tubebrief",
    broker=_settings.jobs.redis_url,
    backend=_settings.jobs.redis_url,
    include=["tubebrief.tasks.brief_tasks"],
)

# Celery configuration
celery_app.conf.update(
    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Timezone
    timezone="UTC",
    enable_utc=True,

    # Task results
    result_expires=3600,

    # Task routing
    task_routes={
        "tasks.process_brief": {"queue": "ai"},
        "tasks.expire_stalled_briefs": {"queue": "maintenance"},
    },

    # Worker configuration
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=100,

    # Task execution
    task_acks_late=True,
    task_reject_on_worker_lost=True,

    # Failures are recorded on the brief; no automatic retries
    task_autoretry_for=(),
    task_retry_kwargs={"max_retries": 0},

    # Monitoring
    worker_send_task_events=True,
    task_send_sent_event=True,
)

# Celery Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    # Fail jobs whose worker died mid-generation
    "expire-stalled-briefs": {
        "task": "tasks.expire_stalled_briefs",
        "schedule": _settings.jobs.expire_stalled_seconds,
    },
}


@worker_process_init.connect
def init_worker_process(**kwargs) -> None:
    """
    Initialize each worker process with logging and observability.

    This runs once per worker process (not per task).
    """
    settings = get_settings()
    configure_logging(settings.log_level)
    initialize_logfire(settings)
    logger.info("Celery worker initialized")
