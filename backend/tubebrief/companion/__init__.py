"""Companion client: submits briefs and polls for completion."""

from tubebrief.companion.api import AuthError, BriefApiClient, BriefApiError
from tubebrief.companion.notifier import (
    LogNotifier,
    Notifier,
    TelegramNotifier,
    create_notifier,
)
from tubebrief.companion.poller import BriefPoller
from tubebrief.companion.storage import (
    RecentBrief,
    RecentBriefStore,
    processing_briefs,
    unseen_count,
)

__all__ = [
    "AuthError",
    "BriefApiClient",
    "BriefApiError",
    "BriefPoller",
    "LogNotifier",
    "Notifier",
    "RecentBrief",
    "RecentBriefStore",
    "TelegramNotifier",
    "create_notifier",
    "processing_briefs",
    "unseen_count",
]
