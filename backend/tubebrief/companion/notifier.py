"""Completion notifications for the companion client."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

from telegram import Bot
from telegram.error import TelegramError

from tubebrief.config import Settings, TelegramConfig

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    async def notify(self, notification_id: str, title: str, message: str) -> None: ...


class LogNotifier:
    """Writes notifications to the log."""

    async def notify(self, notification_id: str, title: str, message: str) -> None:
        logger.info(f"[{title}] {message} ({notification_id})")


class TelegramNotifier:
    """Sends notifications to a Telegram chat."""

    def __init__(self, config: TelegramConfig, bot: Bot | None = None):
        if not config.bot_token or not config.chat_id:
            raise ValueError("telegram.bot_token and telegram.chat_id are required")
        self.config = config
        self._bot = bot or Bot(token=config.bot_token)

    async def notify(self, notification_id: str, title: str, message: str) -> None:
        """Send with a single retry; delivery failures are logged, not raised."""
        text = f"<b>{title}</b>\n{message}"
        for attempt in range(2):
            try:
                await self._bot.send_message(
                    chat_id=self.config.chat_id,
                    text=text,
                    parse_mode="HTML",
                )
                logger.info(f"Sent Telegram notification {notification_id}")
                return
            except TelegramError as e:
                logger.warning(
                    f"Telegram send failed (attempt {attempt + 1}/2): {e.message}"
                )
            if attempt == 0:
                await asyncio.sleep(2)


def create_notifier(settings: Settings) -> Notifier:
    if settings.companion.notifier == "telegram":
        return TelegramNotifier(settings.telegram)
    return LogNotifier()
