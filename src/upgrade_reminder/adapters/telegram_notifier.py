"""Telegram notifier - sends reminders through the Bot API."""

import logging

import requests

API_BASE = "https://api.telegram.org"

logger = logging.getLogger(__name__)


class NotificationError(Exception):
    """Raised when a notification could not be delivered."""

    pass


class TelegramNotifier:
    """
    Telegram Bot API notifier.

    Implements Notifier protocol. Sends one message per configured chat.
    """

    def __init__(self, token: str, chat_ids: list[int], timeout: float = 10.0):
        if not token:
            raise ValueError(
                "TELEGRAM_BOT_TOKEN not configured. "
                "Get a token from @BotFather on Telegram and add it to reminder.conf"
            )
        if not chat_ids:
            raise ValueError("TELEGRAM_CHAT_IDS not configured in reminder.conf")
        self.token = token
        self.chat_ids = chat_ids
        self.timeout = timeout
        self._session = requests.Session()

    def notify(self, title: str, body: str) -> None:
        """Send to every chat; raise NotificationError if any send failed."""
        failed = []
        for chat_id in self.chat_ids:
            try:
                resp = self._session.post(
                    f"{API_BASE}/bot{self.token}/sendMessage",
                    json={"chat_id": chat_id, "text": f"{title}\n{body}"},
                    timeout=self.timeout,
                )
                resp.raise_for_status()
            except requests.RequestException as e:
                logger.error(f"Failed to send notification to chat {chat_id}: {e}")
                failed.append(chat_id)

        if failed:
            raise NotificationError(f"Telegram delivery failed for chats: {failed}")
