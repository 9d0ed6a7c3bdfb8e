"""Adapters - I/O implementations of ports."""

from .json_store import JsonTaskRepository, JsonSettingsStore
from .console_notifier import ConsoleNotifier
from .telegram_notifier import TelegramNotifier, NotificationError
from .clock import SystemClock, FixedClock

__all__ = [
    "JsonTaskRepository",
    "JsonSettingsStore",
    "ConsoleNotifier",
    "TelegramNotifier",
    "NotificationError",
    "SystemClock",
    "FixedClock",
]
