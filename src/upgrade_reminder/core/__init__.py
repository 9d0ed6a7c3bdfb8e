"""Functional core - pure business logic with no I/O."""

from .durations import normalize_dhms, normalize_ymdhms, format_remaining
from .recurrence import RepeatMode, CustomPeriod, SkipRule, SkipCursor, RecurrenceRule
from .tasks import Task, DEFAULT_ACCOUNT, find_task
from .engine import RecurrenceState, AdvanceResult, advance, acknowledge, recurrence_state
from .settings import Settings
from .notifications import (
    Notification,
    NotificationKind,
    TickResult,
    TickTiming,
    check_due,
    next_interval,
)
from .deletion import DeletionPolicy, purge
from .ordering import sort_by_finish, insert_by_finish

__all__ = [
    # Durations
    "normalize_dhms",
    "normalize_ymdhms",
    "format_remaining",
    # Recurrence
    "RepeatMode",
    "CustomPeriod",
    "SkipRule",
    "SkipCursor",
    "RecurrenceRule",
    # Tasks
    "Task",
    "DEFAULT_ACCOUNT",
    "find_task",
    # Engine
    "RecurrenceState",
    "AdvanceResult",
    "advance",
    "acknowledge",
    "recurrence_state",
    # Settings
    "Settings",
    # Notifications
    "Notification",
    "NotificationKind",
    "TickResult",
    "TickTiming",
    "check_due",
    "next_interval",
    # Deletion
    "DeletionPolicy",
    "purge",
    # Ordering
    "sort_by_finish",
    "insert_by_finish",
]
