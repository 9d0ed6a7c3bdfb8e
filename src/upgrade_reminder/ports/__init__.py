"""Ports - interfaces/protocols for external dependencies."""

from .task_repo import TaskRepository
from .settings_store import SettingsStore
from .notifier import Notifier
from .clock import Clock

__all__ = [
    "TaskRepository",
    "SettingsStore",
    "Notifier",
    "Clock",
]
