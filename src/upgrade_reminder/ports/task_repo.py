"""Task repository interface."""

from collections.abc import Hashable
from typing import Protocol

from upgrade_reminder.core.tasks import Task


class TaskRepository(Protocol):
    """Interface for loading and saving the task list."""

    def load(self) -> list[Task]:
        """Load all tasks. Returns an empty list when nothing is stored."""
        ...

    def save(self, tasks: list[Task]) -> None:
        """Overwrite the stored task list."""
        ...

    def stamp(self) -> Hashable:
        """Opaque token that changes whenever the stored list changes."""
        ...
