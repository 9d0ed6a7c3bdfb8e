"""Deletion policy - when a withdrawn or finished task leaves the list."""

from dataclasses import dataclass
from datetime import datetime

from .settings import PENDING_DELETE_GRACE_SECONDS, Settings
from .tasks import Task


@dataclass(frozen=True)
class DeletionPolicy:
    """
    Two independent grace windows.

    - pending delete: removed `pending_delete_grace_seconds` after being
      marked (the undo window), or immediately when forced
    - completed: removed `completed_retention_seconds` after completion;
      None keeps completed tasks forever

    Pure - the answer depends only on (task, now, force).
    """

    pending_delete_grace_seconds: float = PENDING_DELETE_GRACE_SECONDS
    completed_retention_seconds: float | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "DeletionPolicy":
        keep = settings.auto_delete_completed_seconds
        return cls(
            pending_delete_grace_seconds=settings.pending_delete_grace_seconds,
            completed_retention_seconds=keep if keep > 0 else None,
        )

    def should_purge(self, task: Task, now: datetime, force: bool = False) -> bool:
        if task.pending_delete:
            if force or task.delete_mark_time is None:
                return True
            return (now - task.delete_mark_time).total_seconds() >= self.pending_delete_grace_seconds

        if task.done and task.completed_time is not None:
            if self.completed_retention_seconds is None:
                return False
            return (now - task.completed_time).total_seconds() >= self.completed_retention_seconds

        return False


def purge(
    tasks: list[Task], policy: DeletionPolicy, now: datetime, force: bool = False
) -> tuple[list[Task], list[Task]]:
    """
    Split tasks into those to keep and those the policy removes.

    Returns: (kept, removed), both in input order.
    """
    kept, removed = [], []
    for task in tasks:
        (removed if policy.should_purge(task, now, force) else kept).append(task)
    return kept, removed
