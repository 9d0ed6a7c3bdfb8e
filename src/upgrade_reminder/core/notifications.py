"""
Notification scheduling - what to announce on a tick, and when to look again.

Pure functions - no I/O. Delivery is up to the caller.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum

from .engine import AdvanceResult, RecurrenceState, advance
from .settings import Settings
from .tasks import Task


class NotificationKind(Enum):
    ADVANCE = "advance"
    DUE = "due"


@dataclass
class Notification:
    """A message the caller should hand to its notifier."""

    kind: NotificationKind
    title: str
    body: str
    task_id: str


@dataclass(frozen=True)
class TickTiming:
    """Bounds for the adaptive check interval, in seconds."""

    min_seconds: float = 1.0
    max_seconds: float = 5.0
    guard_seconds: float = 3.0


@dataclass
class TickResult:
    """Everything one tick decided."""

    notifications: list[Notification] = field(default_factory=list)
    changed: list[Task] = field(default_factory=list)
    advances: dict[str, AdvanceResult] = field(default_factory=dict)
    awaiting_ack: list[Task] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.changed)


def advance_notification(task: Task) -> Notification:
    return Notification(
        kind=NotificationKind.ADVANCE,
        title=f"[Soon] {task.account}",
        body=f"{task.name} is almost done, finishes at {task.finish_str}",
        task_id=task.id,
    )


def due_notification(task: Task) -> Notification:
    return Notification(
        kind=NotificationKind.DUE,
        title=f"[Done] {task.account}",
        body=f"{task.name} finished at {task.finish_str}",
        task_id=task.id,
    )


def _suppress_due(task: Task, settings: Settings) -> bool:
    """Due popup is dropped when the advance one already went out and the user opted out."""
    return not settings.also_notify_at_due and task.advance_notified


def check_due(tasks: list[Task], settings: Settings, now: datetime) -> TickResult:
    """
    Run one notification pass over all active tasks.

    For each task:
    1. advance notification once `finish - advance_notify_seconds <= now`
    2. due notification once `finish <= now` (or a silent mark when the
       advance notification already covered it)
    3. repeating tasks then move on to their next occurrence
    """
    result = TickResult()
    lead = settings.advance_notify_seconds

    for task in tasks:
        if not task.is_active:
            continue
        changed = False

        if lead > 0 and not task.advance_notified and task.finish > now:
            if task.finish - timedelta(seconds=lead) <= now:
                result.notifications.append(advance_notification(task))
                task.advance_notified = True
                changed = True

        if task.finish <= now and not task.notified:
            if not _suppress_due(task, settings):
                result.notifications.append(due_notification(task))
            task.notified = True
            changed = True

            if task.is_repeating:
                outcome = advance(task)
                result.advances[task.id] = outcome
                if outcome.state == RecurrenceState.AWAITING_ACK:
                    result.awaiting_ack.append(task)

        if changed:
            result.changed.append(task)

    return result


def next_wake_instant(tasks: list[Task], settings: Settings, now: datetime) -> datetime | None:
    """Nearest future instant at which some notification may fire."""
    lead = settings.advance_notify_seconds
    candidates = []

    for task in tasks:
        if not task.is_active:
            continue
        if lead > 0 and not task.advance_notified:
            advance_at = task.finish - timedelta(seconds=lead)
            if advance_at > now:
                candidates.append(advance_at)
        if task.notified or task.finish <= now:
            continue
        # a suppressed repeating task still has to advance at finish
        if task.is_repeating or not _suppress_due(task, settings):
            candidates.append(task.finish)

    return min(candidates, default=None)


def next_interval(
    tasks: list[Task],
    settings: Settings,
    now: datetime,
    timing: TickTiming = TickTiming(),
) -> float:
    """
    Seconds until the next check.

    Wakes `guard_seconds` ahead of the nearest pending instant, never sooner
    than `min_seconds` and never later than `max_seconds`.
    """
    target = next_wake_instant(tasks, settings, now)
    if target is None:
        return timing.max_seconds

    target -= timedelta(seconds=timing.guard_seconds)
    if target < now:
        target = now + timedelta(seconds=timing.min_seconds)

    delta = max(0.0, (target - now).total_seconds())
    return min(max(delta, timing.min_seconds), timing.max_seconds)
