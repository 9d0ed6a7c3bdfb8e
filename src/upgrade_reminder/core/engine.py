"""
Recurrence engine - advances repeating tasks to their next occurrence.

Pure functions over Task; the only mutation is on the task passed in.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from .tasks import Task


class RecurrenceState(Enum):
    """Where a task sits in its repeat cycle."""

    INACTIVE = "inactive"  # no repeat rule, finish never moves on its own
    SCHEDULED = "scheduled"
    DUE = "due"
    AWAITING_ACK = "awaiting_ack"
    EXPIRED = "expired"


@dataclass
class AdvanceResult:
    """Outcome of one `advance` call."""

    state: RecurrenceState
    previous_due: datetime
    new_due: datetime
    skipped: int = 0

    @property
    def moved(self) -> bool:
        return self.new_due != self.previous_due


def recurrence_state(task: Task, now: datetime | None = None) -> RecurrenceState:
    """Current state; without `now` a due task reads as SCHEDULED."""
    if not task.is_repeating:
        return RecurrenceState.INACTIVE
    if task.expired:
        return RecurrenceState.EXPIRED
    if task.awaiting_ack:
        return RecurrenceState.AWAITING_ACK
    if now is not None and task.finish <= now:
        return RecurrenceState.DUE
    return RecurrenceState.SCHEDULED


def _expire(task: Task) -> None:
    task.expired = True
    task.notified = True
    task.advance_notified = True


def advance(task: Task) -> AdvanceResult:
    """
    Move a repeating task past the occurrence that just came due.

    Each step bumps the occurrence cursor and adds one period (plus the
    rule's offset) to the due instant. Skipped occurrences are passed over
    silently, chaining until a notify occurrence is reached. Reaching the
    rule's end instant expires the task and leaves finish untouched.
    """
    previous = task.finish
    rule = task.recurrence

    if not task.is_repeating or task.expired or task.awaiting_ack:
        return AdvanceResult(
            state=recurrence_state(task), previous_due=previous, new_due=previous
        )

    skipped = 0
    while True:
        task.cursor.occurrence_cursor += 1
        notify = rule.skip is None or rule.skip.is_notify_occurrence(task.cursor.occurrence_cursor)

        candidate = rule.next_after(task.finish)
        if rule.is_past_end(candidate):
            _expire(task)
            return AdvanceResult(
                state=RecurrenceState.EXPIRED,
                previous_due=previous,
                new_due=task.finish,
                skipped=skipped,
            )

        task.finish = candidate
        if notify:
            break
        skipped += 1

    task.cursor.notify_count += 1
    task.notified = False
    task.advance_notified = False
    if rule.pause_until_ack:
        task.awaiting_ack = True
        state = RecurrenceState.AWAITING_ACK
    else:
        state = RecurrenceState.SCHEDULED

    return AdvanceResult(state=state, previous_due=previous, new_due=task.finish, skipped=skipped)


def acknowledge(task: Task, now: datetime, restart: bool = True) -> AdvanceResult:
    """
    Release a task paused after its reminder.

    restart=True starts the next cycle from `now` (now + period + offset);
    restart=False keeps the due instant already computed by `advance`.
    The occurrence cursor is not bumped again either way.
    """
    previous = task.finish
    if not task.awaiting_ack:
        return AdvanceResult(state=recurrence_state(task, now), previous_due=previous, new_due=previous)

    task.awaiting_ack = False
    task.notified = False
    task.advance_notified = False

    if restart and task.is_repeating:
        candidate = task.recurrence.next_after(now)
        if task.recurrence.is_past_end(candidate):
            _expire(task)
            return AdvanceResult(
                state=RecurrenceState.EXPIRED, previous_due=previous, new_due=task.finish
            )
        task.finish = candidate

    return AdvanceResult(
        state=recurrence_state(task, now), previous_due=previous, new_due=task.finish
    )

