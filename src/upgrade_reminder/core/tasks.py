"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from .durations import format_remaining
from .recurrence import RecurrenceRule, SkipCursor

DEFAULT_ACCOUNT = "Default"
TIME_FORMAT = "%Y-%m-%d %H:%M"


def _new_id() -> str:
    return uuid.uuid4().hex


def _parse_dt(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw)
    except (TypeError, ValueError):
        return None


def _fmt_dt(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass
class Task:
    """An upgrade timer owned by an account."""

    account: str = DEFAULT_ACCOUNT
    name: str = "-"
    start: datetime | None = None
    days: int = 0
    hours: int = 0
    minutes: int = 0
    finish: datetime = field(default_factory=datetime.now)
    notified: bool = False
    advance_notified: bool = False
    awaiting_ack: bool = False
    done: bool = False
    completed_time: datetime | None = None
    pending_delete: bool = False
    delete_mark_time: datetime | None = None
    recurrence: RecurrenceRule | None = None
    cursor: SkipCursor = field(default_factory=SkipCursor)
    expired: bool = False
    id: str = field(default_factory=_new_id)

    @classmethod
    def create(
        cls,
        account: str,
        name: str,
        start: datetime | None,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        now: datetime | None = None,
        recurrence: RecurrenceRule | None = None,
    ) -> "Task":
        """New task with its finish computed from start + duration."""
        task = cls(
            account=(account or "").strip() or DEFAULT_ACCOUNT,
            name=(name or "").strip() or "-",
            start=start,
            days=max(0, days),
            hours=max(0, hours),
            minutes=max(0, minutes),
            recurrence=recurrence,
        )
        task.recalc_finish(now)
        return task

    @property
    def duration(self) -> timedelta:
        return timedelta(days=self.days, hours=self.hours, minutes=self.minutes)

    @property
    def is_repeating(self) -> bool:
        return self.recurrence is not None and self.recurrence.is_repeating

    @property
    def is_active(self) -> bool:
        """Takes part in notification checks (done tasks still notify)."""
        return not (self.pending_delete or self.awaiting_ack or self.expired)

    def recalc_finish(self, now: datetime | None = None) -> None:
        """finish = start + duration; a missing start means "now"."""
        base = self.start or now or datetime.now()
        self.finish = base + self.duration

    def reset_schedule(self) -> None:
        """Forget notification and recurrence progress (after a user edit)."""
        self.notified = False
        self.advance_notified = False
        self.awaiting_ack = False
        self.expired = False
        self.cursor.reset()

    def set_start(self, start: datetime | None, now: datetime | None = None) -> None:
        self.start = start
        self.recalc_finish(now)
        self.reset_schedule()

    def set_duration(
        self, days: int, hours: int, minutes: int, now: datetime | None = None
    ) -> None:
        self.days, self.hours, self.minutes = max(0, days), max(0, hours), max(0, minutes)
        self.recalc_finish(now)
        self.reset_schedule()

    def set_recurrence(self, rule: RecurrenceRule | None) -> None:
        self.recurrence = rule if rule is not None and rule.is_repeating else None
        self.reset_schedule()

    def remaining(self, now: datetime) -> timedelta:
        return self.finish - now

    def remaining_str(self, now: datetime) -> str:
        return format_remaining(self.remaining(now))

    @property
    def start_str(self) -> str:
        return self.start.strftime(TIME_FORMAT) if self.start else ""

    @property
    def finish_str(self) -> str:
        return self.finish.strftime(TIME_FORMAT)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "account": self.account,
            "name": self.name,
            "start": _fmt_dt(self.start),
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "finish": _fmt_dt(self.finish),
            "notified": self.notified,
            "advance_notified": self.advance_notified,
            "awaiting_ack": self.awaiting_ack,
            "done": self.done,
            "completed_time": _fmt_dt(self.completed_time),
            "pending_delete": self.pending_delete,
            "delete_mark_time": _fmt_dt(self.delete_mark_time),
            "recurrence": self.recurrence.to_dict() if self.recurrence else None,
            "cursor": self.cursor.to_dict(),
            "expired": self.expired,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from a persisted record; missing keys fall back to defaults."""
        start = _parse_dt(data.get("start"))
        days = int(data.get("days", 0) or 0)
        hours = int(data.get("hours", 0) or 0)
        minutes = int(data.get("minutes", 0) or 0)
        finish = _parse_dt(data.get("finish"))
        if finish is None:
            finish = (start or datetime.now()) + timedelta(days=days, hours=hours, minutes=minutes)

        rule = RecurrenceRule.from_dict(data.get("recurrence"))
        return cls(
            id=str(data.get("id") or _new_id()),
            account=data.get("account") or DEFAULT_ACCOUNT,
            name=data.get("name") or "-",
            start=start,
            days=days,
            hours=hours,
            minutes=minutes,
            finish=finish,
            notified=bool(data.get("notified", False)),
            advance_notified=bool(data.get("advance_notified", False)),
            awaiting_ack=bool(data.get("awaiting_ack", False)),
            done=bool(data.get("done", False)),
            completed_time=_parse_dt(data.get("completed_time")),
            pending_delete=bool(data.get("pending_delete", False)),
            delete_mark_time=_parse_dt(data.get("delete_mark_time")),
            recurrence=rule if rule.is_repeating else None,
            cursor=SkipCursor.from_dict(data.get("cursor")),
            expired=bool(data.get("expired", False)),
        )


def find_task(tasks: list[Task], task_id: str) -> Task | None:
    """Look a task up by id, accepting any unique id prefix."""
    exact = [t for t in tasks if t.id == task_id]
    if exact:
        return exact[0]
    matches = [t for t in tasks if task_id and t.id.startswith(task_id)]
    return matches[0] if len(matches) == 1 else None


def filter_by_account(tasks: list[Task], account: str) -> list[Task]:
    """Filter tasks to a specific account."""
    return [t for t in tasks if t.account.lower() == account.lower()]
