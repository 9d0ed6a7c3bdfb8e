"""Recurrence rule model - pure data and derived predicates, no I/O."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from dateutil.relativedelta import relativedelta

from .durations import normalize_ymdhms

logger = logging.getLogger(__name__)


class RepeatMode(Enum):
    """How a task repeats after it comes due."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, raw: str | None) -> "RepeatMode":
        """Lenient lookup by value or name; unknown input means NONE."""
        if not raw:
            return cls.NONE
        key = str(raw).strip().lower()
        for mode in cls:
            if mode.value == key:
                return mode
        return cls.NONE


PRESET_PERIODS = {
    RepeatMode.DAILY: relativedelta(days=1),
    RepeatMode.WEEKLY: relativedelta(days=7),
    RepeatMode.MONTHLY: relativedelta(months=1),
    RepeatMode.YEARLY: relativedelta(years=1),
}


@dataclass(frozen=True)
class CustomPeriod:
    """A custom repeat period with second precision."""

    years: int = 0
    months: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.years, self.months, self.days, self.hours, self.minutes, self.seconds)
        )

    def normalized(self) -> "CustomPeriod":
        """Carry-resolved copy (months into years, seconds up into days)."""
        return CustomPeriod(
            *normalize_ymdhms(
                self.years, self.months, self.days, self.hours, self.minutes, self.seconds
            )
        )

    def to_relativedelta(self) -> relativedelta:
        return relativedelta(
            years=self.years,
            months=self.months,
            days=self.days,
            hours=self.hours,
            minutes=self.minutes,
            seconds=self.seconds,
        )

    def to_dict(self) -> dict:
        return {
            "years": self.years,
            "months": self.months,
            "days": self.days,
            "hours": self.hours,
            "minutes": self.minutes,
            "seconds": self.seconds,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CustomPeriod":
        return cls(
            years=int(data.get("years", 0) or 0),
            months=int(data.get("months", 0) or 0),
            days=int(data.get("days", 0) or 0),
            hours=int(data.get("hours", 0) or 0),
            minutes=int(data.get("minutes", 0) or 0),
            seconds=int(data.get("seconds", 0) or 0),
        )


@dataclass(frozen=True)
class SkipRule:
    """Notify `remind_every` times, then silently skip `skip_count` times."""

    remind_every: int
    skip_count: int

    @property
    def is_active(self) -> bool:
        return self.remind_every > 0 and self.skip_count > 0

    @property
    def cycle_length(self) -> int:
        return self.remind_every + self.skip_count

    def is_notify_occurrence(self, occurrence: int) -> bool:
        """Whether the Nth occurrence (1-indexed) falls in the notify part of its cycle."""
        if not self.is_active:
            return True
        position = (occurrence - 1) % self.cycle_length + 1
        return position <= self.remind_every


@dataclass
class SkipCursor:
    """Occurrences fired so far versus occurrences actually notified."""

    occurrence_cursor: int = 0
    notify_count: int = 0

    def reset(self) -> None:
        self.occurrence_cursor = 0
        self.notify_count = 0

    def to_dict(self) -> dict:
        return {"occurrence_cursor": self.occurrence_cursor, "notify_count": self.notify_count}

    @classmethod
    def from_dict(cls, data: dict | None) -> "SkipCursor":
        if not data:
            return cls()
        cursor = max(0, int(data.get("occurrence_cursor", 0) or 0))
        count = max(0, int(data.get("notify_count", 0) or 0))
        return cls(occurrence_cursor=cursor, notify_count=min(count, cursor))


@dataclass(frozen=True)
class RecurrenceRule:
    """
    Repeat settings for a task.

    Build through `RecurrenceRule.create` to get normalized input; the
    derived predicates also tolerate raw, unnormalized values.
    """

    mode: RepeatMode = RepeatMode.NONE
    custom: CustomPeriod | None = None
    end_at: datetime | None = None
    skip: SkipRule | None = None
    pause_until_ack: bool = False
    offset_after_seconds: int = 0

    @property
    def is_repeating(self) -> bool:
        if self.mode == RepeatMode.NONE:
            return False
        if self.mode == RepeatMode.CUSTOM:
            return self.custom is not None and not self.custom.is_empty
        return True

    @property
    def has_end(self) -> bool:
        return self.end_at is not None

    @property
    def has_skip(self) -> bool:
        return self.skip is not None and self.skip.is_active

    def period(self) -> relativedelta | None:
        """The repeat period, or None when the rule does not repeat."""
        if not self.is_repeating:
            return None
        if self.mode == RepeatMode.CUSTOM:
            return self.custom.to_relativedelta()
        return PRESET_PERIODS[self.mode]

    def next_after(self, instant: datetime) -> datetime | None:
        """
        instant + period + offset, or None for a non-repeating rule.

        An offset that would not move past `instant` is ignored.
        """
        period = self.period()
        if period is None:
            return None
        candidate = instant + period + timedelta(seconds=self.offset_after_seconds)
        if candidate <= instant:
            logger.debug(
                f"Offset {self.offset_after_seconds:+d}s would not move past {instant}, ignoring it"
            )
            return instant + period
        return candidate

    def is_past_end(self, instant: datetime) -> bool:
        return self.has_end and instant >= self.end_at

    def describe(self) -> str:
        """Short label for listings, e.g. "daily, skip 2/1, until 2025-02-01 00:00"."""
        if not self.is_repeating:
            return "once"
        if self.mode == RepeatMode.CUSTOM:
            c = self.custom
            parts = [
                f"{value}{unit}"
                for value, unit in (
                    (c.years, "y"),
                    (c.months, "mo"),
                    (c.days, "d"),
                    (c.hours, "h"),
                    (c.minutes, "m"),
                    (c.seconds, "s"),
                )
                if value
            ]
            label = "every " + " ".join(parts)
        else:
            label = self.mode.value
        if self.has_skip:
            label += f", skip {self.skip.remind_every}/{self.skip.skip_count}"
        if self.offset_after_seconds:
            label += f", offset {self.offset_after_seconds:+d}s"
        if self.pause_until_ack:
            label += ", pause until ack"
        if self.end_at:
            label += f", until {self.end_at:%Y-%m-%d %H:%M}"
        return label

    @classmethod
    def create(
        cls,
        mode: RepeatMode | str = RepeatMode.NONE,
        custom: CustomPeriod | None = None,
        end_at: datetime | None = None,
        remind_every: int = 0,
        skip_count: int = 0,
        pause_until_ack: bool = False,
        offset_after_seconds: int = 0,
        now: datetime | None = None,
    ) -> "RecurrenceRule":
        """
        Build a normalized rule. Never raises for bad input.

        - an empty custom period degrades to RepeatMode.NONE
        - a custom period is carry-normalized, negatives clamp to zero
        - a skip rule needs both sides > 0, otherwise it is dropped
        - with `now` given, an end instant that already passed is dropped
        """
        if not isinstance(mode, RepeatMode):
            mode = RepeatMode.parse(mode)

        if mode != RepeatMode.CUSTOM:
            custom = None
        elif custom is None or custom.normalized().is_empty:
            mode, custom = RepeatMode.NONE, None
        else:
            custom = custom.normalized()

        if mode == RepeatMode.NONE:
            return cls()

        skip = SkipRule(remind_every, skip_count)
        if not skip.is_active:
            skip = None

        if end_at is not None and now is not None and end_at <= now:
            end_at = None

        return cls(
            mode=mode,
            custom=custom,
            end_at=end_at,
            skip=skip,
            pause_until_ack=bool(pause_until_ack),
            offset_after_seconds=int(offset_after_seconds),
        )

    def to_dict(self) -> dict:
        return {
            "mode": self.mode.value,
            "custom": self.custom.to_dict() if self.custom else None,
            "end_at": self.end_at.isoformat() if self.end_at else None,
            "skip": (
                {"remind_every": self.skip.remind_every, "skip_count": self.skip.skip_count}
                if self.skip
                else None
            ),
            "pause_until_ack": self.pause_until_ack,
            "offset_after_seconds": self.offset_after_seconds,
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "RecurrenceRule":
        """Rebuild a rule from persisted data, normalizing as `create` does."""
        if not data:
            return cls()
        custom = CustomPeriod.from_dict(data["custom"]) if data.get("custom") else None
        skip = data.get("skip") or {}
        end_at = datetime.fromisoformat(data["end_at"]) if data.get("end_at") else None
        return cls.create(
            mode=data.get("mode"),
            custom=custom,
            end_at=end_at,
            remind_every=int(skip.get("remind_every", 0) or 0),
            skip_count=int(skip.get("skip_count", 0) or 0),
            pause_until_ack=bool(data.get("pause_until_ack", False)),
            offset_after_seconds=int(data.get("offset_after_seconds", 0) or 0),
        )

