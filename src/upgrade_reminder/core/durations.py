"""Pure duration helpers - carry normalization and display formatting."""

from datetime import timedelta


def normalize_dhms(
    days: int, hours: int, minutes: int, seconds: int
) -> tuple[int, int, int, int]:
    """
    Carry seconds/minutes/hours upward into days.

    Returns (days, hours, minutes, seconds) with 0 <= seconds < 60,
    0 <= minutes < 60 and 0 <= hours < 24. Negative inputs clamp to zero.
    Nothing is carried past days (month length is ambiguous).
    """
    days, hours, minutes, seconds = (max(0, v) for v in (days, hours, minutes, seconds))

    if seconds >= 60:
        minutes += seconds // 60
        seconds %= 60
    if minutes >= 60:
        hours += minutes // 60
        minutes %= 60
    if hours >= 24:
        days += hours // 24
        hours %= 24

    return days, hours, minutes, seconds


def normalize_ymdhms(
    years: int, months: int, days: int, hours: int, minutes: int, seconds: int
) -> tuple[int, int, int, int, int, int]:
    """
    Like normalize_dhms, additionally carrying months >= 12 into years.

    Days are never carried into months: days, months and years stay
    independent buckets.
    """
    years = max(0, years)
    months = max(0, months)
    days, hours, minutes, seconds = normalize_dhms(days, hours, minutes, seconds)

    if months >= 12:
        years += months // 12
        months %= 12

    return years, months, days, hours, minutes, seconds


def format_duration(days: int, hours: int, minutes: int, seconds: int | None = None) -> str:
    """Compact human-readable duration; seconds are shown only when given."""
    if days > 0:
        return f"{days}d {hours}h {minutes}m"
    if hours > 0:
        return f"{hours}h {minutes}m" if seconds is None else f"{hours}h {minutes}m {seconds}s"
    return f"{minutes}m" if seconds is None else f"{minutes}m {seconds}s"


def format_remaining(delta: timedelta) -> str:
    """Format time left until a due instant ("due" once it has passed)."""
    total = int(delta.total_seconds())
    if total <= 0:
        return "due"
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    return format_duration(days, hours, minutes, seconds)
