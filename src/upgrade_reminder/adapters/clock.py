"""Clock adapters."""

from datetime import datetime, timedelta


class SystemClock:
    """Local wall clock. Implements Clock protocol."""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Manually driven clock for tests and dry runs. Implements Clock protocol."""

    def __init__(self, at: datetime):
        self.at = at

    def now(self) -> datetime:
        return self.at

    def advance(self, **kwargs) -> datetime:
        """Move forward by a timedelta built from kwargs (seconds=..., days=...)."""
        self.at += timedelta(**kwargs)
        return self.at
