"""Clock interface."""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Source of the current instant, injected so tests can control time."""

    def now(self) -> datetime:
        ...
