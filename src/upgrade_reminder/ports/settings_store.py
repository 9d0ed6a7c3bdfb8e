"""Settings storage interface."""

from collections.abc import Hashable
from typing import Protocol

from upgrade_reminder.core.settings import Settings


class SettingsStore(Protocol):
    """Interface for reading and writing user settings."""

    def load(self) -> Settings:
        """Load settings, falling back to defaults when none are stored."""
        ...

    def save(self, settings: Settings) -> None:
        """Persist settings."""
        ...

    def stamp(self) -> Hashable:
        """Opaque token that changes whenever the stored settings change."""
        ...
