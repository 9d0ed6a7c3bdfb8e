"""User-facing notification settings - pure data, persisted by a SettingsStore."""

from dataclasses import dataclass, field

from .tasks import DEFAULT_ACCOUNT

PENDING_DELETE_GRACE_SECONDS = 3


@dataclass
class Settings:
    """Notification and retention settings plus the account/task presets."""

    advance_notify_seconds: int = 0
    also_notify_at_due: bool = True
    # 0 keeps completed tasks forever
    auto_delete_completed_seconds: int = 0
    # undo window for pending deletes; not persisted
    pending_delete_grace_seconds: int = PENDING_DELETE_GRACE_SECONDS
    accounts: list[str] = field(default_factory=lambda: [DEFAULT_ACCOUNT])
    task_presets: list[str] = field(default_factory=lambda: ["Upgrade", "Maintenance"])

    def to_dict(self) -> dict:
        return {
            "advance_notify_seconds": self.advance_notify_seconds,
            "also_notify_at_due": self.also_notify_at_due,
            "auto_delete_completed_seconds": self.auto_delete_completed_seconds,
            "accounts": list(self.accounts),
            "task_presets": list(self.task_presets),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Settings":
        """
        Load settings, upgrading older files.

        - `notify_before_minutes` (old) becomes advance_notify_seconds
        - `auto_delete_completed_after_1min` (old) becomes a 60s retention
        - negative durations clamp to zero
        - the pending-delete grace window is fixed, never read from disk
        """
        settings = cls()

        if "advance_notify_seconds" in data:
            settings.advance_notify_seconds = int(data["advance_notify_seconds"] or 0)
        elif "notify_before_minutes" in data:
            settings.advance_notify_seconds = int(data["notify_before_minutes"] or 0) * 60

        settings.also_notify_at_due = bool(data.get("also_notify_at_due", True))

        auto_delete = int(data.get("auto_delete_completed_seconds", 0) or 0)
        if auto_delete <= 0 and data.get("auto_delete_completed_after_1min"):
            auto_delete = 60
        settings.auto_delete_completed_seconds = auto_delete

        if data.get("accounts"):
            settings.accounts = [str(a) for a in data["accounts"] if str(a).strip()]
        if data.get("task_presets"):
            settings.task_presets = [str(t) for t in data["task_presets"] if str(t).strip()]

        settings.advance_notify_seconds = max(0, settings.advance_notify_seconds)
        settings.auto_delete_completed_seconds = max(0, settings.auto_delete_completed_seconds)
        return settings
