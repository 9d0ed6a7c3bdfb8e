"""JSON file storage adapters for tasks and settings."""

import json
import logging
import os
import tempfile
from pathlib import Path

from upgrade_reminder.core.settings import Settings
from upgrade_reminder.core.tasks import Task

logger = logging.getLogger(__name__)

TASKS_FILE = "tasks.json"
SETTINGS_FILE = "settings.json"


def _write_atomic(path: Path, payload: object) -> None:
    """Write JSON next to the target, then swap it into place."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


def _file_stamp(path: Path) -> tuple[int, int, int] | None:
    """(mtime, size, inode) of a file, or None when it is missing."""
    try:
        st = path.stat()
    except FileNotFoundError:
        return None
    return st.st_mtime_ns, st.st_size, st.st_ino


def _read_json(path: Path) -> object | None:
    if not path.exists():
        return None
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Could not read {path}: {e}")
        return None


class JsonTaskRepository:
    """
    Task list stored as a JSON array.

    Implements TaskRepository protocol.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / TASKS_FILE

    def load(self) -> list[Task]:
        """Load all tasks. Unreadable files and records are skipped."""
        data = _read_json(self.path)
        if not isinstance(data, list):
            return []

        tasks = []
        for record in data:
            if not isinstance(record, dict):
                continue
            try:
                tasks.append(Task.from_dict(record))
            except (TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed task record: {e}")
        return tasks

    def stamp(self) -> tuple[int, int, int] | None:
        """Changes on every save, ours or another process's."""
        return _file_stamp(self.path)

    def save(self, tasks: list[Task]) -> None:
        """Overwrite the stored task list."""
        _write_atomic(self.path, [t.to_dict() for t in tasks])
        logger.debug(f"Saved {len(tasks)} tasks to {self.path}")


class JsonSettingsStore:
    """
    Settings stored as a JSON object.

    Implements SettingsStore protocol.
    """

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir).expanduser()
        self.path = self.data_dir / SETTINGS_FILE

    def stamp(self) -> tuple[int, int, int] | None:
        return _file_stamp(self.path)

    def load(self) -> Settings:
        """Load settings; defaults when the file is missing or unreadable."""
        data = _read_json(self.path)
        if not isinstance(data, dict):
            return Settings()
        try:
            return Settings.from_dict(data)
        except (TypeError, ValueError) as e:
            logger.warning(f"Invalid settings in {self.path}, using defaults: {e}")
            return Settings()

    def save(self, settings: Settings) -> None:
        """Persist settings."""
        _write_atomic(self.path, settings.to_dict())
