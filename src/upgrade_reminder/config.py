"""Configuration management for the reminder."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

REMINDER_HOME = Path(os.environ.get("REMINDER_HOME", Path.home() / "upgrade-reminder"))
CONFIG_FILE = REMINDER_HOME / "config" / "reminder.conf"
DATA_DIR = REMINDER_HOME / "data"


@dataclass
class Config:
    """Application configuration (where data lives, how to notify, timer bounds)."""

    data_dir: str = ""
    notifier: str = "console"
    telegram_bot_token: str = ""
    telegram_chat_ids: list[int] = field(default_factory=list)
    tick_min_seconds: float = 1.0
    tick_max_seconds: float = 5.0
    tick_guard_seconds: float = 3.0
    purge_interval_seconds: float = 0.5

    @property
    def data_path(self) -> Path:
        """Resolved data directory."""
        if self.data_dir:
            return Path(self.data_dir).expanduser()
        return DATA_DIR


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from an unquoted value."""
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        return value.split("#")[0].strip()
    return value


def _seconds(key: str, value: str, current: float) -> float:
    try:
        seconds = float(value)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {key.upper()}: {value!r}")
        return current
    if seconds <= 0:
        logger.warning(f"Ignoring non-positive {key.upper()}: {value!r}")
        return current
    return seconds


def load_config(path: Path | None = None) -> Config:
    """Load configuration from reminder.conf (KEY=value lines)."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "data_dir":
                config.data_dir = value
            case "notifier":
                config.notifier = value.lower()
            case "telegram_bot_token":
                config.telegram_bot_token = value
            case "telegram_chat_ids":
                try:
                    config.telegram_chat_ids = [int(c.strip()) for c in value.split(",") if c.strip()]
                except ValueError:
                    logger.warning(f"Ignoring invalid TELEGRAM_CHAT_IDS: {value!r}")
            case "tick_min_seconds":
                config.tick_min_seconds = _seconds(key, value, config.tick_min_seconds)
            case "tick_max_seconds":
                config.tick_max_seconds = _seconds(key, value, config.tick_max_seconds)
            case "tick_guard_seconds":
                config.tick_guard_seconds = _seconds(key, value, config.tick_guard_seconds)
            case "purge_interval_seconds":
                config.purge_interval_seconds = _seconds(key, value, config.purge_interval_seconds)

    if config.tick_max_seconds < config.tick_min_seconds:
        logger.warning("TICK_MAX_SECONDS below TICK_MIN_SECONDS; using the minimum for both")
        config.tick_max_seconds = config.tick_min_seconds

    return config
