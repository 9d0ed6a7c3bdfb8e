"""Export and import of the data directory (settings.json + tasks.json)."""

import logging
import shutil
import zipfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .json_store import SETTINGS_FILE, TASKS_FILE

logger = logging.getLogger(__name__)

EXPORT_FILE = "config.zip"


class TransferStatus(Enum):
    SUCCESS = "success"
    EMPTY = "empty"  # nothing to export
    ZIP_NO_ENTRIES = "zip_no_entries"
    INVALID_FILE_TYPE = "invalid_file_type"
    ERROR = "error"


@dataclass
class TransferResult:
    status: TransferStatus
    path: Path | None = None
    imported: list[str] | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == TransferStatus.SUCCESS


def export_config(data_dir: Path | str, target: Path | str | None = None) -> TransferResult:
    """Pack whichever of settings.json / tasks.json exist into a zip."""
    data_dir = Path(data_dir).expanduser()
    zip_path = Path(target).expanduser() if target else data_dir / EXPORT_FILE
    sources = [data_dir / name for name in (SETTINGS_FILE, TASKS_FILE)]
    present = [p for p in sources if p.exists()]

    if not present:
        return TransferResult(TransferStatus.EMPTY)

    try:
        zip_path.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(zip_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for source in present:
                zf.write(source, arcname=source.name)
    except OSError as e:
        logger.error(f"Config export failed: {e}")
        return TransferResult(TransferStatus.ERROR, error=str(e))

    logger.info(f"Exported {len(present)} file(s) to {zip_path}")
    return TransferResult(TransferStatus.SUCCESS, path=zip_path)


def import_config(source: Path | str, data_dir: Path | str) -> TransferResult:
    """
    Import a config zip or a single settings.json / tasks.json.

    Existing files are overwritten. Zip entries are matched by file name
    (case-insensitive) regardless of folders inside the archive.
    """
    source = Path(source).expanduser()
    data_dir = Path(data_dir).expanduser()
    known = {SETTINGS_FILE.lower(): SETTINGS_FILE, TASKS_FILE.lower(): TASKS_FILE}

    try:
        data_dir.mkdir(parents=True, exist_ok=True)

        if source.suffix.lower() == ".zip":
            imported = []
            with zipfile.ZipFile(source) as zf:
                for info in zf.infolist():
                    name = known.get(Path(info.filename).name.lower())
                    if name is None or info.is_dir():
                        continue
                    with zf.open(info) as src, open(data_dir / name, "wb") as dst:
                        shutil.copyfileobj(src, dst)
                    imported.append(name)
            if not imported:
                return TransferResult(TransferStatus.ZIP_NO_ENTRIES)
            return TransferResult(TransferStatus.SUCCESS, imported=imported)

        name = known.get(source.name.lower())
        if name is None:
            return TransferResult(TransferStatus.INVALID_FILE_TYPE)
        shutil.copyfile(source, data_dir / name)
        return TransferResult(TransferStatus.SUCCESS, imported=[name])

    except (OSError, zipfile.BadZipFile) as e:
        logger.error(f"Config import failed: {e}")
        return TransferResult(TransferStatus.ERROR, error=str(e))
