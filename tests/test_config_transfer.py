"""Tests for config export and import."""

import json
import zipfile

import pytest

from upgrade_reminder.adapters.config_transfer import (
    EXPORT_FILE,
    TransferStatus,
    export_config,
    import_config,
)


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    (path / "settings.json").write_text(json.dumps({"advance_notify_seconds": 60}))
    (path / "tasks.json").write_text(json.dumps([{"id": "a", "name": "x"}]))
    return path


class TestExport:
    def test_exports_both_files(self, data_dir):
        result = export_config(data_dir)

        assert result.ok
        assert result.path == data_dir / EXPORT_FILE
        with zipfile.ZipFile(result.path) as zf:
            assert sorted(zf.namelist()) == ["settings.json", "tasks.json"]

    def test_custom_target(self, data_dir, tmp_path):
        target = tmp_path / "out" / "backup.zip"
        assert export_config(data_dir, target).path == target
        assert target.exists()

    def test_nothing_to_export(self, tmp_path):
        assert export_config(tmp_path).status == TransferStatus.EMPTY


class TestImport:
    def test_zip_round_trip(self, data_dir, tmp_path):
        exported = export_config(data_dir).path
        target = tmp_path / "restored"

        result = import_config(exported, target)

        assert result.ok
        assert sorted(result.imported) == ["settings.json", "tasks.json"]
        assert json.loads((target / "settings.json").read_text()) == {"advance_notify_seconds": 60}

    def test_zip_entry_names_case_insensitive_and_nested(self, tmp_path):
        archive = tmp_path / "in.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("backup/Settings.JSON", "{}")
            zf.writestr("readme.txt", "hi")

        result = import_config(archive, tmp_path / "data")

        assert result.imported == ["settings.json"]
        assert (tmp_path / "data" / "settings.json").read_text() == "{}"

    def test_zip_without_entries(self, tmp_path):
        archive = tmp_path / "in.zip"
        with zipfile.ZipFile(archive, "w") as zf:
            zf.writestr("other.json", "{}")
        assert import_config(archive, tmp_path / "data").status == TransferStatus.ZIP_NO_ENTRIES

    def test_single_json(self, tmp_path):
        source = tmp_path / "tasks.json"
        source.write_text("[]")
        result = import_config(source, tmp_path / "data")
        assert result.imported == ["tasks.json"]

    def test_invalid_file_type(self, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("x")
        assert import_config(source, tmp_path / "data").status == TransferStatus.INVALID_FILE_TYPE

    def test_bad_zip(self, tmp_path):
        source = tmp_path / "broken.zip"
        source.write_text("not a zip")
        result = import_config(source, tmp_path / "data")
        assert result.status == TransferStatus.ERROR
        assert result.error
