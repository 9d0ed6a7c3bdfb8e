"""Tests for the click CLI."""

import json
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from upgrade_reminder.cli import main
from upgrade_reminder.config import Config


@pytest.fixture(autouse=True)
def no_user_config():
    with patch("upgrade_reminder.cli.load_config", return_value=Config()):
        yield


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def invoke(runner, tmp_path):
    def _invoke(*args):
        return runner.invoke(main, ["--data-dir", str(tmp_path), *args])

    return _invoke


def listed(invoke) -> list[dict]:
    result = invoke("list", "--json")
    assert result.exit_code == 0, result.output
    return json.loads(result.output)


class TestTasks:
    def test_add_and_list(self, invoke):
        result = invoke("add", "Barracks", "-a", "Main", "-s", "2030-01-01 08:00", "-h", "2")
        assert result.exit_code == 0, result.output
        assert "Main/Barracks" in result.output
        assert "2030-01-01 10:00" in result.output

        tasks = listed(invoke)
        assert len(tasks) == 1
        assert tasks[0]["name"] == "Barracks"
        assert tasks[0]["state"] == "inactive"

    def test_list_empty(self, invoke):
        result = invoke("list")
        assert result.exit_code == 0
        assert "No timers." in result.output

    def test_list_filters_by_account(self, invoke):
        invoke("add", "a", "-a", "Main", "-h", "1")
        invoke("add", "b", "-a", "Alt", "-h", "1")
        result = invoke("list", "-a", "alt")
        assert " b " in result.output
        assert "Main" not in result.output

    def test_edit(self, invoke):
        invoke("add", "a", "-s", "2030-01-01 08:00", "-h", "1")
        task_id = listed(invoke)[0]["id"]

        result = invoke("edit", task_id[:8], "--name", "renamed", "-h", "3")

        assert result.exit_code == 0, result.output
        task = listed(invoke)[0]
        assert task["name"] == "renamed"
        assert task["finish"] == "2030-01-01T11:00:00"

    def test_unknown_id(self, invoke):
        result = invoke("done", "nope")
        assert result.exit_code == 1
        assert "Error:" in result.output

    def test_done_and_clear(self, invoke):
        invoke("add", "a", "-h", "1")
        task_id = listed(invoke)[0]["id"]

        assert "marked done" in invoke("done", task_id).output
        result = invoke("clear-done")

        assert "Removed 1" in result.output
        assert listed(invoke) == []

    def test_delete_undo_and_force_purge(self, invoke):
        invoke("add", "a", "-h", "1")
        task_id = listed(invoke)[0]["id"]

        assert "will be deleted" in invoke("delete", task_id).output
        assert "restored" in invoke("delete", task_id).output
        invoke("delete", task_id)
        result = invoke("purge", "--force")

        assert "Removed 1" in result.output
        assert listed(invoke) == []


class TestRepeat:
    def test_set_daily_with_skip(self, invoke):
        invoke("add", "a", "-s", "2030-01-01 08:00", "-h", "1")
        task_id = listed(invoke)[0]["id"]

        result = invoke("repeat", task_id, "daily", "--remind-every", "2", "--skip", "1")

        assert result.exit_code == 0, result.output
        assert "daily, skip 2/1" in result.output
        task = listed(invoke)[0]
        assert task["recurrence"]["mode"] == "daily"
        assert task["state"] == "scheduled"

    def test_empty_custom_means_once(self, invoke):
        invoke("add", "a", "-h", "1")
        task_id = listed(invoke)[0]["id"]
        result = invoke("repeat", task_id, "custom")
        assert "repeats: once" in result.output
        assert listed(invoke)[0]["recurrence"] is None

    def test_ack_when_not_paused(self, invoke):
        invoke("add", "a", "-s", "2030-01-01 08:00", "-h", "1")
        task_id = listed(invoke)[0]["id"]
        invoke("repeat", task_id, "weekly")
        result = invoke("ack", task_id)
        assert result.exit_code == 0
        assert "scheduled, next 2030-01-01 09:00:00" in result.output


class TestTick:
    def test_tick_notifies_due_task(self, invoke):
        invoke("add", "Wall", "-a", "Main", "-s", "2020-01-01 08:00")
        result = invoke("tick")
        assert result.exit_code == 0, result.output
        assert "[Done] Main" in result.output
        assert "Next check in" in result.output
        assert listed(invoke)[0]["notified"] is True


class TestSettings:
    def test_set_and_show(self, invoke):
        result = invoke("settings", "set", "--advance", "120", "--no-also-notify-at-due")
        assert result.exit_code == 0, result.output

        shown = json.loads(invoke("settings", "show").output)
        assert shown["advance_notify_seconds"] == 120
        assert shown["also_notify_at_due"] is False

    def test_set_nothing(self, invoke):
        assert "Nothing to change." in invoke("settings", "set").output


class TestTransfer:
    def test_export_then_import(self, invoke, runner, tmp_path):
        invoke("add", "a", "-h", "1")
        archive = tmp_path / "backup.zip"

        result = invoke("export", "-o", str(archive))
        assert result.exit_code == 0, result.output
        assert archive.exists()

        other = tmp_path / "other"
        result = runner.invoke(main, ["--data-dir", str(other), "import", str(archive)])
        assert result.exit_code == 0, result.output
        assert "tasks.json" in result.output
        assert (other / "tasks.json").exists()

    def test_export_empty(self, invoke):
        assert "Nothing to export." in invoke("export").output

    def test_import_wrong_type(self, invoke, tmp_path):
        source = tmp_path / "notes.txt"
        source.write_text("x")
        result = invoke("import", str(source))
        assert result.exit_code == 1
        assert "expected a .zip" in result.output


class TestRun:
    @patch("upgrade_reminder.scheduler.run_scheduler")
    def test_run_starts_scheduler(self, mock_run, invoke, tmp_path):
        result = invoke("run")
        assert result.exit_code == 0, result.output
        config = mock_run.call_args.args[0]
        assert config.data_dir == str(tmp_path)
