"""Tests for the deletion policy and purge."""

from datetime import datetime, timedelta

import pytest

from upgrade_reminder.core.deletion import DeletionPolicy, purge
from upgrade_reminder.core.settings import Settings
from upgrade_reminder.core.tasks import Task

T = datetime(2025, 1, 1, 12, 0, 0)


@pytest.fixture
def policy():
    return DeletionPolicy(pending_delete_grace_seconds=3)


def pending(marked=T) -> Task:
    return Task(name="gone", pending_delete=True, delete_mark_time=marked)


def completed(at=T) -> Task:
    return Task(name="finished", done=True, completed_time=at)


class TestShouldPurge:
    def test_grace_window(self, policy):
        task = pending()
        assert not policy.should_purge(task, T + timedelta(seconds=2))
        assert policy.should_purge(task, T + timedelta(seconds=3))

    def test_force_skips_grace(self, policy):
        assert policy.should_purge(pending(), T + timedelta(seconds=1), force=True)

    def test_missing_mark_time_purges(self, policy):
        assert policy.should_purge(pending(marked=None), T)

    def test_completed_kept_without_retention(self, policy):
        assert not policy.should_purge(completed(), T + timedelta(days=365))

    def test_completed_retention(self):
        policy = DeletionPolicy(completed_retention_seconds=60)
        assert not policy.should_purge(completed(), T + timedelta(seconds=59))
        assert policy.should_purge(completed(), T + timedelta(seconds=60))

    def test_force_does_not_touch_completed(self, policy):
        assert not policy.should_purge(completed(), T, force=True)

    def test_active_task_never_purged(self, policy):
        assert not policy.should_purge(Task(name="live"), T + timedelta(days=1), force=True)

    def test_is_pure(self, policy):
        task = pending()
        now = T + timedelta(seconds=2)
        assert [policy.should_purge(task, now) for _ in range(3)] == [False] * 3


class TestFromSettings:
    def test_zero_means_keep_forever(self):
        policy = DeletionPolicy.from_settings(Settings(auto_delete_completed_seconds=0))
        assert policy.completed_retention_seconds is None

    def test_retention_and_grace(self):
        settings = Settings(auto_delete_completed_seconds=90, pending_delete_grace_seconds=5)
        policy = DeletionPolicy.from_settings(settings)
        assert policy.completed_retention_seconds == 90
        assert policy.pending_delete_grace_seconds == 5


class TestPurge:
    def test_splits_in_order(self, policy):
        live = Task(name="live")
        old = pending()
        fresh = pending(marked=T + timedelta(seconds=2))
        kept, removed = purge([old, live, fresh], policy, T + timedelta(seconds=3))
        assert kept == [live, fresh]
        assert removed == [old]

    def test_idempotent(self, policy):
        tasks = [pending(), Task(name="live")]
        now = T + timedelta(seconds=10)
        kept, _ = purge(tasks, policy, now)
        kept_again, removed_again = purge(kept, policy, now)
        assert kept_again == kept
        assert removed_again == []
