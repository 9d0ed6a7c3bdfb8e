"""Tests for the recurrence engine (advance and acknowledge)."""

from datetime import datetime, timedelta

import pytest

from upgrade_reminder.core.engine import (
    RecurrenceState,
    acknowledge,
    advance,
    recurrence_state,
)
from upgrade_reminder.core.recurrence import CustomPeriod, RecurrenceRule
from upgrade_reminder.core.tasks import Task

D0 = datetime(2025, 1, 1, 10, 0)


def make_task(rule: RecurrenceRule | None = None, finish: datetime = D0) -> Task:
    return Task(account="Main", name="Mine", finish=finish, recurrence=rule, notified=True)


class TestAdvance:
    def test_daily_moves_one_day(self):
        task = make_task(RecurrenceRule.create("daily"))

        outcome = advance(task)

        assert outcome.state == RecurrenceState.SCHEDULED
        assert outcome.previous_due == D0
        assert outcome.new_due == datetime(2025, 1, 2, 10, 0)
        assert outcome.moved
        assert task.finish == datetime(2025, 1, 2, 10, 0)
        assert not task.notified
        assert task.cursor.occurrence_cursor == 1
        assert task.cursor.notify_count == 1

    def test_skip_cycle_chains_past_silent_occurrence(self):
        task = make_task(RecurrenceRule.create("daily", remind_every=2, skip_count=1))

        first = advance(task)
        second = advance(task)
        third = advance(task)

        assert (first.skipped, second.skipped, third.skipped) == (0, 0, 1)
        assert task.finish == D0 + timedelta(days=4)
        assert task.cursor.occurrence_cursor == 4
        assert task.cursor.notify_count == 3

    def test_skip_count_invariant_over_many_advances(self):
        task = make_task(RecurrenceRule.create("daily", remind_every=1, skip_count=2))
        for _ in range(10):
            advance(task)
            n = task.cursor.occurrence_cursor
            full, rest = divmod(n, 3)
            assert task.cursor.notify_count == full + min(rest, 1)

    def test_negative_offset(self):
        task = make_task(RecurrenceRule.create("daily", offset_after_seconds=-60))
        advance(task)
        assert task.finish == datetime(2025, 1, 2, 9, 59)

    def test_end_instant_expires_without_moving(self):
        task = make_task(RecurrenceRule.create("daily", end_at=datetime(2025, 1, 2)))

        outcome = advance(task)

        assert outcome.state == RecurrenceState.EXPIRED
        assert not outcome.moved
        assert task.finish == D0
        assert task.expired
        assert not task.is_active

        again = advance(task)
        assert again.state == RecurrenceState.EXPIRED
        assert task.finish == D0

    def test_end_reached_during_skip_chain(self):
        rule = RecurrenceRule.create(
            "daily", remind_every=1, skip_count=5, end_at=D0 + timedelta(days=3)
        )
        task = make_task(rule)
        advance(task)  # occurrence 1 notifies
        outcome = advance(task)  # 2..6 skipped, end hit at day 3
        assert outcome.state == RecurrenceState.EXPIRED
        assert task.finish == D0 + timedelta(days=2)

    def test_pause_until_ack(self):
        task = make_task(RecurrenceRule.create("daily", pause_until_ack=True))

        outcome = advance(task)

        assert outcome.state == RecurrenceState.AWAITING_ACK
        assert task.awaiting_ack
        assert not task.is_active

    def test_awaiting_task_does_not_advance(self):
        task = make_task(RecurrenceRule.create("daily", pause_until_ack=True))
        advance(task)
        due = task.finish

        outcome = advance(task)

        assert outcome.state == RecurrenceState.AWAITING_ACK
        assert task.finish == due
        assert task.cursor.occurrence_cursor == 1

    def test_non_repeating_is_noop(self):
        task = make_task()
        outcome = advance(task)
        assert outcome.state == RecurrenceState.INACTIVE
        assert task.finish == D0
        assert task.notified

    def test_custom_period(self):
        task = make_task(RecurrenceRule.create("custom", custom=CustomPeriod(minutes=45)))
        advance(task)
        assert task.finish == D0 + timedelta(minutes=45)


class TestAcknowledge:
    @pytest.fixture
    def paused(self):
        task = make_task(RecurrenceRule.create("daily", pause_until_ack=True))
        advance(task)
        return task

    def test_restart_from_now(self, paused):
        now = D0 + timedelta(days=3, hours=2)

        outcome = acknowledge(paused, now)

        assert outcome.state == RecurrenceState.SCHEDULED
        assert paused.finish == now + timedelta(days=1)
        assert not paused.awaiting_ack
        assert paused.cursor.occurrence_cursor == 1

    def test_keep_cadence(self, paused):
        outcome = acknowledge(paused, D0 + timedelta(hours=1), restart=False)
        assert outcome.state == RecurrenceState.SCHEDULED
        assert paused.finish == D0 + timedelta(days=1)

    def test_keep_cadence_already_due(self, paused):
        outcome = acknowledge(paused, D0 + timedelta(days=2), restart=False)
        assert outcome.state == RecurrenceState.DUE

    def test_restart_past_end_expires(self):
        rule = RecurrenceRule.create("daily", pause_until_ack=True, end_at=D0 + timedelta(days=2))
        task = make_task(rule)
        advance(task)

        outcome = acknowledge(task, D0 + timedelta(days=1, hours=12))

        assert outcome.state == RecurrenceState.EXPIRED
        assert task.expired
        assert task.finish == D0 + timedelta(days=1)

    def test_not_awaiting_is_noop(self):
        task = make_task(RecurrenceRule.create("daily"))
        outcome = acknowledge(task, D0 - timedelta(hours=1))
        assert outcome.state == RecurrenceState.SCHEDULED
        assert not outcome.moved
        assert task.finish == D0


class TestRecurrenceState:
    def test_states(self):
        task = make_task(RecurrenceRule.create("daily"))
        assert recurrence_state(task) == RecurrenceState.SCHEDULED
        assert recurrence_state(task, D0) == RecurrenceState.DUE
        assert recurrence_state(task, D0 - timedelta(seconds=1)) == RecurrenceState.SCHEDULED
        assert recurrence_state(make_task()) == RecurrenceState.INACTIVE
