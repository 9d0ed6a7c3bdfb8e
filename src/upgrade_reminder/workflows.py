"""Shared workflow layer between the CLI and the background scheduler.

ReminderService owns the in-memory task list: every mutation goes through
it, under one lock, and is saved through the TaskRepository port. The
runner and each CLI invocation are separate services over one data dir, so
every operation first reloads what the others saved.
"""

import logging
import threading
from datetime import datetime
from enum import Enum

from .adapters.clock import SystemClock
from .adapters.console_notifier import ConsoleNotifier
from .adapters.json_store import JsonSettingsStore, JsonTaskRepository
from .adapters.telegram_notifier import TelegramNotifier
from .config import Config
from .core.deletion import DeletionPolicy, purge
from .core.engine import AdvanceResult, acknowledge
from .core.notifications import TickResult, TickTiming, check_due, next_interval
from .core.ordering import insert_by_finish, sort_by_finish
from .core.recurrence import RecurrenceRule
from .core.settings import Settings
from .core.tasks import Task, find_task
from .ports import Clock, Notifier, SettingsStore, TaskRepository

logger = logging.getLogger(__name__)

_UNSET = object()


class TaskNotFoundError(LookupError):
    """Raised when no task matches the given id."""

    pass


class SortMode(Enum):
    FINISH = "finish"  # earliest finish first, ties in insertion order
    CUSTOM = "custom"  # keep the user's order


def get_notifier(config: Config) -> Notifier:
    """Resolve the notifier from config."""
    if config.notifier == "telegram":
        return TelegramNotifier(config.telegram_bot_token, config.telegram_chat_ids)
    return ConsoleNotifier()


def timing_from_config(config: Config) -> TickTiming:
    return TickTiming(
        min_seconds=config.tick_min_seconds,
        max_seconds=config.tick_max_seconds,
        guard_seconds=config.tick_guard_seconds,
    )


def get_service(config: Config, notifier: Notifier | None = None) -> "ReminderService":
    """Wire a ReminderService to the JSON stores in the configured data dir."""
    data_dir = config.data_path
    return ReminderService(
        repo=JsonTaskRepository(data_dir),
        settings_store=JsonSettingsStore(data_dir),
        notifier=notifier or get_notifier(config),
        timing=timing_from_config(config),
    )


class ReminderService:
    """Task list operations: add, edit, done, delete, purge and the notification tick."""

    def __init__(
        self,
        repo: TaskRepository,
        settings_store: SettingsStore,
        notifier: Notifier,
        clock: Clock | None = None,
        timing: TickTiming = TickTiming(),
        sort_mode: SortMode = SortMode.FINISH,
    ):
        self.repo = repo
        self.settings_store = settings_store
        self.notifier = notifier
        self.clock = clock or SystemClock()
        self.timing = timing
        self.sort_mode = sort_mode
        self._lock = threading.RLock()

        self._settings_stamp = settings_store.stamp()
        self.settings: Settings = settings_store.load()
        self._tasks_stamp = repo.stamp()
        self.tasks: list[Task] = self._ordered(repo.load())

    # ============== Lookups ==============

    @property
    def deletion_policy(self) -> DeletionPolicy:
        return DeletionPolicy.from_settings(self.settings)

    def get(self, task_id: str) -> Task:
        task = find_task(self.tasks, task_id)
        if task is None:
            raise TaskNotFoundError(f"No task matches id '{task_id}'")
        return task

    def visible_tasks(self) -> list[Task]:
        """Tasks in display order (pending deletes included, they can still be undone)."""
        with self._lock:
            self._refresh()
            return list(self.tasks)

    # ============== Editing ==============

    def add_task(
        self,
        account: str,
        name: str,
        start: datetime | None = None,
        days: int = 0,
        hours: int = 0,
        minutes: int = 0,
        recurrence: RecurrenceRule | None = None,
    ) -> Task:
        """Create a task and place it in list order."""
        with self._lock:
            self._refresh()
            now = self.clock.now()
            task = Task.create(
                account,
                name,
                start,
                days=days,
                hours=hours,
                minutes=minutes,
                now=now,
                recurrence=recurrence if recurrence and recurrence.is_repeating else None,
            )
            self._place(task)
            self.save()
            logger.info(f"Added task {task.id[:8]} '{task.name}' due {task.finish_str}")
            return task

    def edit_task(
        self,
        task_id: str,
        account: str | None = None,
        name: str | None = None,
        start=_UNSET,
        days: int | None = None,
        hours: int | None = None,
        minutes: int | None = None,
    ) -> Task:
        """
        Update a task. Changing start or duration recomputes finish and
        resets notification and recurrence progress.
        """
        with self._lock:
            self._refresh()
            task = self.get(task_id)
            now = self.clock.now()

            if account is not None:
                task.account = account.strip() or task.account
            if name is not None:
                task.name = name.strip() or task.name

            if start is not _UNSET:
                task.set_start(start, now)
            if days is not None or hours is not None or minutes is not None:
                task.set_duration(
                    task.days if days is None else days,
                    task.hours if hours is None else hours,
                    task.minutes if minutes is None else minutes,
                    now,
                )

            self._reposition(task)
            self.save()
            return task

    def set_recurrence(self, task_id: str, rule: RecurrenceRule | None) -> Task:
        """Replace a task's repeat rule (None or a non-repeating rule clears it)."""
        with self._lock:
            self._refresh()
            task = self.get(task_id)
            task.set_recurrence(rule)
            self.save()
            logger.info(
                f"Task {task.id[:8]} repeat: {task.recurrence.describe() if task.recurrence else 'once'}"
            )
            return task

    def toggle_done(self, task_id: str) -> Task:
        """
        Flip a task's done flag.

        On a task paused after its reminder this acts as the acknowledgement
        and restarts its cycle instead.
        """
        with self._lock:
            self._refresh()
            task = self.get(task_id)
            if task.awaiting_ack:
                self._acknowledge(task, restart=True)
                return task

            task.done = not task.done
            task.completed_time = self.clock.now() if task.done else None
            self.save()
            return task

    def acknowledge(self, task_id: str, restart: bool = True) -> AdvanceResult:
        """Release a paused repeating task (see core.engine.acknowledge)."""
        with self._lock:
            self._refresh()
            return self._acknowledge(self.get(task_id), restart)

    def _acknowledge(self, task: Task, restart: bool) -> AdvanceResult:
        outcome = acknowledge(task, self.clock.now(), restart=restart)
        self._reposition(task)
        self.save()
        logger.info(f"Task {task.id[:8]} acknowledged -> {outcome.state.value}, due {task.finish_str}")
        return outcome

    def toggle_delete(self, task_id: str) -> Task:
        """Mark a task for deletion, or undo a pending delete."""
        with self._lock:
            self._refresh()
            task = self.get(task_id)
            task.pending_delete = not task.pending_delete
            task.delete_mark_time = self.clock.now() if task.pending_delete else None
            self.save()
            return task

    def delete_all_done(self) -> int:
        """Remove every done task right away. Returns how many were removed."""
        with self._lock:
            self._refresh()
            before = len(self.tasks)
            self.tasks = [t for t in self.tasks if not t.done]
            removed = before - len(self.tasks)
            if removed:
                self.save()
            return removed

    # ============== Settings ==============

    def update_settings(self, **changes) -> Settings:
        """Set settings fields by name and persist them."""
        with self._lock:
            self._refresh()
            for key, value in changes.items():
                if not hasattr(self.settings, key):
                    raise AttributeError(f"Unknown setting '{key}'")
                setattr(self.settings, key, value)
            self.settings_store.save(self.settings)
            self._settings_stamp = self.settings_store.stamp()
            return self.settings

    # ============== Scheduling ==============

    def tick(self) -> float:
        """
        One notification pass. Returns seconds until the next pass.

        Notifier failures are logged and never abort the pass.
        """
        with self._lock:
            self._refresh()
            now = self.clock.now()
            result = check_due(self.tasks, self.settings, now)
            self._deliver(result)

            for task_id, outcome in result.advances.items():
                logger.info(
                    f"Task {task_id[:8]} -> {outcome.state.value}, "
                    f"next due {outcome.new_due:%Y-%m-%d %H:%M:%S} (skipped {outcome.skipped})"
                )

            if result.has_changes:
                if result.advances and self.sort_mode == SortMode.FINISH:
                    self.tasks = sort_by_finish(self.tasks)
                self.save()

            interval = next_interval(self.tasks, self.settings, now, self.timing)
            logger.debug(f"Next check in {interval:.2f}s")
            return interval

    def next_interval(self) -> float:
        with self._lock:
            self._refresh()
            return next_interval(self.tasks, self.settings, self.clock.now(), self.timing)

    def purge(self, force: bool = False) -> list[Task]:
        """Drop tasks whose delete or retention window has passed."""
        with self._lock:
            self._refresh()
            kept, removed = purge(self.tasks, self.deletion_policy, self.clock.now(), force)
            if not removed:
                return []
            self.tasks = self._ordered(kept)
            self.save()
            for task in removed:
                logger.info(f"Purged task {task.id[:8]} '{task.name}'")
            return removed

    # ============== Internals ==============

    def save(self) -> None:
        with self._lock:
            self.repo.save(self.tasks)
            self._tasks_stamp = self.repo.stamp()

    def _refresh(self) -> None:
        """
        Reload whatever another process (the CLI while the runner is up)
        saved since this service last read or wrote it.
        """
        stamp = self.repo.stamp()
        if stamp != self._tasks_stamp:
            self.tasks = self._ordered(self.repo.load())
            self._tasks_stamp = stamp
            logger.debug(f"Reloaded {len(self.tasks)} tasks from storage")

        stamp = self.settings_store.stamp()
        if stamp != self._settings_stamp:
            self.settings = self.settings_store.load()
            self._settings_stamp = stamp
            logger.debug("Reloaded settings from storage")

    def _ordered(self, tasks: list[Task]) -> list[Task]:
        return sort_by_finish(tasks) if self.sort_mode == SortMode.FINISH else list(tasks)

    def _deliver(self, result: TickResult) -> None:
        for note in result.notifications:
            try:
                self.notifier.notify(note.title, note.body)
                logger.info(f"Notified ({note.kind.value}) {note.title}: {note.body}")
            except Exception as e:
                logger.error(f"Notification for task {note.task_id[:8]} failed: {e}")

    def _place(self, task: Task) -> None:
        if self.sort_mode == SortMode.FINISH:
            insert_by_finish(self.tasks, task)
        else:
            self.tasks.append(task)

    def _reposition(self, task: Task) -> None:
        if self.sort_mode != SortMode.FINISH:
            return
        self.tasks.remove(task)
        insert_by_finish(self.tasks, task)
