"""Background runner - drives the notification tick and the purge sweep."""

import logging
from datetime import datetime, timedelta

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .config import Config, load_config
from .workflows import ReminderService, get_service

logger = logging.getLogger(__name__)

PURGE_JOB_ID = "purge"


class TickChain:
    """
    Self-rescheduling notification check.

    Each run schedules exactly one follow-up one-shot job, after the check
    has finished, so checks never overlap. A failing check still schedules
    the next one at the maximum interval.
    """

    def __init__(self, scheduler: BaseScheduler, service: ReminderService):
        self.scheduler = scheduler
        self.service = service
        self.runs = 0

    def start(self, delay: float = 0.0) -> None:
        self._schedule(delay)

    def run(self) -> None:
        interval = self.service.timing.max_seconds
        try:
            interval = self.service.tick()
        except Exception:
            logger.exception("Notification check failed")
        finally:
            self.runs += 1
            self._schedule(interval)

    def _schedule(self, delay: float) -> None:
        run_date = datetime.now() + timedelta(seconds=delay)
        self.scheduler.add_job(
            self.run,
            DateTrigger(run_date=run_date),
            name="notification-check",
            misfire_grace_time=None,
        )


def setup_scheduler(
    service: ReminderService,
    config: Config | None = None,
    scheduler: BaseScheduler | None = None,
) -> tuple[BaseScheduler, TickChain]:
    """Register the tick chain and the purge sweep on a scheduler."""
    if config is None:
        config = load_config()
    if scheduler is None:
        scheduler = BlockingScheduler()

    chain = TickChain(scheduler, service)
    chain.start()

    scheduler.add_job(
        service.purge,
        IntervalTrigger(seconds=config.purge_interval_seconds),
        id=PURGE_JOB_ID,
        max_instances=1,
        coalesce=True,
    )
    logger.info(
        f"Scheduled checks every {config.tick_min_seconds:g}-{config.tick_max_seconds:g}s "
        f"(guard {config.tick_guard_seconds:g}s), purge every {config.purge_interval_seconds:g}s"
    )
    return scheduler, chain


def run_scheduler(config: Config | None = None) -> None:
    """Run the reminder in the foreground until interrupted."""
    if config is None:
        config = load_config()

    service = get_service(config)
    scheduler, _ = setup_scheduler(service, config)

    logger.info(f"Watching {len(service.tasks)} task(s) in {config.data_path}")
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        if scheduler.running:
            scheduler.shutdown(wait=False)
        logger.info("Reminder stopped")
