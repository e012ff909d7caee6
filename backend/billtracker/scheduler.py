# billtracker/scheduler.py
"""Reminder worker: runs the two notification sweeps on a fixed timetable.

    python -m billtracker.scheduler

Regular reminders go out daily at 18:00, urgent ones at 06:00, 12:00,
15:00 and 18:00 (local time in settings.TIMEZONE). Run exactly one of these
processes; sweeps are not safe to overlap.
"""
import logging

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger

from billtracker.core.config import settings as default_settings
from billtracker.core.logging import configure_logging
from billtracker.db.session import make_engine, make_session_factory
from billtracker.services.files import LocalFileStore
from billtracker.services.mailer import mailer_from_settings
from billtracker.services.notifications import NotificationService

logger = logging.getLogger(__name__)

REGULAR_HOURS = "18"
URGENT_HOURS = "6,12,15,18"


class ReminderJobs:
    def __init__(self, session_factory, mailer, file_store):
        self.session_factory = session_factory
        self.mailer = mailer
        self.file_store = file_store

    def _run(self, sweep_name: str) -> int:
        db = self.session_factory()
        try:
            service = NotificationService.from_session(db, self.mailer, self.file_store)
            return getattr(service, sweep_name)()
        except Exception:
            # a failed run must not kill the scheduler; the next tick retries
            logger.exception("%s aborted", sweep_name)
            db.rollback()
            return 0
        finally:
            db.close()

    def regular(self) -> int:
        return self._run("run_regular_notification_sweep")

    def urgent(self) -> int:
        return self._run("run_urgent_notification_sweep")


def build_scheduler(jobs: ReminderJobs, timezone: str) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone=timezone)
    common = dict(max_instances=1, coalesce=True, misfire_grace_time=15 * 60)
    scheduler.add_job(
        jobs.regular,
        CronTrigger(hour=REGULAR_HOURS, minute=0, timezone=timezone),
        id="regular-reminders",
        **common,
    )
    scheduler.add_job(
        jobs.urgent,
        CronTrigger(hour=URGENT_HOURS, minute=0, timezone=timezone),
        id="urgent-reminders",
        **common,
    )
    return scheduler


def main(settings=None) -> None:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    jobs = ReminderJobs(
        make_session_factory(make_engine(settings.DATABASE_URL)),
        mailer_from_settings(settings),
        LocalFileStore(settings.UPLOAD_ROOT),
    )
    scheduler = build_scheduler(jobs, settings.TIMEZONE)
    logger.info("Reminder scheduler started (%s)", settings.TIMEZONE)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Reminder scheduler stopped")


if __name__ == "__main__":
    main()
