"""
Daily cleanup of the booking sheets.

Runs once a day at CLEAR_HOUR:00 (bot timezone) through APScheduler. Each
worker process that enables the scheduler gets its own job, so turn it on in
exactly one process (ENABLE_SCHEDULER).
"""

import logging
from datetime import datetime

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

JOB_ID = 'daily_cleanup'


def daily_cleanup(router):
    logging.info(f"Starting daily cleanup at {datetime.now()}")
    snapshot = router.reset()
    logging.info(f"Daily cleanup completed, grand total {snapshot.grand_total}")
    return snapshot


def _on_job_error(event):
    logging.error(f"Scheduled job FAILED: job_id={event.job_id} error={event.exception}")
    if event.traceback:
        logging.error(f"Traceback for job {event.job_id}:\n{event.traceback}")


def _on_job_missed(event):
    logging.warning(f"Scheduled job MISSED: job_id={event.job_id} scheduled_run_time={event.scheduled_run_time}")


def build_scheduler(config, router, scheduler=None):
    """Register the cleanup job; the caller decides when to start the scheduler."""
    if scheduler is None:
        scheduler = BackgroundScheduler(
            timezone=config.timezone,
            job_defaults={
                'coalesce': True,
                'max_instances': 1,
                'misfire_grace_time': 3600,
            }
        )
    scheduler.add_job(
        func=daily_cleanup,
        args=[router],
        trigger=CronTrigger(hour=config.clear_hour, minute=0, timezone=config.timezone),
        id=JOB_ID,
        name='Clear booking sheets',
        replace_existing=True,
    )
    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)
    logging.info(f"Daily cleanup scheduled for {config.clear_hour}:00 ({config.timezone})")
    return scheduler


def start_scheduler(config, router):
    scheduler = build_scheduler(config, router)
    scheduler.start()
    return scheduler
