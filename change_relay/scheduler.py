# change_relay/scheduler.py
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

logger = logging.getLogger(__name__)

POLL_JOB_ID = "poll_opportunities"


def poll_job(app, relay):
    """Run one cycle inside an app context; a failing cycle is logged, never raised."""
    with app.app_context():
        try:
            relay.run_cycle()
        except Exception as e:
            logger.exception("Polling error: %s", e)


def start_scheduler(app, relay, interval_seconds: int = 60) -> BackgroundScheduler:
    scheduler = BackgroundScheduler(timezone="UTC")
    scheduler.add_job(
        poll_job,
        trigger=IntervalTrigger(seconds=interval_seconds),
        args=[app, relay],
        id=POLL_JOB_ID,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    scheduler.start()
    logger.info("Polling every %ss", interval_seconds)
    return scheduler
