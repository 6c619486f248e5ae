"""
Retention Scheduler - APScheduler-based background cleanup

Runs the retention sweep once a day: snippets and developer-context rows
older than the configured horizon are deleted. Error patterns are kept.
"""

import logging
from typing import Dict, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
import pytz

from devassist.storage.code_store import CodeStore

logger = logging.getLogger(__name__)

JOB_ID = "daily_retention_sweep"


class RetentionScheduler:
    """
    Background scheduler for the retention sweep.

    Example:
        scheduler = RetentionScheduler(store, days_to_keep=30)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        store: CodeStore,
        days_to_keep: int = 30,
        timezone_str: str = "UTC",
        hour: int = 3,
    ):
        """
        Initialize retention scheduler.

        Args:
            store: Initialized code store
            days_to_keep: Retention horizon in days
            timezone_str: Timezone for scheduling (default: UTC)
            hour: Hour of day the sweep runs at (default: 3)
        """
        self.store = store
        self.days_to_keep = days_to_keep
        self.hour = hour
        self.scheduler = BackgroundScheduler(timezone=pytz.timezone(timezone_str))

    def _run_sweep(self) -> None:
        try:
            self.run_now()
        except Exception as e:
            logger.error(f"Unexpected error in retention sweep: {str(e)}", exc_info=True)

    def run_now(self) -> Dict[str, int]:
        """Run the sweep immediately."""
        logger.info(f"Running retention sweep (keeping {self.days_to_keep} days)")
        return self.store.cleanup_old_data(self.days_to_keep)

    def start(self) -> None:
        """Start the scheduler."""
        if self.scheduler.running:
            logger.warning("Scheduler already running")
            return

        self.scheduler.add_job(
            self._run_sweep,
            CronTrigger(hour=self.hour, minute=0),
            id=JOB_ID,
            name="Daily Retention Sweep",
            max_instances=1,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info("Retention scheduler started")

    def stop(self) -> None:
        """Stop the scheduler."""
        if not self.scheduler.running:
            logger.warning("Scheduler not running")
            return

        self.scheduler.shutdown(wait=True)
        logger.info("Retention scheduler stopped")

    def get_job_status(self) -> Optional[Dict]:
        """Get status of the scheduled sweep, or None if not scheduled."""
        job = self.scheduler.get_job(JOB_ID)
        if not job:
            return None

        return {
            "name": job.name,
            "id": job.id,
            "trigger": str(job.trigger),
            "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
        }
