"""
Background job scheduler using APScheduler.

Runs the response cache expiry sweep on a fixed interval. The sweep is
advisory: ResponseCache.get checks expiry itself, so a late or skipped sweep
only delays memory reclamation.
"""
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, JobExecutionEvent

from core.cache import ResponseCache
from core.config import config
from core.observability import get_logger, correlation_context

logger = get_logger(__name__)

SWEEP_JOB_ID = "cache_sweep"


class BackgroundScheduler:
    """
    Background job scheduler.

    Usage:
        scheduler = BackgroundScheduler(cache)
        scheduler.start()

        # Later...
        scheduler.shutdown()
    """

    def __init__(self, cache: ResponseCache, sweep_interval: Optional[int] = None):
        self.cache = cache
        self.sweep_interval = sweep_interval or config.cache.sweep_interval_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._started = False
        self.sweep_count = 0

    def start(self) -> None:
        """Start the scheduler and register the sweep job. Needs a running event loop."""
        if self._started:
            logger.warning("Scheduler already started")
            return

        self._scheduler = AsyncIOScheduler()
        self._scheduler.add_listener(self._on_job_error, EVENT_JOB_ERROR)
        self._scheduler.add_job(
            self.run_sweep,
            trigger=IntervalTrigger(seconds=self.sweep_interval),
            id=SWEEP_JOB_ID,
            name="Cache Sweep",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self._scheduler.start()
        self._started = True
        logger.info(f"Background scheduler started (cache sweep every {self.sweep_interval}s)")

    async def run_sweep(self) -> int:
        """Drop expired cache entries."""
        with correlation_context(f"job-{SWEEP_JOB_ID}"):
            removed = self.cache.sweep()
            self.sweep_count += 1
            if removed:
                logger.info(f"Cache sweep removed {removed} expired entries")
            return removed

    def _on_job_error(self, event: JobExecutionEvent) -> None:
        logger.error(
            f"Job {event.job_id} failed: {event.exception}",
            extra={"job_id": event.job_id},
        )

    def shutdown(self, wait: bool = False) -> None:
        """Shutdown the scheduler."""
        if self._scheduler and self._started:
            self._scheduler.shutdown(wait=wait)
            self._started = False
            logger.info("Background scheduler stopped")

    @property
    def is_running(self) -> bool:
        """Check if scheduler is running."""
        return self._started and self._scheduler is not None
