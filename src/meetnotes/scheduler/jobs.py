"""Background job scheduler for MeetNotes."""

import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from meetnotes.config import get_settings
from meetnotes.infrastructure.database import async_session_factory
from meetnotes.repositories.summary_repo import SummaryRepository

logger = logging.getLogger(__name__)
settings = get_settings()


async def reconcile_stale_pending(session_factory=async_session_factory) -> int:
    """Fail summaries stuck in ``pending`` past the configured timeout.

    A summary stays pending only while its model call is in flight, so a row
    older than the timeout belongs to a request that died mid-call.
    """
    async with session_factory() as session:
        repo = SummaryRepository(session)
        count = await repo.fail_stale_pending(settings.pending_timeout_minutes)
        await session.commit()
    return count


class SchedulerService:
    """Manages background maintenance jobs."""

    def __init__(self) -> None:
        """Initialize the scheduler service."""
        self.scheduler = AsyncIOScheduler()

    async def _run_reconcile_job(self) -> None:
        """Mark abandoned pending summaries as failed."""
        try:
            count = await reconcile_stale_pending()
            if count:
                logger.warning(
                    f"Marked {count} stale pending summaries as failed "
                    f"(older than {settings.pending_timeout_minutes}m)"
                )
            else:
                logger.info("No stale pending summaries found")
        except Exception as e:
            logger.error(f"Pending reconciliation job failed: {e}", exc_info=True)

    def start(self) -> None:
        """Start the scheduler with configured jobs."""
        interval = settings.reconcile_interval_minutes
        self.scheduler.add_job(
            self._run_reconcile_job,
            trigger=IntervalTrigger(minutes=interval),
            id="reconcile_stale_pending",
            name="Stale Pending Summary Reconciliation",
            replace_existing=True,
        )
        logger.info(f"Scheduled pending reconciliation (every {interval}m)")

        self.scheduler.start()
        logger.info("Scheduler started")

    def shutdown(self) -> None:
        """Shutdown the scheduler gracefully."""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Scheduler shut down")


# Singleton instance
_scheduler_service: SchedulerService | None = None


def get_scheduler() -> SchedulerService:
    """Get or create the scheduler service singleton."""
    global _scheduler_service
    if _scheduler_service is None:
        _scheduler_service = SchedulerService()
    return _scheduler_service
