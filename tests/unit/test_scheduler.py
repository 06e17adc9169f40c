"""Tests for the stale-pending reconciliation job and scheduler wiring."""

import logging
from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, patch

import pytest

from meetnotes.domain.summary import SummaryStatus
from meetnotes.repositories.summary_repo import SummaryRepository
from meetnotes.scheduler.jobs import SchedulerService, reconcile_stale_pending


class TestReconcileStalePending:
    @pytest.mark.asyncio
    async def test_fails_only_stale_rows(self, test_session, test_session_factory):
        repo = SummaryRepository(test_session)
        stale = await repo.create_pending("transcript text", "prompt", "m")
        fresh = await repo.create_pending("transcript text", "prompt", "m")
        stale.created_at = datetime.now(UTC) - timedelta(hours=3)
        await test_session.commit()

        count = await reconcile_stale_pending(session_factory=test_session_factory)

        assert count == 1
        await test_session.refresh(stale)
        await test_session.refresh(fresh)
        assert stale.status == SummaryStatus.FAILED
        assert fresh.status == SummaryStatus.PENDING

    @pytest.mark.asyncio
    async def test_nothing_to_do(self, test_session_factory):
        assert await reconcile_stale_pending(session_factory=test_session_factory) == 0


class TestSchedulerService:
    @pytest.mark.asyncio
    async def test_start_registers_job(self):
        service = SchedulerService()
        service.start()
        try:
            job = service.scheduler.get_job("reconcile_stale_pending")
            assert job is not None
            assert job.name == "Stale Pending Summary Reconciliation"
        finally:
            service.shutdown()
        assert not service.scheduler.running

    def test_shutdown_when_not_running(self):
        SchedulerService().shutdown()

    @pytest.mark.asyncio
    async def test_job_failure_is_logged(self, caplog):
        with patch(
            "meetnotes.scheduler.jobs.reconcile_stale_pending",
            new=AsyncMock(side_effect=RuntimeError("db down")),
        ):
            with caplog.at_level(logging.ERROR):
                await SchedulerService()._run_reconcile_job()

        assert "Pending reconciliation job failed: db down" in caplog.text

    @pytest.mark.asyncio
    async def test_job_logs_count(self, caplog):
        with patch(
            "meetnotes.scheduler.jobs.reconcile_stale_pending",
            new=AsyncMock(return_value=2),
        ):
            with caplog.at_level(logging.WARNING):
                await SchedulerService()._run_reconcile_job()

        assert "Marked 2 stale pending summaries as failed" in caplog.text
