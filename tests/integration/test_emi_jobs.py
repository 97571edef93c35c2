"""
Integration tests for the batch job entry point.

These tests verify:
1. The jobs package imports as a regular package
2. Each job runs the matching sweep and reports failures
3. Unknown jobs are rejected
"""

import pytest

import src.jobs
from src.application.services import EmiSweeper
from src.core.dependencies import plan_store_scope
from src.domain.entities import NotificationType, PlanStatus
from src.jobs import emi_jobs
from tests.integration.conftest import (
    CATCH_UP,
    LAPSED,
    MockNotificationSender,
    load_plan,
)


@pytest.fixture
def sweeper(mock_notifier: MockNotificationSender) -> EmiSweeper:
    return EmiSweeper(store_scope=plan_store_scope, notifier=mock_notifier)


@pytest.fixture
def job_clock(monkeypatch):
    """Pin the time the jobs read."""

    def set_now(now):
        monkeypatch.setattr(emi_jobs, "utcnow", lambda: now)

    return set_now


# =============================================================================
# Package Tests
# =============================================================================

class TestJobsPackage:
    """The module runs as ``python -m src.jobs.emi_jobs``."""

    def test_regular_package(self):
        assert src.jobs.__file__ is not None
        assert emi_jobs.JOBS == ("sweep", "reminders", "repair-all")


# =============================================================================
# run_job Tests
# =============================================================================

class TestRunJob:
    """Tests for emi_jobs.run_job."""

    @pytest.mark.asyncio
    async def test_sweep_locks_lapsed_plan(
        self,
        emi_plan,
        sweeper: EmiSweeper,
        job_clock,
        mock_notifier: MockNotificationSender,
    ):
        job_clock(LAPSED)

        failures = await emi_jobs.run_job("sweep", sweeper)

        assert failures == 0
        plan = await load_plan(emi_plan.id)
        assert plan.status == PlanStatus.LOCKED
        assert len(mock_notifier.of_type(NotificationType.LOCK)) == 1

    @pytest.mark.asyncio
    async def test_repair_all_without_failures(self, emi_plan, sweeper: EmiSweeper, job_clock):
        job_clock(CATCH_UP)

        assert await emi_jobs.run_job("repair-all", sweeper) == 0

    @pytest.mark.asyncio
    async def test_reminders_never_report_failures(self, emi_plan, sweeper: EmiSweeper, job_clock):
        job_clock(LAPSED)

        assert await emi_jobs.run_job("reminders", sweeper) == 0

    @pytest.mark.asyncio
    async def test_unknown_job(self, sweeper: EmiSweeper, job_clock):
        job_clock(LAPSED)

        with pytest.raises(ValueError):
            await emi_jobs.run_job("vacuum", sweeper)

    @pytest.mark.asyncio
    async def test_cli_rejects_unknown_job(self):
        with pytest.raises(SystemExit):
            await emi_jobs.main(["vacuum"])
