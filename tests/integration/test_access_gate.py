"""
Integration tests for GET /v1/courses/{course_id}/access.

The gate never rejects a request: it reports full or limited access
and the reason, and handlers branch on it.
"""

import pytest
from httpx import AsyncClient

from src.domain.entities import PlanStatus
from tests.integration.conftest import (
    LAPSED,
    ON_TIME,
    MutableClock,
    seed_emi_plan,
    seed_full_payment,
    user_headers,
)


async def _access(client: AsyncClient, course_id) -> dict:
    response = await client.get(f"/v1/courses/{course_id}/access", headers=user_headers())
    assert response.status_code == 200
    return response.json()


# =============================================================================
# Access Reason Tests
# =============================================================================

class TestAccessReasons:
    """One test per access reason."""

    @pytest.mark.asyncio
    async def test_payment_required(self, client: AsyncClient, user, emi_course):
        data = await _access(client, emi_course.id)

        assert data["has_access"] is False
        assert data["access_type"] == "limited"
        assert data["reason"] == "payment_required"
        assert data["payment_type"] == "none"

    @pytest.mark.asyncio
    async def test_full_payment(self, client: AsyncClient, user, emi_course):
        await seed_full_payment(emi_course)

        data = await _access(client, emi_course.id)

        assert data["has_access"] is True
        assert data["access_type"] == "full"
        assert data["reason"] == "full_payment"

    @pytest.mark.asyncio
    async def test_emi_active(self, client: AsyncClient, emi_plan, clock: MutableClock):
        clock.now = ON_TIME

        data = await _access(client, emi_plan.course_id)

        assert data["has_access"] is True
        assert data["reason"] == "emi_active"
        assert data["plan_status"] == "active"
        assert data["next_due_amount_paise"] == 150000

    @pytest.mark.asyncio
    async def test_grace_period_keeps_access(
        self, client: AsyncClient, emi_plan, clock: MutableClock
    ):
        clock.now = LAPSED.replace(day=7)

        data = await _access(client, emi_plan.course_id)

        assert data["has_access"] is True
        assert data["reason"] == "emi_active"

    @pytest.mark.asyncio
    async def test_emi_overdue(self, client: AsyncClient, emi_plan, clock: MutableClock):
        """Overdue restricts access before any sweep has locked the plan."""
        clock.now = LAPSED

        data = await _access(client, emi_plan.course_id)

        assert data["has_access"] is False
        assert data["access_type"] == "limited"
        assert data["reason"] == "emi_overdue"
        assert data["plan_status"] == "active"
        assert data["overdue_count"] == 1
        assert data["total_overdue_paise"] == 150000

    @pytest.mark.asyncio
    async def test_emi_locked(self, client: AsyncClient, user, emi_course, clock: MutableClock):
        """Locked with nothing overdue: stays limited until a repair unlocks it."""
        plan = await seed_emi_plan(emi_course, status=PlanStatus.LOCKED)
        clock.now = ON_TIME

        data = await _access(client, plan.course_id)

        assert data["has_access"] is False
        assert data["reason"] == "emi_locked"
        assert data["plan_status"] == "locked"

    @pytest.mark.asyncio
    async def test_emi_completed(self, client: AsyncClient, user, emi_course, clock: MutableClock):
        plan = await seed_emi_plan(emi_course, status=PlanStatus.COMPLETED)
        clock.now = LAPSED

        data = await _access(client, plan.course_id)

        assert data["has_access"] is True
        assert data["access_type"] == "full"
        assert data["reason"] == "emi_completed"


# =============================================================================
# Precedence Tests
# =============================================================================

class TestAccessPrecedence:
    """Tests for how the gate orders its checks."""

    @pytest.mark.asyncio
    async def test_full_payment_supersedes_overdue_plan(
        self,
        client: AsyncClient,
        emi_course,
        emi_plan,
        clock: MutableClock,
    ):
        await seed_full_payment(emi_course)
        clock.now = LAPSED

        data = await _access(client, emi_plan.course_id)

        assert data["has_access"] is True
        assert data["reason"] == "full_payment"

    @pytest.mark.asyncio
    async def test_access_changes_with_time(
        self, client: AsyncClient, emi_plan, clock: MutableClock
    ):
        """No state is written between reads; only the clock moves."""
        clock.now = ON_TIME
        assert (await _access(client, emi_plan.course_id))["has_access"] is True

        clock.now = LAPSED
        assert (await _access(client, emi_plan.course_id))["has_access"] is False

    @pytest.mark.asyncio
    async def test_other_user_sees_payment_required(
        self, client: AsyncClient, emi_plan, clock: MutableClock
    ):
        response = await client.get(
            f"/v1/courses/{emi_plan.course_id}/access", headers=user_headers("someone_else")
        )

        assert response.status_code == 200
        assert response.json()["reason"] == "payment_required"

    @pytest.mark.asyncio
    async def test_missing_user_header(self, client: AsyncClient, emi_plan):
        response = await client.get(f"/v1/courses/{emi_plan.course_id}/access")

        assert response.status_code == 401
