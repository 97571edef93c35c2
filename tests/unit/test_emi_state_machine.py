"""
Unit tests for the plan status state machine.

These tests verify:
1. Transitions derived from a fresh classification
2. Terminal states never move
3. Illegal transitions raise
4. The access status the enrollment cache should mirror
"""

from datetime import datetime

import pytest

from src.domain.entities import AccessStatus, InstallmentStatus, PlanStatus
from src.domain.exceptions import InvalidPlanTransitionException
from src.service.emi import (
    calculate_emi_status,
    can_transition,
    effective_access_status,
    ensure_transition,
    is_terminal,
    next_status,
)

ON_TIME = datetime(2026, 1, 20)
LAPSED = datetime(2026, 2, 10)


def _pay_all(plan):
    for inst in plan.installments:
        inst.status = InstallmentStatus.PAID


# =============================================================================
# next_status
# =============================================================================

class TestNextStatus:
    """Tests for classification-driven transitions."""

    def test_active_with_overdue_locks(self, plan):
        snapshot = calculate_emi_status(plan, LAPSED)
        assert next_status(PlanStatus.ACTIVE, snapshot) == PlanStatus.LOCKED

    def test_locked_without_overdue_unlocks(self, plan):
        plan.status = PlanStatus.LOCKED
        snapshot = calculate_emi_status(plan, ON_TIME)
        assert next_status(PlanStatus.LOCKED, snapshot) == PlanStatus.ACTIVE

    def test_locked_with_overdue_stays_locked(self, plan):
        plan.status = PlanStatus.LOCKED
        snapshot = calculate_emi_status(plan, LAPSED)
        assert next_status(PlanStatus.LOCKED, snapshot) == PlanStatus.LOCKED

    def test_active_on_time_stays_active(self, plan):
        snapshot = calculate_emi_status(plan, ON_TIME)
        assert next_status(PlanStatus.ACTIVE, snapshot) == PlanStatus.ACTIVE

    @pytest.mark.parametrize("current", [PlanStatus.ACTIVE, PlanStatus.LOCKED])
    def test_fully_paid_completes(self, plan, current):
        """Completion takes precedence over unlocking."""
        plan.status = current
        _pay_all(plan)
        snapshot = calculate_emi_status(plan, LAPSED)
        assert next_status(current, snapshot) == PlanStatus.COMPLETED

    @pytest.mark.parametrize("terminal", [PlanStatus.COMPLETED, PlanStatus.CANCELLED])
    def test_terminal_states_never_move(self, plan, terminal):
        plan.status = terminal
        snapshot = calculate_emi_status(plan, LAPSED)
        assert next_status(terminal, snapshot) == terminal


# =============================================================================
# Transition table
# =============================================================================

class TestTransitionTable:
    """Tests for the explicit transition table."""

    def test_terminal_states(self):
        assert is_terminal(PlanStatus.COMPLETED)
        assert is_terminal(PlanStatus.CANCELLED)
        assert not is_terminal(PlanStatus.ACTIVE)
        assert not is_terminal(PlanStatus.LOCKED)

    @pytest.mark.parametrize(
        "current,target",
        [
            (PlanStatus.ACTIVE, PlanStatus.LOCKED),
            (PlanStatus.LOCKED, PlanStatus.ACTIVE),
            (PlanStatus.ACTIVE, PlanStatus.COMPLETED),
            (PlanStatus.LOCKED, PlanStatus.COMPLETED),
            (PlanStatus.ACTIVE, PlanStatus.CANCELLED),
            (PlanStatus.LOCKED, PlanStatus.CANCELLED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)
        ensure_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (PlanStatus.COMPLETED, PlanStatus.LOCKED),
            (PlanStatus.COMPLETED, PlanStatus.ACTIVE),
            (PlanStatus.CANCELLED, PlanStatus.ACTIVE),
            (PlanStatus.ACTIVE, PlanStatus.ACTIVE),
        ],
    )
    def test_illegal_raises(self, current, target):
        assert not can_transition(current, target)
        with pytest.raises(InvalidPlanTransitionException):
            ensure_transition(current, target)


# =============================================================================
# effective_access_status
# =============================================================================

class TestEffectiveAccessStatus:
    """Tests for the enrollment access cache value."""

    def test_active_and_current(self, plan):
        snapshot = calculate_emi_status(plan, ON_TIME)
        assert effective_access_status(PlanStatus.ACTIVE, snapshot) == AccessStatus.ACTIVE

    def test_active_but_overdue(self, plan):
        snapshot = calculate_emi_status(plan, LAPSED)
        assert effective_access_status(PlanStatus.ACTIVE, snapshot) == AccessStatus.LOCKED

    def test_locked(self, plan):
        snapshot = calculate_emi_status(plan, ON_TIME)
        assert effective_access_status(PlanStatus.LOCKED, snapshot) == AccessStatus.LOCKED

    def test_completed_keeps_access(self, plan):
        _pay_all(plan)
        snapshot = calculate_emi_status(plan, LAPSED)
        assert effective_access_status(PlanStatus.COMPLETED, snapshot) == AccessStatus.ACTIVE

    def test_cancelled_loses_access(self, plan):
        snapshot = calculate_emi_status(plan, ON_TIME)
        assert effective_access_status(PlanStatus.CANCELLED, snapshot) == AccessStatus.LOCKED
