"""Data transfer objects for batch sweeps and repairs."""

from dataclasses import dataclass, field
from typing import List, Optional

from src.application.dto.emi import EmiStatusDTO


@dataclass(frozen=True)
class PlanFailure:
    plan_id: str
    error: str


@dataclass
class SweepSummary:
    """End-of-run counts for the overdue sweep."""

    total: int = 0
    locked: int = 0
    unlocked: int = 0
    completed: int = 0
    unchanged: int = 0
    marked_late: int = 0
    failed: int = 0
    errors: List[PlanFailure] = field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return self.total - self.failed


@dataclass(frozen=True)
class RepairResult:
    """Outcome of reconciling one user's plan for a course."""

    plan_id: str
    plan_updated: bool
    user_updated: bool
    marked_late: int
    previous_status: str
    plan_status: str
    access_status: str
    status: EmiStatusDTO


@dataclass
class RepairSummary:
    total: int = 0
    fixed: int = 0
    errors: List[PlanFailure] = field(default_factory=list)


@dataclass(frozen=True)
class ReminderSummary:
    sent: int
    failed: int
    lookahead_days: int
    window_end: Optional[str] = None
