"""Course catalog entity (read-only from the EMI engine's point of view)."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from src.core.clock import utcnow


@dataclass
class Course:
    """A purchasable course and its optional EMI offer."""

    title: str
    price_paise: int
    emi_enabled: bool = False
    emi_months: Optional[int] = None
    emi_monthly_amount_paise: Optional[int] = None
    emi_notes: str = ""
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)

    @property
    def emi_total_paise(self) -> int:
        if not self.emi_months or not self.emi_monthly_amount_paise:
            return 0
        return self.emi_months * self.emi_monthly_amount_paise
