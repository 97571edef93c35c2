"""Payment ledger and gateway value objects."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from uuid import UUID, uuid4

from src.core.clock import utcnow


class PaymentType(str, Enum):
    FULL = "full"
    EMI = "emi"
    EMI_INSTALLMENT = "emi_installment"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class PaymentMethod(str, Enum):
    CARD = "CARD"
    UPI = "UPI"
    NETBANKING = "NETBANKING"
    WALLET = "WALLET"
    EMI = "EMI"
    PAYLATER = "PAYLATER"
    OTHER = "OTHER"

    @classmethod
    def from_gateway(cls, method: Optional[str]) -> "PaymentMethod":
        mapping = {
            "card": cls.CARD,
            "upi": cls.UPI,
            "netbanking": cls.NETBANKING,
            "wallet": cls.WALLET,
            "emi": cls.EMI,
            "cardless_emi": cls.PAYLATER,
            "paylater": cls.PAYLATER,
        }
        return mapping.get((method or "").lower(), cls.OTHER)


@dataclass(frozen=True)
class SettledInstallment:
    """Installment settled by a ledger row, kept for reconciliation."""

    installment_id: str
    sequence_number: int
    amount_paise: int
    was_overdue: bool

    def to_dict(self) -> dict:
        return {
            "installment_id": self.installment_id,
            "sequence_number": self.sequence_number,
            "amount_paise": self.amount_paise,
            "was_overdue": self.was_overdue,
        }


@dataclass
class Payment:
    """
    Ledger row for one monetary transaction.

    Written as ``pending`` when the gateway order is created and completed
    exactly once on verification; immutable afterwards.
    """

    user_id: str
    course_id: UUID
    amount_paise: int
    payment_type: PaymentType
    gateway_order_id: str
    transaction_id: str
    currency: str = "INR"
    status: PaymentStatus = PaymentStatus.PENDING
    plan_id: Optional[UUID] = None
    emi_due_day: Optional[int] = None
    gateway_payment_id: Optional[str] = None
    gateway_signature: Optional[str] = None
    method: Optional[PaymentMethod] = None
    installments: List[SettledInstallment] = field(default_factory=list)
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=utcnow)
    completed_at: Optional[datetime] = None

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED


@dataclass(frozen=True)
class GatewayCorrelation:
    """Identifiers echoed back by the gateway for a captured payment."""

    order_id: str
    payment_id: str
    signature: str


@dataclass(frozen=True)
class GatewayOrder:
    order_id: str
    amount_paise: int
    currency: str
    receipt: str
    status: str = "created"


@dataclass(frozen=True)
class GatewayPayment:
    payment_id: str
    order_id: Optional[str]
    status: str
    method: Optional[str]
    amount_paise: int
    details: Dict[str, object] = field(default_factory=dict)

    @property
    def is_captured(self) -> bool:
        return self.status == "captured"
