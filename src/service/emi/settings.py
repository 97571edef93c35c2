"""
EMI Engine Settings.

Tunable parameters for installment scheduling, classification and the
batch sweeps. Monetary values are in paise.

Environment variables use the EMI_ prefix:
    EMI_GRACE_PERIOD_DAYS=3
    EMI_REMINDER_LOOKAHEAD_DAYS=5
    EMI_ADVANCE_PAYMENT_MONTHS=[2,3,6]

Usage:
    from src.service.emi.settings import emi_settings

    grace = emi_settings.grace_period_days

    # Or create custom settings for testing
    custom = EmiSettings(grace_period_days=5)
"""

from functools import lru_cache
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmiSettings(BaseSettings):
    """
    Configurable parameters for the EMI engine.

    All settings can be overridden via environment variables with EMI_ prefix.
    """

    model_config = SettingsConfigDict(
        env_prefix="EMI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Schedule ===
    grace_period_days: int = Field(
        default=3,
        ge=0,
        description="Days after an installment's due date before it counts as overdue",
    )
    min_due_day: int = Field(
        default=1,
        description="Lowest selectable due day of month",
    )
    max_due_day: int = Field(
        default=31,
        description="Highest selectable due day of month (clamped to month length)",
    )
    min_months: int = Field(
        default=2,
        description="Shortest installment plan a course may offer",
    )

    # === Sweeps ===
    reminder_lookahead_days: int = Field(
        default=5,
        ge=0,
        description="Installments due within this many days get a reminder",
    )

    # === Payment options ===
    advance_payment_months: List[int] = Field(
        default_factory=lambda: [2, 3, 6],
        description="Installment counts offered as multi-EMI payment options",
    )
    max_full_remaining_installments: int = Field(
        default=5,
        description="Offer 'pay everything' only when this many or fewer remain",
    )

    currency: str = Field(
        default="INR",
        description="ISO currency code used for gateway orders",
    )

    @field_validator("advance_payment_months")
    @classmethod
    def validate_advance_months(cls, v: List[int]) -> List[int]:
        if any(m < 2 for m in v):
            raise ValueError("advance_payment_months entries must be >= 2")
        return sorted(set(v))


@lru_cache
def get_emi_settings() -> EmiSettings:
    """Get cached EMI settings instance."""
    return EmiSettings()


emi_settings = get_emi_settings()
