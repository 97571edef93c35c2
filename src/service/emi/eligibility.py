"""Course EMI eligibility checks."""

from dataclasses import dataclass
from typing import Optional

from src.domain.entities import Course
from src.domain.exceptions import EmiNotAvailableException

from .settings import EmiSettings, emi_settings


@dataclass(frozen=True)
class EmiDetails:
    eligible: bool
    months: int = 0
    monthly_amount_paise: int = 0
    total_amount_paise: int = 0
    notes: str = ""
    reason: Optional[str] = None


def get_emi_details(course: Course) -> EmiDetails:
    """Summarise the course's EMI offer, or why there is none."""
    if not course.emi_enabled or not course.emi_months or not course.emi_monthly_amount_paise:
        return EmiDetails(eligible=False, reason="EMI not available for this course")

    return EmiDetails(
        eligible=True,
        months=course.emi_months,
        monthly_amount_paise=course.emi_monthly_amount_paise,
        total_amount_paise=course.emi_total_paise,
        notes=course.emi_notes,
    )


def validate_course_for_emi(course: Course, settings: EmiSettings | None = None) -> EmiDetails:
    """
    Check that a course's EMI offer is coherent.

    Raises:
        EmiNotAvailableException: If EMI is off, too short, or the
            installments do not add up to the course price
    """
    settings = settings or emi_settings
    details = get_emi_details(course)

    if not details.eligible:
        raise EmiNotAvailableException(str(course.id), details.reason or "EMI not available")

    if details.months < settings.min_months:
        raise EmiNotAvailableException(
            str(course.id),
            f"EMI plans need at least {settings.min_months} installments",
        )

    if details.total_amount_paise != course.price_paise:
        raise EmiNotAvailableException(
            str(course.id),
            f"EMI total amount {details.total_amount_paise} does not match "
            f"course price {course.price_paise}",
        )

    return details
