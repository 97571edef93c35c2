"""Unit tests for course EMI eligibility and engine settings."""

import pytest
from pydantic import ValidationError

from src.domain.entities import Course
from src.domain.exceptions import EmiNotAvailableException
from src.service.emi import EmiSettings, get_emi_details, validate_course_for_emi


def make_course(**overrides) -> Course:
    values = dict(
        title="Data Structures",
        price_paise=900000,
        emi_enabled=True,
        emi_months=6,
        emi_monthly_amount_paise=150000,
        emi_notes="No-cost EMI",
    )
    values.update(overrides)
    return Course(**values)


class TestGetEmiDetails:

    def test_eligible_course(self):
        details = get_emi_details(make_course())

        assert details.eligible is True
        assert details.months == 6
        assert details.monthly_amount_paise == 150000
        assert details.total_amount_paise == 900000
        assert details.notes == "No-cost EMI"
        assert details.reason is None

    @pytest.mark.parametrize(
        "overrides",
        [
            {"emi_enabled": False},
            {"emi_months": None},
            {"emi_monthly_amount_paise": None},
        ],
    )
    def test_not_offered(self, overrides):
        details = get_emi_details(make_course(**overrides))

        assert details.eligible is False
        assert details.reason


class TestValidateCourseForEmi:

    def test_valid_offer(self):
        details = validate_course_for_emi(make_course())
        assert details.eligible is True

    def test_disabled_raises(self):
        with pytest.raises(EmiNotAvailableException):
            validate_course_for_emi(make_course(emi_enabled=False))

    def test_too_few_months_raises(self):
        course = make_course(price_paise=150000, emi_months=1)
        with pytest.raises(EmiNotAvailableException):
            validate_course_for_emi(course)

    def test_total_must_match_price(self):
        with pytest.raises(EmiNotAvailableException) as exc_info:
            validate_course_for_emi(make_course(price_paise=899999))

        assert exc_info.value.code == "EMI_NOT_AVAILABLE"

    def test_custom_min_months(self):
        course = make_course(price_paise=300000, emi_months=2)
        with pytest.raises(EmiNotAvailableException):
            validate_course_for_emi(course, EmiSettings(min_months=3))


class TestEmiSettings:

    def test_defaults(self):
        config = EmiSettings()

        assert config.grace_period_days == 3
        assert config.reminder_lookahead_days == 5
        assert config.advance_payment_months == [2, 3, 6]
        assert config.max_full_remaining_installments == 5

    def test_advance_months_sorted_and_deduplicated(self):
        config = EmiSettings(advance_payment_months=[6, 2, 3, 2])
        assert config.advance_payment_months == [2, 3, 6]

    def test_single_month_advance_rejected(self):
        with pytest.raises(ValidationError):
            EmiSettings(advance_payment_months=[1, 3])

    def test_negative_grace_rejected(self):
        with pytest.raises(ValidationError):
            EmiSettings(grace_period_days=-1)
