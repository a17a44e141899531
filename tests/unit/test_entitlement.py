from datetime import date, datetime, timezone

import pytest

from app.models.plan import PlanTier
from app.services.entitlement import evaluate_entitlement, monthly_cap_for
from app.utils.clock import day_of_week, month_bounds


class TestPlanTierFromLabel:
    @pytest.mark.parametrize("label, tier", [
        ("Monthly Limited", PlanTier.MONTHLY_LIMITED),
        ("monthly unlimited", PlanTier.MONTHLY_UNLIMITED),
        ("UNLIMITED", PlanTier.MONTHLY_UNLIMITED),
        ("Single Visit", PlanTier.SINGLE_VISIT),
        ("monthly_limited", PlanTier.MONTHLY_LIMITED),
        ("Family", PlanTier.UNKNOWN),
        (None, PlanTier.UNKNOWN),
    ])
    def test_labels(self, label, tier):
        assert PlanTier.from_label(label) == tier

    def test_enum_passes_through(self):
        assert PlanTier.from_label(PlanTier.SINGLE_VISIT) is PlanTier.SINGLE_VISIT


class TestEvaluateEntitlement:
    def test_limited_cap(self):
        assert monthly_cap_for(PlanTier.MONTHLY_LIMITED) == 12

    def test_limited_below_cap(self):
        entitlement = evaluate_entitlement(PlanTier.MONTHLY_LIMITED, 11)

        assert entitlement.allowed is True
        assert entitlement.remaining_this_month == 1
        assert entitlement.monthly_limit == 12

    def test_limited_at_cap(self):
        entitlement = evaluate_entitlement(PlanTier.MONTHLY_LIMITED, 12)

        assert entitlement.allowed is False
        assert entitlement.remaining_this_month == 0
        assert entitlement.message == "Monthly visit limit reached (12/12)"

    def test_unlimited_has_no_cap(self):
        entitlement = evaluate_entitlement(PlanTier.MONTHLY_UNLIMITED, 500)

        assert entitlement.allowed is True
        assert entitlement.monthly_limit is None

    def test_single_visit_is_allowed(self):
        assert evaluate_entitlement(PlanTier.SINGLE_VISIT, 3).allowed is True

    def test_unknown_is_allowed_and_flagged(self):
        entitlement = evaluate_entitlement(PlanTier.UNKNOWN, 0)

        assert entitlement.allowed is True
        assert entitlement.unknown_plan is True


class TestClockHelpers:
    def test_month_bounds_mid_month(self):
        start, end = month_bounds(datetime(2025, 11, 17, 15, 30, tzinfo=timezone.utc))

        assert start == datetime(2025, 11, 1, tzinfo=timezone.utc)
        assert end == datetime(2025, 12, 1, tzinfo=timezone.utc)

    def test_month_bounds_december(self):
        start, end = month_bounds(datetime(2025, 12, 31, 23, 59, tzinfo=timezone.utc))

        assert start == datetime(2025, 12, 1, tzinfo=timezone.utc)
        assert end == datetime(2026, 1, 1, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value, expected", [
        (date(2025, 11, 2), 0),  # Sunday
        (date(2025, 11, 4), 2),  # Tuesday
        (date(2025, 11, 8), 6),  # Saturday
    ])
    def test_day_of_week_starts_on_sunday(self, value, expected):
        assert day_of_week(value) == expected
