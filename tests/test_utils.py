"""Tests for pure helpers: slugs, date windows, growth, pricing, schedules and progress rollup."""

from datetime import datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tutorhub.model.enums import DiscountType, PaymentMethod, PaymentPlan, PaymentStatus, UserStatus
from tutorhub.services.enrollment_service import (
    build_payment_schedule,
    calculate_pricing,
    payment_status_for,
)
from tutorhub.services.syllabus_service import rollup
from tutorhub.utils.date_utils import day_bounds, growth_percentage, month_windows, time_ago, week_window
from tutorhub.utils.exceptions import BadRequestException
from tutorhub.utils.parser_utils import ParserUtils
from tutorhub.utils.text_utils import course_slug, slugify, with_suffix


class TestSlugs:
    """Tests for slug generation."""

    def test_slugify_strips_symbols_and_collapses_dashes(self):
        assert slugify("Web Development!") == "web-development"
        assert slugify("  A -- B  ") == "a-b"

    def test_course_slug_replaces_runs_of_non_alphanumerics(self):
        assert course_slug("GCSE Maths: Paper 1 (Higher)") == "gcse-maths-paper-1-higher"

    def test_with_suffix(self):
        assert with_suffix("maths", 0) == "maths"
        assert with_suffix("maths", 2) == "maths-2"


class TestDateWindows:
    """Tests for calendar windows used by stats and attendance."""

    def test_day_bounds(self):
        start, end = day_bounds(datetime(2024, 3, 5).date())
        assert start == datetime(2024, 3, 5)
        assert end == datetime(2024, 3, 6)

    def test_month_windows_wraps_january(self):
        current, previous, end_previous = month_windows(datetime(2024, 1, 15, 10))
        assert current == datetime(2024, 1, 1)
        assert previous == datetime(2023, 12, 1)
        assert end_previous == datetime(2023, 12, 31, 23, 59, 59)

    def test_week_window_starts_on_sunday(self):
        # 2024-03-06 is a Wednesday
        start, end = week_window(datetime(2024, 3, 6, 12))
        assert start == datetime(2024, 3, 3)
        assert end == datetime(2024, 3, 10)

    def test_week_window_on_sunday_itself(self):
        start, _ = week_window(datetime(2024, 3, 3, 8))
        assert start == datetime(2024, 3, 3)

    def test_time_ago(self):
        now = datetime(2024, 3, 6, 12)
        assert time_ago(datetime(2024, 3, 6, 11, 59, 30), now) == "30 seconds ago"
        assert time_ago(datetime(2024, 3, 6, 9), now) == "3 hours ago"
        assert time_ago(datetime(2024, 3, 1, 12), now) == "5 days ago"


class TestGrowth:
    """Tests for month-over-month growth."""

    @pytest.mark.parametrize(
        "current, previous, expected",
        [(0, 0, 0), (3, 0, 100), (15, 10, 50), (5, 10, -50), (1, 3, -67)],
    )
    def test_growth_percentage(self, current, previous, expected):
        assert growth_percentage(current, previous) == expected


class TestPricing:
    """Tests for enrollment pricing."""

    def test_percentage_discount_with_tax(self):
        pricing = calculate_pricing(200, DiscountType.PERCENTAGE, 10, Decimal("0.18"))
        assert pricing.discount_amount == Decimal("20.00")
        assert pricing.subtotal == Decimal("180.00")
        assert pricing.tax_amount == Decimal("32.40")
        assert pricing.final_price == Decimal("212.40")

    def test_amount_discount(self):
        pricing = calculate_pricing(100, DiscountType.AMOUNT, 25, Decimal("0"))
        assert pricing.subtotal == Decimal("75.00")
        assert pricing.final_price == Decimal("75.00")

    def test_no_discount_ignores_value(self):
        pricing = calculate_pricing(100, DiscountType.NONE, 50, Decimal("0.2"))
        assert pricing.discount_amount == Decimal("0.00")
        assert pricing.final_price == Decimal("120.00")


class TestPaymentSchedule:
    """Tests for payment plan fan-out."""

    NOW = datetime(2024, 3, 1, 9)

    def test_full_payment(self):
        schedule = build_payment_schedule(Decimal("118.00"), PaymentPlan.FULL, 3, "GBP", self.NOW)
        assert len(schedule) == 1
        assert schedule[0]["amount"] == Decimal("118.00")
        assert schedule[0]["description"] == "Full payment for enrollment"
        assert schedule[0]["status"] == PaymentStatus.PENDING

    def test_installments_sum_to_final_price(self):
        schedule = build_payment_schedule(Decimal("100.00"), PaymentPlan.INSTALLMENTS, 3, "GBP", self.NOW)
        assert [row["amount"] for row in schedule] == [Decimal("33.33"), Decimal("33.33"), Decimal("33.34")]
        assert sum(row["amount"] for row in schedule) == Decimal("100.00")
        assert schedule[2]["description"] == "Installment 3 of 3"

    def test_remainder_is_never_negative(self):
        schedule = build_payment_schedule(Decimal("0.06"), PaymentPlan.INSTALLMENTS, 12, "GBP", self.NOW)
        amounts = [row["amount"] for row in schedule]
        assert amounts == [Decimal("0.00")] * 11 + [Decimal("0.06")]
        assert sum(amounts) == Decimal("0.06")

    def test_shares_round_down(self):
        schedule = build_payment_schedule(Decimal("200.00"), PaymentPlan.INSTALLMENTS, 3, "GBP", self.NOW)
        assert [row["amount"] for row in schedule] == [Decimal("66.66"), Decimal("66.66"), Decimal("66.68")]

    def test_installments_due_every_thirty_days(self):
        schedule = build_payment_schedule(Decimal("90.00"), PaymentPlan.INSTALLMENTS, 3, "GBP", self.NOW)
        assert [row["due_date"] for row in schedule] == [
            datetime(2024, 3, 1, 9),
            datetime(2024, 3, 31, 9),
            datetime(2024, 4, 30, 9),
        ]

    def test_only_first_payment_marked_paid(self):
        schedule = build_payment_schedule(
            Decimal("90.00"),
            PaymentPlan.INSTALLMENTS,
            2,
            "GBP",
            self.NOW,
            first_method=PaymentMethod.CASH,
            first_paid=True,
            transaction_id="tx-1",
        )
        assert schedule[0]["status"] == PaymentStatus.PAID
        assert schedule[0]["paid_at"] == self.NOW
        assert schedule[0]["method"] == PaymentMethod.CASH
        assert schedule[1]["status"] == PaymentStatus.PENDING
        assert schedule[1]["method"] == PaymentMethod.CARD
        assert schedule[1]["transaction_id"] is None

    def test_payment_status_for(self):
        assert payment_status_for(Decimal("0"), Decimal("100")) == PaymentStatus.PENDING
        assert payment_status_for(Decimal("40"), Decimal("100")) == PaymentStatus.PARTIAL
        assert payment_status_for(Decimal("100"), Decimal("100")) == PaymentStatus.PAID


class TestRollup:
    """Tests for phase completion derived from items."""

    @staticmethod
    def row(student, tutor):
        return SimpleNamespace(completed_by_student=student, completed_by_tutor=tutor)

    def test_phase_without_items_is_never_complete(self):
        assert rollup([], {}) == (False, False)

    def test_missing_item_row_blocks_completion(self):
        assert rollup([1, 2], {1: self.row(True, True)}) == (False, False)

    def test_each_side_rolls_up_independently(self):
        progress = {1: self.row(True, True), 2: self.row(True, False)}
        assert rollup([1, 2], progress) == (True, False)


class TestParserUtils:
    """Tests for query-string filter parsing."""

    def test_enum_filter_all_disables(self):
        assert ParserUtils.enum_filter(UserStatus, "ALL") is None
        assert ParserUtils.enum_filter(UserStatus, "all") is None
        assert ParserUtils.enum_filter(UserStatus, None) is None

    def test_enum_filter_is_case_insensitive(self):
        assert ParserUtils.enum_filter(UserStatus, "active") == UserStatus.ACTIVE

    def test_enum_filter_unknown_value(self):
        with pytest.raises(BadRequestException):
            ParserUtils.enum_filter(UserStatus, "sleeping")
        assert ParserUtils.enum_filter(UserStatus, "sleeping", strict=False) is None

    def test_active_filter(self):
        assert ParserUtils.active_filter(None) is True
        assert ParserUtils.active_filter("inactive") is False
        assert ParserUtils.active_filter("all") is None
        with pytest.raises(BadRequestException):
            ParserUtils.active_filter("archived")
