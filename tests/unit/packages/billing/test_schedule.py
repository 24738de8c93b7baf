"""
Unit tests for billing calendar arithmetic.
"""

import pytest
from datetime import datetime, timezone, timedelta

from packages.billing.models.domain.enums import BillingCycle
from packages.billing.schedule import (
    compute_next_charge_date,
    compute_retry_date,
    retry_delay_days,
)


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class TestComputeNextChargeDate:
    """Tests for compute_next_charge_date."""

    def test_daily_is_next_day_at_midnight(self):
        result = compute_next_charge_date(
            BillingCycle.DAILY, None, utc(2025, 3, 10, 14, 30, 12)
        )

        assert result == utc(2025, 3, 11)

    def test_weekly_is_seven_days_later_at_midnight(self):
        result = compute_next_charge_date(
            BillingCycle.WEEKLY, None, utc(2025, 3, 10, 23, 59)
        )

        assert result == utc(2025, 3, 17)

    def test_monthly_uses_billing_day_of_next_month(self):
        result = compute_next_charge_date(
            BillingCycle.MONTHLY, 15, utc(2025, 1, 20, 10, 0)
        )

        assert result == utc(2025, 2, 15)

    def test_monthly_clamps_to_february_in_common_year(self):
        result = compute_next_charge_date(BillingCycle.MONTHLY, 31, utc(2025, 1, 31))

        assert result == utc(2025, 2, 28)

    def test_monthly_clamps_to_february_in_leap_year(self):
        result = compute_next_charge_date(BillingCycle.MONTHLY, 31, utc(2024, 1, 31))

        assert result == utc(2024, 2, 29)

    def test_monthly_clamps_to_thirty_day_month(self):
        result = compute_next_charge_date(BillingCycle.MONTHLY, 31, utc(2025, 3, 31))

        assert result == utc(2025, 4, 30)

    def test_monthly_rolls_over_december(self):
        result = compute_next_charge_date(BillingCycle.MONTHLY, 5, utc(2025, 12, 5, 8))

        assert result == utc(2026, 1, 5)

    def test_monthly_without_billing_day_uses_first(self):
        result = compute_next_charge_date(BillingCycle.MONTHLY, None, utc(2025, 6, 18))

        assert result == utc(2025, 7, 1)

    def test_accepts_string_cycle(self):
        result = compute_next_charge_date("weekly", None, utc(2025, 3, 10))

        assert result == utc(2025, 3, 17)

    def test_unknown_cycle_falls_back_to_monthly(self):
        result = compute_next_charge_date("fortnightly", 12, utc(2025, 3, 20))

        assert result == utc(2025, 4, 12)

    def test_result_is_timezone_aware_utc(self):
        result = compute_next_charge_date(BillingCycle.DAILY, None, utc(2025, 3, 10))

        assert result.tzinfo is not None
        assert result.utcoffset() == timedelta(0)

    def test_non_utc_input_is_converted_first(self):
        # 23:30 at UTC-5 on the 10th is 04:30 UTC on the 11th
        eastern = timezone(timedelta(hours=-5))
        result = compute_next_charge_date(
            BillingCycle.DAILY, None, datetime(2025, 3, 10, 23, 30, tzinfo=eastern)
        )

        assert result == utc(2025, 3, 12)

    def test_defaults_to_current_time(self):
        before = datetime.now(timezone.utc)

        result = compute_next_charge_date(BillingCycle.DAILY)

        assert result > before
        assert result - before <= timedelta(days=1)


class TestRetryLadder:
    """Tests for retry delay selection."""

    @pytest.mark.parametrize(
        "failed_attempts,expected",
        [(1, 1), (2, 3), (3, 7), (4, 7), (10, 7)],
    )
    def test_ladder_index_and_last_value_repeats(self, failed_attempts, expected):
        assert retry_delay_days(failed_attempts, [1, 3, 7]) == expected

    def test_zero_failures_uses_first_rung(self):
        assert retry_delay_days(0, [2, 5]) == 2

    def test_single_rung_ladder(self):
        assert retry_delay_days(5, [4]) == 4

    def test_retry_date_preserves_time_of_day(self):
        now = utc(2025, 5, 1, 9, 45, 30)

        assert compute_retry_date(2, [1, 3, 7], now) == utc(2025, 5, 4, 9, 45, 30)

    def test_retry_dates_never_move_backwards(self):
        now = utc(2025, 5, 1)
        ladder = [1, 3, 7]

        dates = [compute_retry_date(n, ladder, now) for n in range(1, 6)]

        assert dates == sorted(dates)
        assert all(d > now for d in dates)
