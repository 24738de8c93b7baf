"""Billing calendar arithmetic for recurring subscriptions."""

import calendar
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence, Union

from common.core.otel_axiom_exporter import get_logger
from packages.billing.models.domain.enums import BillingCycle

logger = get_logger(__name__)

DEFAULT_BILLING_DAY = 1


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _start_of_day(value: datetime) -> datetime:
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def compute_next_charge_date(
    billing_cycle: Union[BillingCycle, str],
    billing_day: Optional[int] = None,
    now: Optional[datetime] = None,
) -> datetime:
    """
    Compute the next charge date after a successful charge at ``now``.

    daily    -> now + 1 day
    weekly   -> now + 7 days
    monthly  -> billing_day of the following calendar month, clamped to the
                month length (31 in February becomes 28 or 29)

    The result is normalized to 00:00:00 UTC. Unrecognized cycles are
    treated as monthly.
    """
    now = (now or utc_now()).astimezone(timezone.utc)

    try:
        cycle = BillingCycle(billing_cycle)
    except ValueError:
        logger.warning(
            f"Unknown billing cycle {billing_cycle!r}, falling back to monthly",
            extra={"billing_cycle": str(billing_cycle)},
        )
        cycle = BillingCycle.MONTHLY

    if cycle == BillingCycle.DAILY:
        return _start_of_day(now + timedelta(days=1))

    if cycle == BillingCycle.WEEKLY:
        return _start_of_day(now + timedelta(days=7))

    year, month = (now.year + 1, 1) if now.month == 12 else (now.year, now.month + 1)
    days_in_month = calendar.monthrange(year, month)[1]
    day = min(billing_day or DEFAULT_BILLING_DAY, days_in_month)
    return datetime(year, month, day, tzinfo=timezone.utc)


def retry_delay_days(failed_attempts: int, ladder: Sequence[int]) -> int:
    """
    Delay before the next retry once ``failed_attempts`` failures are counted.

    The ladder is indexed by failed_attempts - 1; its last value repeats.
    """
    index = min(max(failed_attempts, 1) - 1, len(ladder) - 1)
    return ladder[index]


def compute_retry_date(
    failed_attempts: int, ladder: Sequence[int], now: Optional[datetime] = None
) -> datetime:
    """Retry timestamp: ``now`` plus the ladder delay, time of day preserved."""
    return (now or utc_now()) + timedelta(days=retry_delay_days(failed_attempts, ladder))
