"""
Billing enums - strongly typed enumerations for recurring billing states.
"""

from enum import Enum


class BillingCycle(str, Enum):
    """Charging cadence of a recurring subscription."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"  # Anchored to billing_day, clamped to month length


class SubscriptionStatus(str, Enum):
    """
    Recurring subscription status lifecycle.

    Flow: active -> failed (retry budget exhausted)
          active <-> paused, any -> cancelled (enrollment workflow)
    """

    ACTIVE = "active"  # Eligible for charging when due
    PAUSED = "paused"  # Temporarily excluded by the merchant
    CANCELLED = "cancelled"  # Terminated by the merchant or customer
    FAILED = "failed"  # Retries exhausted, needs manual intervention

    def is_billable(self) -> bool:
        """Check if this status should be picked up by due selection."""
        return self == SubscriptionStatus.ACTIVE


class PaymentLogStatus(str, Enum):
    """Outcome recorded for a single charge attempt."""

    SUCCESS = "success"
    FAILED = "failed"


class ProcessingStatus(str, Enum):
    """Per-subscription outcome of a processing pass."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"  # Claimed by another pass or no longer due
