"""Database models for billing."""

from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.payment_log import PaymentLogEntity

__all__ = [
    "SubscriptionEntity",
    "PaymentLogEntity",
]
