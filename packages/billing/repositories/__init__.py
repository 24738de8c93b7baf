"""Billing repositories."""

from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.repositories.payment_log_repository import PaymentLogRepository

__all__ = [
    "SubscriptionRepository",
    "PaymentLogRepository",
]
