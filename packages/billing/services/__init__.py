"""Billing services."""

from packages.billing.services.recurring_payment_processor import (
    RecurringPaymentProcessor,
    get_recurring_payment_processor,
)

__all__ = [
    "RecurringPaymentProcessor",
    "get_recurring_payment_processor",
]
