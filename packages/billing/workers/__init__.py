"""Billing workers."""

from packages.billing.workers.recurring_billing_worker import RecurringBillingWorker

__all__ = ["RecurringBillingWorker"]
