"""
Billing package - recurring subscriptions charged against stored card tokens.

This package integrates with:
- iPOS Transact: token charging for recurring payments

Due subscriptions are charged by RecurringPaymentProcessor, driven on an
interval by RecurringBillingWorker.
"""
