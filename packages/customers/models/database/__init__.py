"""Database models for customers."""

from packages.customers.models.database.customer_profile import CustomerProfileEntity

__all__ = ["CustomerProfileEntity"]
