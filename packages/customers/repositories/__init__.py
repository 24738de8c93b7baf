"""Customer repositories."""

from packages.customers.repositories.customer_repository import (
    CustomerProfileRepository,
)

__all__ = ["CustomerProfileRepository"]
