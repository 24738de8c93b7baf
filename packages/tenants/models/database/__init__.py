"""Database models for tenants."""

from packages.tenants.models.database.tenant import TenantEntity

__all__ = ["TenantEntity"]
