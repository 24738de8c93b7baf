"""Tenant repositories."""

from packages.tenants.repositories.tenant_repository import TenantRepository

__all__ = ["TenantRepository"]
