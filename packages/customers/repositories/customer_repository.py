from typing import List

from sqlalchemy import select

from common.repositories.base import BaseRepository
from common.core.otel_axiom_exporter import trace_span
from packages.customers.models.database.customer_profile import CustomerProfileEntity
from packages.customers.models.domain.customer_profile import CustomerProfile


class CustomerProfileRepository(
    BaseRepository[CustomerProfileEntity, CustomerProfile]
):
    def __init__(self):
        super().__init__(CustomerProfileEntity, CustomerProfile)

    @trace_span
    async def list_by_tenant(self, tenant_id: int) -> List[CustomerProfile]:
        """List every customer profile belonging to a tenant."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(CustomerProfileEntity)
                .where(CustomerProfileEntity.tenant_id == tenant_id)
                .order_by(CustomerProfileEntity.id)
            )
            return self._entities_to_domain(result.scalars().all())
