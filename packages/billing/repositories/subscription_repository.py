"""
Repository for recurring subscriptions.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy import select

from common.repositories.base import BaseRepository
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.domain.subscription import Subscription
from packages.billing.models.domain.enums import SubscriptionStatus
from common.core.otel_axiom_exporter import trace_span


class SubscriptionRepository(BaseRepository[SubscriptionEntity, Subscription]):
    """Repository for managing recurring subscriptions."""

    def __init__(self):
        super().__init__(SubscriptionEntity, Subscription)

    @trace_span
    async def list_due(
        self,
        now: datetime,
        max_failed_attempts: int,
        tenant_id: Optional[int] = None,
    ) -> List[Subscription]:
        """
        Select subscriptions that should be charged at ``now``.

        Due means: status active, next_charge_date <= now and fewer than
        ``max_failed_attempts`` consecutive failures. Ordered by
        next_charge_date then id so passes are deterministic.
        """
        query = select(SubscriptionEntity).where(
            SubscriptionEntity.status == SubscriptionStatus.ACTIVE.value,
            SubscriptionEntity.next_charge_date <= now,
            SubscriptionEntity.failed_attempts < max_failed_attempts,
        )
        if tenant_id is not None:
            query = self._add_tenant_filter(query, tenant_id)
        query = query.order_by(
            SubscriptionEntity.next_charge_date, SubscriptionEntity.id
        )

        async with self._get_session(readonly=True) as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def list_by_tenant(
        self, tenant_id: int, status: Optional[SubscriptionStatus] = None
    ) -> List[Subscription]:
        """List a tenant's subscriptions, optionally filtered by status."""
        query = select(SubscriptionEntity).where(
            SubscriptionEntity.tenant_id == tenant_id
        )
        if status is not None:
            query = query.where(SubscriptionEntity.status == status.value)

        async with self._get_session(readonly=True) as session:
            result = await session.execute(query.order_by(SubscriptionEntity.id))
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def list_by_customer(self, customer_id: int) -> List[Subscription]:
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(SubscriptionEntity)
                .where(SubscriptionEntity.customer_id == customer_id)
                .order_by(SubscriptionEntity.id)
            )
            return self._entities_to_domain(result.scalars().all())
