"""
Repository for the append-only payment audit log.
"""

from typing import List, Optional
from sqlalchemy import select, func

from common.core.exceptions import ProcessingError
from common.repositories.base import BaseRepository
from packages.billing.models.database.payment_log import PaymentLogEntity
from packages.billing.models.domain.payment_log import (
    PaymentLog,
    PaymentLogCreateModel,
)
from common.core.otel_axiom_exporter import trace_span


class PaymentLogRepository(BaseRepository[PaymentLogEntity, PaymentLog]):
    """Payment logs are immutable: entries can be appended and read, nothing else."""

    def __init__(self):
        super().__init__(PaymentLogEntity, PaymentLog)

    @trace_span
    async def append(self, log: PaymentLogCreateModel) -> PaymentLog:
        """Append one audit entry for a charge attempt."""
        return await self.create(log)

    async def update(self, id: int, update_model) -> Optional[PaymentLog]:
        raise ProcessingError("Payment logs are append-only")

    async def delete(self, id: int) -> bool:
        raise ProcessingError("Payment logs are append-only")

    @trace_span
    async def list_by_subscription(self, subscription_id: int) -> List[PaymentLog]:
        """List a subscription's attempts, oldest first."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(PaymentLogEntity)
                .where(PaymentLogEntity.subscription_id == subscription_id)
                .order_by(PaymentLogEntity.attempted_at, PaymentLogEntity.id)
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def list_by_tenant(
        self, tenant_id: int, skip: int = 0, limit: int = 100
    ) -> List[PaymentLog]:
        """List a tenant's attempts, newest first."""
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(PaymentLogEntity)
                .where(PaymentLogEntity.tenant_id == tenant_id)
                .order_by(PaymentLogEntity.attempted_at.desc(), PaymentLogEntity.id.desc())
                .offset(skip)
                .limit(limit)
            )
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def count_by_subscription(self, subscription_id: int) -> int:
        async with self._get_session(readonly=True) as session:
            result = await session.execute(
                select(func.count())
                .select_from(PaymentLogEntity)
                .where(PaymentLogEntity.subscription_id == subscription_id)
            )
            return result.scalar_one()
