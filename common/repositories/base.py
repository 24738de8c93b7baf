from contextlib import asynccontextmanager
from typing import Generic, TypeVar, Optional, List, Type, AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from pydantic import BaseModel

from common.core.otel_axiom_exporter import trace_span
from common.db.scoped import get_session

EntityType = TypeVar("EntityType")
DomainModelType = TypeVar("DomainModelType")
CreateModelType = TypeVar("CreateModelType", bound=BaseModel)
UpdateModelType = TypeVar("UpdateModelType", bound=BaseModel)


class BaseRepository(Generic[EntityType, DomainModelType]):
    """
    Generic async repository mapping SQLAlchemy entities to pydantic models.

    Sessions are acquired per operation through ``get_session()`` and
    released immediately, unless the caller wraps several calls in
    ``transaction()``. Every write commits before the method returns, so
    a subsequent read in any task observes it.

    Example:
        repo = SubscriptionRepository()
        subscription = await repo.get(123)
    """

    def __init__(
        self,
        entity_class: Type[EntityType],
        domain_class: Type[DomainModelType],
    ):
        self.entity_class = entity_class
        self.domain_class = domain_class

    @asynccontextmanager
    async def _get_session(
        self, readonly: bool = False
    ) -> AsyncGenerator[AsyncSession, None]:
        async with get_session(readonly=readonly) as session:
            yield session

    def _add_tenant_filter(self, query, tenant_id: int):
        """Add tenant filtering to any query."""
        return query.where(self.entity_class.tenant_id == tenant_id)

    def _entity_to_domain(self, entity: EntityType) -> DomainModelType:
        """Convert database entity to domain model."""
        return self.domain_class.model_validate(entity)

    def _entities_to_domain(self, entities: List[EntityType]) -> List[DomainModelType]:
        return [self._entity_to_domain(entity) for entity in entities]

    @trace_span
    async def get(
        self, id: int, tenant_id: Optional[int] = None
    ) -> Optional[DomainModelType]:
        query = select(self.entity_class).where(self.entity_class.id == id)

        if tenant_id is not None:
            query = self._add_tenant_filter(query, tenant_id)

        async with self._get_session() as session:
            result = await session.execute(query)
            entity = result.scalar_one_or_none()
            return self._entity_to_domain(entity) if entity else None

    @trace_span
    async def get_multi(
        self, skip: int = 0, limit: int = 100, tenant_id: Optional[int] = None
    ) -> List[DomainModelType]:
        query = (
            select(self.entity_class)
            .order_by(self.entity_class.id)
            .offset(skip)
            .limit(limit)
        )

        if tenant_id is not None:
            query = self._add_tenant_filter(query, tenant_id)

        async with self._get_session(readonly=True) as session:
            result = await session.execute(query)
            return self._entities_to_domain(result.scalars().all())

    @trace_span
    async def create(self, create_model: CreateModelType) -> DomainModelType:
        """Create a new entity from a typed create model."""
        data = create_model.model_dump(exclude_none=True)
        db_obj = self.entity_class(**data)
        async with self._get_session() as session:
            session.add(db_obj)
            await session.flush()
            await session.refresh(db_obj)
            return self._entity_to_domain(db_obj)

    @trace_span
    async def update(
        self, id: int, update_model: UpdateModelType
    ) -> Optional[DomainModelType]:
        """Update an entity with a typed update model.

        Only fields explicitly set on the model are written, so ``None`` can
        be used to clear a nullable column.
        """
        data = update_model.model_dump(exclude_unset=True)
        if not data:
            return await self.get(id)

        async with self._get_session() as session:
            await session.execute(
                update(self.entity_class).where(self.entity_class.id == id).values(data)
            )
            await session.flush()
        return await self.get(id)

    @trace_span
    async def delete(self, id: int) -> bool:
        async with self._get_session() as session:
            result = await session.execute(
                delete(self.entity_class).where(self.entity_class.id == id)
            )
            await session.flush()
            return result.rowcount > 0
