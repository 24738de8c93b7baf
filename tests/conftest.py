# Shared pytest configuration and fixtures for all test types
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from datetime import datetime, timezone

from common.db.base import Base
from packages.tenants.models.database.tenant import TenantEntity
from packages.customers.models.database.customer_profile import CustomerProfileEntity
from packages.customers.models.domain.customer_profile import TokenStatus
from packages.billing.models.database.subscription import SubscriptionEntity
from packages.billing.models.database.payment_log import PaymentLogEntity  # noqa
from packages.billing.models.domain.enums import BillingCycle, SubscriptionStatus

# Test database URL
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine and initialize schema."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def test_connection(test_engine):
    """Create test connection with outer transaction for rollback isolation."""
    async with test_engine.connect() as connection:
        trans = await connection.begin()
        yield connection
        await trans.rollback()


@pytest_asyncio.fixture(scope="function")
async def test_session_factory(test_connection):
    """Create session factory bound to test connection.

    Using join_transaction_mode="create_savepoint" so nested transaction()
    calls create savepoints instead of real nested transactions.
    """
    return async_sessionmaker(
        bind=test_connection,
        class_=AsyncSession,
        expire_on_commit=False,
        join_transaction_mode="create_savepoint",
    )


@pytest_asyncio.fixture(scope="function")
async def test_db(test_session_factory):
    """Create a test database session."""
    async with test_session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function", autouse=True)
async def patch_lazy_sessions(test_session_factory, monkeypatch):
    """
    Patch session factories to use test database.

    This allows real transaction() and get_session() to run with proper
    commit/rollback/ContextVar semantics while using the test database.
    """
    monkeypatch.setattr("common.db.scoped.AsyncSessionLocal", test_session_factory)
    monkeypatch.setattr(
        "common.db.scoped.AsyncSessionLocalReadonly", test_session_factory
    )


@pytest_asyncio.fixture(scope="function")
async def sample_tenant(test_db: AsyncSession):
    """Tenant with its own iPOS Transact credentials."""
    tenant = TenantEntity(
        name="Corner Cafe",
        gateway_auth_token="tenant-auth-token",
        gateway_merchant_id="123456789012",
        gateway_test_mode=True,
    )
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def second_tenant(test_db: AsyncSession):
    tenant = TenantEntity(
        name="Harbor Books",
        gateway_auth_token="second-auth-token",
        gateway_merchant_id="210987654321",
        gateway_test_mode=True,
    )
    test_db.add(tenant)
    await test_db.commit()
    await test_db.refresh(tenant)
    return tenant


@pytest_asyncio.fixture(scope="function")
async def sample_customer(test_db: AsyncSession, sample_tenant):
    """Customer holding an active card token."""
    customer = CustomerProfileEntity(
        tenant_id=sample_tenant.id,
        first_name="Dana",
        last_name="Okafor",
        email="dana@example.com",
        payment_token="tok_live_4242",
        token_status=TokenStatus.ACTIVE.value,
        card_last4="4242",
    )
    test_db.add(customer)
    await test_db.commit()
    await test_db.refresh(customer)
    return customer


@pytest_asyncio.fixture(scope="function")
async def make_subscription(test_db: AsyncSession, sample_tenant, sample_customer):
    """Factory for subscriptions owned by the sample tenant and customer."""

    async def _make(**overrides) -> SubscriptionEntity:
        values = {
            "tenant_id": sample_tenant.id,
            "customer_id": sample_customer.id,
            "amount": 2500,
            "billing_cycle": BillingCycle.MONTHLY.value,
            "billing_day": 15,
            "status": SubscriptionStatus.ACTIVE.value,
            "next_charge_date": datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc),
            "failed_attempts": 0,
        }
        values.update(overrides)
        subscription = SubscriptionEntity(**values)
        test_db.add(subscription)
        await test_db.commit()
        await test_db.refresh(subscription)
        return subscription

    return _make
