import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from common.providers.locking.memory_lock import MemoryLock
from packages.billing.models.domain.gateway import ChargeResult


@pytest.fixture
def mock_lock_provider():
    """Create a mock lock provider instance for testing."""
    lock = AsyncMock()
    lock.acquire_lock = AsyncMock(return_value="test-lock-token")
    lock.acquire_lock_with_retry = AsyncMock(return_value="test-lock-token")
    lock.release_lock = AsyncMock(return_value=True)
    lock.extend_lock = AsyncMock(return_value=True)
    lock.is_locked = AsyncMock(return_value=False)
    lock.connect = AsyncMock(return_value=True)
    lock.disconnect = AsyncMock(return_value=None)
    return lock


@pytest.fixture
def memory_lock_provider():
    """Real in-process lock provider."""
    return MemoryLock()


@pytest.fixture(autouse=True)
def mock_get_lock_provider(memory_lock_provider):
    """Automatically route get_lock_provider to an in-process lock for all unit tests."""
    with patch(
        "common.providers.locking.factory.get_lock_provider",
        return_value=memory_lock_provider,
    ), patch(
        "packages.billing.services.recurring_payment_processor.get_lock_provider",
        return_value=memory_lock_provider,
    ):
        yield


@pytest.fixture
def mock_gateway():
    """Create a mock payment gateway that approves every charge."""
    gateway = AsyncMock()
    gateway.charge = AsyncMock(
        return_value=ChargeResult(
            success=True,
            transaction_id="TX1",
            auth_code="AUTH01",
            raw_response={"transactResponse": {"responseCode": "00", "RRN": "TX1"}},
        )
    )
    gateway.close = AsyncMock(return_value=None)
    return gateway


@pytest.fixture(autouse=True)
def mock_get_payment_gateway(mock_gateway):
    """Never reach the real gateway from unit tests."""
    with patch(
        "packages.billing.services.recurring_payment_processor.get_payment_gateway",
        return_value=mock_gateway,
    ):
        yield


@pytest.fixture
def mock_span():
    """Create a mock span instance for testing telemetry."""
    span = MagicMock()
    span.__enter__ = MagicMock(return_value=span)
    span.__exit__ = MagicMock(return_value=None)
    return span
