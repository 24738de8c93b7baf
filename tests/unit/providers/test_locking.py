import asyncio
import pytest
from unittest.mock import AsyncMock, patch
import redis.asyncio as redis

from common.core.constants import LockProviderType
from common.providers.locking.memory_lock import MemoryLock
from common.providers.locking.redis_lock import RedisLock
from common.providers.locking.factory import get_lock_provider, reset_lock_provider


class TestRedisLock:
    """Unit tests for Redis distributed lock."""

    @pytest.fixture
    def redis_lock(self):
        with patch("common.providers.locking.redis_lock.settings") as mock_settings:
            mock_settings.redis_host = "localhost"
            mock_settings.redis_port = 6379
            mock_settings.redis_password = None
            mock_settings.redis_db = 0
            return RedisLock()

    @pytest.fixture
    def mock_redis_client(self):
        return AsyncMock(spec=redis.Redis)

    @pytest.fixture
    def connected_lock(self, redis_lock, mock_redis_client):
        redis_lock._client = mock_redis_client
        redis_lock._connected = True
        return redis_lock

    async def test_acquire_lock_success(self, connected_lock, mock_redis_client):
        """Test successful lock acquisition."""
        mock_redis_client.set = AsyncMock(return_value=True)

        token = await connected_lock.acquire_lock("recurring_subscription:42", 120)

        assert token is not None
        assert len(token) == 36  # UUID length
        mock_redis_client.set.assert_called_once_with(
            "lock:recurring_subscription:42", token, nx=True, ex=120
        )

    async def test_acquire_lock_already_locked(self, connected_lock, mock_redis_client):
        """Test lock acquisition when resource is already locked."""
        mock_redis_client.set = AsyncMock(return_value=False)

        token = await connected_lock.acquire_lock("recurring_subscription:42", 120)

        assert token is None

    async def test_acquire_lock_propagates_redis_errors(
        self, connected_lock, mock_redis_client
    ):
        """An unreachable store is not reported as a held lock."""
        mock_redis_client.set = AsyncMock(
            side_effect=redis.ConnectionError("connection refused")
        )

        with pytest.raises(redis.RedisError):
            await connected_lock.acquire_lock("recurring_subscription:42", 120)

    async def test_release_lock_success(self, connected_lock, mock_redis_client):
        """Test successful lock release."""
        mock_redis_client.eval = AsyncMock(return_value=1)

        result = await connected_lock.release_lock("recurring_subscription:42", "tok")

        assert result is True
        args = mock_redis_client.eval.call_args.args
        assert args[1:] == (1, "lock:recurring_subscription:42", "tok")

    async def test_release_lock_token_mismatch(self, connected_lock, mock_redis_client):
        """Test lock release with wrong token."""
        mock_redis_client.eval = AsyncMock(return_value=0)

        result = await connected_lock.release_lock("recurring_subscription:42", "bad")

        assert result is False

    async def test_release_lock_swallows_redis_errors(
        self, connected_lock, mock_redis_client
    ):
        mock_redis_client.eval = AsyncMock(side_effect=redis.RedisError("timeout"))

        result = await connected_lock.release_lock("recurring_subscription:42", "tok")

        assert result is False

    async def test_extend_lock_success(self, connected_lock, mock_redis_client):
        """Test successful lock extension."""
        mock_redis_client.eval = AsyncMock(return_value=1)

        result = await connected_lock.extend_lock(
            "recurring_subscription:42", "tok", 60
        )

        assert result is True

    async def test_is_locked(self, connected_lock, mock_redis_client):
        mock_redis_client.exists = AsyncMock(side_effect=[1, 0])

        assert await connected_lock.is_locked("recurring_subscription:42") is True
        assert await connected_lock.is_locked("recurring_subscription:42") is False
        mock_redis_client.exists.assert_called_with("lock:recurring_subscription:42")

    async def test_auto_connect_on_operation(self, redis_lock):
        """Test that operations trigger connection if not connected."""
        with patch.object(redis_lock, "connect") as mock_connect:
            mock_connect.return_value = True
            redis_lock._client = AsyncMock()
            redis_lock._client.set = AsyncMock(return_value=True)

            await redis_lock.acquire_lock("recurring_subscription:42", 30)

            mock_connect.assert_called_once()

    async def test_disconnect_closes_client(self, connected_lock, mock_redis_client):
        await connected_lock.disconnect()

        mock_redis_client.aclose.assert_awaited_once()
        assert connected_lock._connected is False


class TestMemoryLock:
    """Unit tests for the in-process lock provider."""

    async def test_acquire_and_release(self):
        lock = MemoryLock()

        token = await lock.acquire_lock("recurring_subscription:1", 30)

        assert token is not None
        assert await lock.is_locked("recurring_subscription:1")
        assert await lock.acquire_lock("recurring_subscription:1", 30) is None
        assert await lock.release_lock("recurring_subscription:1", token) is True
        assert not await lock.is_locked("recurring_subscription:1")

    async def test_release_with_wrong_token(self):
        lock = MemoryLock()
        await lock.acquire_lock("recurring_subscription:1", 30)

        assert await lock.release_lock("recurring_subscription:1", "other") is False
        assert await lock.is_locked("recurring_subscription:1")

    async def test_expired_lock_can_be_reacquired(self):
        lock = MemoryLock()
        first = await lock.acquire_lock("recurring_subscription:1", 0.01)

        await asyncio.sleep(0.02)
        second = await lock.acquire_lock("recurring_subscription:1", 30)

        assert second is not None
        assert second != first
        assert await lock.release_lock("recurring_subscription:1", first) is False

    async def test_extend_lock(self):
        lock = MemoryLock()
        token = await lock.acquire_lock("recurring_subscription:1", 0.05)

        assert await lock.extend_lock("recurring_subscription:1", token, 30)
        await asyncio.sleep(0.1)

        assert await lock.is_locked("recurring_subscription:1")
        assert not await lock.extend_lock("recurring_subscription:1", "other", 30)

    async def test_keys_are_independent(self):
        lock = MemoryLock()

        assert await lock.acquire_lock("recurring_subscription:1", 30)
        assert await lock.acquire_lock("recurring_subscription:2", 30)


class TestAcquireLockWithRetry:
    """Tests for acquire_lock_with_retry method."""

    async def test_acquire_after_holder_releases(self):
        lock = MemoryLock()
        holder = await lock.acquire_lock("recurring_subscription:1", 30)
        attempts = 0
        original = lock.acquire_lock

        async def acquire_and_count(resource_key, timeout_seconds=30):
            nonlocal attempts
            attempts += 1
            if attempts == 3:
                await lock.release_lock(resource_key, holder)
            return await original(resource_key, timeout_seconds)

        lock.acquire_lock = acquire_and_count

        token = await lock.acquire_lock_with_retry(
            "recurring_subscription:1",
            lock_ttl_seconds=30,
            acquire_timeout_seconds=5.0,
            retry_interval_ms=10,
        )

        assert token is not None
        assert attempts == 3

    async def test_acquire_with_retry_timeout(self):
        lock = MemoryLock()
        await lock.acquire_lock("recurring_subscription:1", 30)

        token = await lock.acquire_lock_with_retry(
            "recurring_subscription:1",
            lock_ttl_seconds=30,
            acquire_timeout_seconds=0.1,
            retry_interval_ms=20,
        )

        assert token is None


class TestLockFactory:
    """Test the lock provider factory."""

    @pytest.fixture(autouse=True)
    def fresh_provider(self):
        reset_lock_provider()
        yield
        reset_lock_provider()

    def test_redis_provider(self, monkeypatch):
        monkeypatch.setattr(
            "common.providers.locking.factory.settings.lock_provider",
            LockProviderType.REDIS,
        )

        assert isinstance(get_lock_provider(), RedisLock)

    def test_memory_provider(self, monkeypatch):
        monkeypatch.setattr(
            "common.providers.locking.factory.settings.lock_provider",
            LockProviderType.MEMORY,
        )

        assert isinstance(get_lock_provider(), MemoryLock)

    def test_get_lock_provider_singleton(self):
        """Test that factory returns the same instance (singleton)."""
        provider1 = get_lock_provider()
        provider2 = get_lock_provider()
        assert provider1 is provider2
