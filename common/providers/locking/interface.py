import asyncio
import time
from abc import ABC, abstractmethod
from typing import Optional


class DistributedLockInterface(ABC):
    """Interface for distributed lock providers."""

    async def connect(self) -> bool:
        """Open backing connections. Providers without one are always ready."""
        return True

    async def disconnect(self) -> None:
        """Release backing connections."""
        return None

    @abstractmethod
    async def acquire_lock(
        self, resource_key: str, timeout_seconds: int = 30
    ) -> Optional[str]:
        """
        Acquire a lock for a resource without waiting.

        Args:
            resource_key: The resource to lock (e.g., "recurring_subscription:123")
            timeout_seconds: Lock expiration time in seconds

        Returns:
            Lock token if acquired, None if another holder owns it
        """
        pass

    @abstractmethod
    async def release_lock(self, resource_key: str, lock_token: str) -> bool:
        """
        Release a lock.

        Returns:
            True if released, False if token doesn't match or lock expired
        """
        pass

    @abstractmethod
    async def extend_lock(
        self, resource_key: str, lock_token: str, additional_seconds: int
    ) -> bool:
        """
        Reset the expiration of a held lock.

        Returns:
            True if extended, False if token doesn't match or lock expired
        """
        pass

    @abstractmethod
    async def is_locked(self, resource_key: str) -> bool:
        pass

    async def acquire_lock_with_retry(
        self,
        resource_key: str,
        lock_ttl_seconds: int = 30,
        acquire_timeout_seconds: float = 5.0,
        retry_interval_ms: int = 50,
    ) -> Optional[str]:
        """
        Acquire a lock, retrying until ``acquire_timeout_seconds`` elapses.

        Returns:
            Lock token if acquired, None if timeout exceeded
        """
        end_time = time.monotonic() + acquire_timeout_seconds
        while time.monotonic() < end_time:
            token = await self.acquire_lock(resource_key, lock_ttl_seconds)
            if token:
                return token
            await asyncio.sleep(retry_interval_ms / 1000)
        return None
