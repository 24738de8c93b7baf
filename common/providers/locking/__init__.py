from .interface import DistributedLockInterface
from .factory import get_lock_provider, reset_lock_provider
from .memory_lock import MemoryLock
from .redis_lock import RedisLock

__all__ = [
    "DistributedLockInterface",
    "get_lock_provider",
    "reset_lock_provider",
    "MemoryLock",
    "RedisLock",
]
