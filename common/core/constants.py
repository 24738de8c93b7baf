from enum import Enum


class Environment(str, Enum):
    """Environment profiles."""

    LOCAL = "local"
    DEV = "dev"
    STAGING = "staging"
    PRODUCTION = "production"


class LockProviderType(str, Enum):
    """Distributed lock provider types."""

    REDIS = "redis"
    MEMORY = "memory"


# iPOS Transact v3 endpoints
IPOS_TRANSACT_SANDBOX_URL = "https://payment.ipospays.tech/api/v3/iposTransact"
IPOS_TRANSACT_PRODUCTION_URL = "https://payment.ipospays.com/api/v3/iposTransact"
