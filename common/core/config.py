from typing import Optional, List
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.core.constants import Environment, LockProviderType


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # Environment Profile
    environment: Environment = Environment.LOCAL

    app_name: str = "pos-billing-backend"
    debug: bool = False

    # Database Components
    db_user: str = "postgres"
    db_password: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "pos"
    db_use_nullpool: bool = (
        True  # True for short-lived worker passes, False to keep a pool
    )
    db_pool_size: int = 10
    db_pool_overflow: int = 5

    @property
    def database_url(self) -> str:
        """Construct database URL from components."""
        return f"postgresql://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    # Redis
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: Optional[str] = None
    redis_db: int = 0

    # Distributed locking (redis for multi-process deployments, memory for single process)
    lock_provider: LockProviderType = LockProviderType.REDIS

    # OpenTelemetry
    otel_service_name: str = "pos-billing-backend"
    otel_service_version: str = "0.1.0"

    # Axiom (exporters are only attached when a token is set)
    axiom_token: Optional[str] = None
    axiom_dataset: Optional[str] = None

    # iPOS Transact gateway (global fallback, tenants may override)
    ipos_auth_token: str = ""
    ipos_tpn: str = ""
    ipos_test_mode: bool = True
    ipos_gateway_timeout_seconds: float = 30.0

    # Recurring billing
    recurring_max_retry_attempts: int = 3
    recurring_retry_delay_days: List[int] = [1, 3, 7]
    recurring_enable_notifications: bool = True
    recurring_dry_run: bool = False
    recurring_inter_attempt_delay_seconds: float = 1.0
    recurring_max_concurrency: int = 1
    recurring_lock_ttl_seconds: int = 120
    recurring_billing_interval_seconds: int = 3600


settings = Settings()
