"""
Configuration and result models for recurring payment processing.
"""

from typing import List, Optional
from pydantic import BaseModel, Field, field_validator

from common.core.config import settings
from packages.billing.models.domain.enums import ProcessingStatus
from packages.billing.lock_keys import RECURRING_SUBSCRIPTION_LOCK_TTL


class RecurringPaymentConfig(BaseModel):
    """
    Processor configuration, passed explicitly to each processor instance.

    retry_delay_days is indexed by (failed_attempts - 1); the last entry
    repeats for any further attempt.
    """

    max_retry_attempts: int = Field(default=3, ge=1)
    retry_delay_days: List[int] = Field(default_factory=lambda: [1, 3, 7], min_length=1)
    enable_notifications: bool = True
    dry_run: bool = False
    inter_attempt_delay_seconds: float = Field(default=1.0, ge=0)
    gateway_timeout_seconds: float = Field(default=30.0, gt=0)
    max_concurrency: int = Field(default=1, ge=1)
    lock_ttl_seconds: int = Field(default=RECURRING_SUBSCRIPTION_LOCK_TTL, ge=1)

    @field_validator("retry_delay_days")
    @classmethod
    def validate_retry_delay_days(cls, v: List[int]) -> List[int]:
        if any(days < 1 for days in v):
            raise ValueError("retry delays must be at least one day")
        return v

    @classmethod
    def from_settings(cls, **overrides) -> "RecurringPaymentConfig":
        """Build a config from application settings, applying overrides."""
        values = {
            "max_retry_attempts": settings.recurring_max_retry_attempts,
            "retry_delay_days": list(settings.recurring_retry_delay_days),
            "enable_notifications": settings.recurring_enable_notifications,
            "dry_run": settings.recurring_dry_run,
            "inter_attempt_delay_seconds": settings.recurring_inter_attempt_delay_seconds,
            "gateway_timeout_seconds": settings.ipos_gateway_timeout_seconds,
            "max_concurrency": settings.recurring_max_concurrency,
            "lock_ttl_seconds": settings.recurring_lock_ttl_seconds,
        }
        values.update(overrides)
        return cls(**values)


class SubscriptionProcessingResult(BaseModel):
    """Outcome of processing one subscription in a pass."""

    subscription_id: int
    customer_id: int
    status: ProcessingStatus
    error: Optional[str] = None
    transaction_id: Optional[str] = None
    auth_code: Optional[str] = None


class ProcessingResult(BaseModel):
    """Aggregated outcome of a processing pass."""

    total_processed: int = 0
    successful: int = 0
    failed: int = 0
    skipped: int = 0
    results: List[SubscriptionProcessingResult] = Field(default_factory=list)

    @classmethod
    def from_results(
        cls, results: List[SubscriptionProcessingResult]
    ) -> "ProcessingResult":
        return cls(
            total_processed=len(results),
            successful=sum(1 for r in results if r.status == ProcessingStatus.SUCCESS),
            failed=sum(1 for r in results if r.status == ProcessingStatus.FAILED),
            skipped=sum(1 for r in results if r.status == ProcessingStatus.SKIPPED),
            results=results,
        )
