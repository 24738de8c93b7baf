"""
Domain models for recurring subscriptions.
"""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from packages.billing.models.domain.enums import BillingCycle, SubscriptionStatus


class Subscription(BaseModel):
    """
    Recurring billing agreement domain model.

    Represents one customer's standing charge with a tenant:
    - Terms (amount in minor units, cycle, billing day)
    - Status (Active/Paused/Cancelled/Failed)
    - Schedule (next and last charge dates)
    - Failure accounting (consecutive failures since the last success)
    """

    id: int
    tenant_id: int
    customer_id: int

    amount: int
    billing_cycle: str  # kept as stored, unknown cycles fall back to monthly
    billing_day: Optional[int] = None
    description: Optional[str] = None

    status: SubscriptionStatus

    next_charge_date: datetime
    last_charge_date: Optional[datetime] = None

    failed_attempts: int = 0
    last_failure_reason: Optional[str] = None

    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @field_validator("billing_cycle", mode="before")
    @classmethod
    def normalize_billing_cycle(cls, v):
        if isinstance(v, BillingCycle):
            return v.value
        return v

    @property
    def attempt_number(self) -> int:
        """Attempt number the next charge will be logged under."""
        return self.failed_attempts + 1

    def is_due(self, now: datetime, max_failed_attempts: int) -> bool:
        """Check if the subscription satisfies due selection at ``now``."""
        return (
            self.status.is_billable()
            and self.next_charge_date <= now
            and self.failed_attempts < max_failed_attempts
        )


class SubscriptionCreateModel(BaseModel):
    """Model for creating a new subscription (enrollment workflow)."""

    tenant_id: int
    customer_id: int
    amount: int = Field(gt=0)
    billing_cycle: str
    billing_day: Optional[int] = Field(default=None, ge=1, le=31)
    description: Optional[str] = None
    status: str = SubscriptionStatus.ACTIVE.value
    next_charge_date: datetime
    failed_attempts: int = Field(default=0, ge=0)

    @field_validator("billing_cycle", mode="before")
    @classmethod
    def validate_billing_cycle(cls, v):
        return BillingCycle(v).value

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return SubscriptionStatus(v).value


class SubscriptionUpdateModel(BaseModel):
    """Model for updating a subscription. Only explicitly set fields are written."""

    amount: Optional[int] = Field(default=None, gt=0)
    billing_day: Optional[int] = Field(default=None, ge=1, le=31)
    description: Optional[str] = None

    status: Optional[str] = None

    next_charge_date: Optional[datetime] = None
    last_charge_date: Optional[datetime] = None

    failed_attempts: Optional[int] = Field(default=None, ge=0)
    last_failure_reason: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        if v is None:
            return v
        return SubscriptionStatus(v).value
