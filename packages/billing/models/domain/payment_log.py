"""
Domain models for the recurring payment audit log.
"""

from datetime import datetime
from typing import Any, Dict, Optional
from pydantic import BaseModel, Field, field_validator

from packages.billing.models.domain.enums import PaymentLogStatus


class PaymentLog(BaseModel):
    """Immutable record of one charge attempt."""

    id: int
    subscription_id: int
    tenant_id: int
    customer_id: int

    amount: int
    attempt_number: int
    status: PaymentLogStatus

    transaction_id: Optional[str] = None
    auth_code: Optional[str] = None
    failure_reason: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None

    attempted_at: datetime
    processed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PaymentLogCreateModel(BaseModel):
    """Model for appending a payment log entry."""

    subscription_id: int
    tenant_id: int
    customer_id: int
    amount: int
    attempt_number: int = Field(ge=1)
    status: str

    transaction_id: Optional[str] = None
    auth_code: Optional[str] = None
    failure_reason: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None

    attempted_at: datetime
    processed_at: Optional[datetime] = None

    @field_validator("status", mode="before")
    @classmethod
    def validate_status(cls, v):
        return PaymentLogStatus(v).value
