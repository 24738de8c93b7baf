"""
Domain models for customer profiles.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, field_validator


class TokenStatus(str, Enum):
    """Lifecycle of a stored card token."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    EXPIRED = "expired"


class CustomerProfile(BaseModel):
    id: int
    tenant_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_token: Optional[str] = None
    token_status: str = TokenStatus.INACTIVE.value  # read as stored
    card_last4: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)

    @field_validator("token_status", mode="before")
    @classmethod
    def normalize_token_status(cls, v):
        if isinstance(v, TokenStatus):
            return v.value
        return v

    def has_active_token(self) -> bool:
        """A token can be charged only while it is present and active."""
        return (
            bool(self.payment_token)
            and self.token_status == TokenStatus.ACTIVE.value
        )


class CustomerProfileCreateModel(BaseModel):
    """Model for creating a customer profile."""

    tenant_id: int
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_token: Optional[str] = None
    token_status: str = TokenStatus.INACTIVE.value
    card_last4: Optional[str] = None

    @field_validator("token_status", mode="before")
    @classmethod
    def validate_token_status(cls, v):
        return TokenStatus(v).value


class CustomerProfileUpdateModel(BaseModel):
    """Model for updating a customer profile."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    payment_token: Optional[str] = None
    token_status: Optional[str] = None
    card_last4: Optional[str] = None

    @field_validator("token_status", mode="before")
    @classmethod
    def validate_token_status(cls, v):
        if v is None:
            return v
        return TokenStatus(v).value
