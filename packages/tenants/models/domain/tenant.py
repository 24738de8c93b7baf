from datetime import datetime
from typing import Optional
from pydantic import BaseModel


class Tenant(BaseModel):
    id: int
    name: str
    gateway_auth_token: Optional[str] = None
    gateway_merchant_id: Optional[str] = None
    gateway_test_mode: Optional[bool] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class TenantCreateModel(BaseModel):
    """Model for creating a new tenant."""

    name: str
    gateway_auth_token: Optional[str] = None
    gateway_merchant_id: Optional[str] = None
    gateway_test_mode: Optional[bool] = None


class TenantUpdateModel(BaseModel):
    """Model for updating a tenant."""

    name: Optional[str] = None
    gateway_auth_token: Optional[str] = None
    gateway_merchant_id: Optional[str] = None
    gateway_test_mode: Optional[bool] = None
