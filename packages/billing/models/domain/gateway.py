"""
Domain models exchanged with payment gateways.
"""

from typing import Any, Dict, Optional
from pydantic import BaseModel


class GatewayCredentials(BaseModel):
    """Merchant credentials for one charge call."""

    auth_token: str
    merchant_id: str  # iPOS TPN
    test_mode: bool = True


class ChargeResult(BaseModel):
    """
    Normalized outcome of a charge call.

    Gateway-specific response shapes are folded into this model by the
    gateway client; callers only store ``raw_response`` verbatim.
    """

    success: bool
    transaction_id: Optional[str] = None
    auth_code: Optional[str] = None
    error: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None
