"""
Factory for getting payment gateway instances and resolving credentials.
"""

from typing import Optional

from common.core.config import settings
from packages.billing.models.domain.gateway import GatewayCredentials
from packages.billing.providers.gateway.interface import PaymentGatewayInterface
from packages.billing.providers.gateway.ipos_transact import IPosTransactGateway
from packages.tenants.models.domain.tenant import Tenant


def get_payment_gateway() -> PaymentGatewayInterface:
    """
    Get payment gateway instance based on configuration.

    iPOS Transact is the only gateway that charges stored register tokens.

    Returns:
        PaymentGatewayInterface: Configured payment gateway
    """
    return IPosTransactGateway(timeout_seconds=settings.ipos_gateway_timeout_seconds)


def resolve_gateway_credentials(tenant: Tenant) -> Optional[GatewayCredentials]:
    """
    Merge a tenant's gateway columns over the global iPOS settings.

    Returns None when no auth token is configured at either level.
    """
    auth_token = tenant.gateway_auth_token or settings.ipos_auth_token
    if not auth_token:
        return None

    test_mode = (
        tenant.gateway_test_mode
        if tenant.gateway_test_mode is not None
        else settings.ipos_test_mode
    )
    return GatewayCredentials(
        auth_token=auth_token,
        merchant_id=tenant.gateway_merchant_id or settings.ipos_tpn,
        test_mode=test_mode,
    )
