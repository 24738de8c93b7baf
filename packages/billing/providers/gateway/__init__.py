"""Payment gateways - charging stored card tokens."""

from packages.billing.providers.gateway.interface import PaymentGatewayInterface
from packages.billing.providers.gateway.factory import (
    get_payment_gateway,
    resolve_gateway_credentials,
)

__all__ = [
    "PaymentGatewayInterface",
    "get_payment_gateway",
    "resolve_gateway_credentials",
]
