"""
Interface for card-not-present payment gateways.

Abstracts token charging away from a specific processor (iPOS Transact, ...).
"""

from abc import ABC, abstractmethod
from typing import Optional

from packages.billing.models.domain.gateway import ChargeResult, GatewayCredentials


class PaymentGatewayInterface(ABC):
    """Abstract interface for charging stored payment tokens."""

    @abstractmethod
    async def charge(
        self,
        amount: int,
        token: str,
        credentials: GatewayCredentials,
        description: Optional[str] = None,
        attempt_number: int = 1,
    ) -> ChargeResult:
        """
        Charge a stored card token once.

        Args:
            amount: Amount in minor units (cents)
            token: Stored card token from the register capture
            credentials: Merchant credentials to charge under
            description: Human readable charge description
            attempt_number: 1-based attempt counter for this billing period

        Returns:
            ChargeResult: success with transaction/auth identifiers, or a
            decline carrying the gateway's reason

        Raises:
            Transport errors (timeouts, connection failures) propagate; the
            caller treats them as failed attempts.
        """
        pass

    async def close(self) -> None:
        """Release pooled connections."""
        return None
