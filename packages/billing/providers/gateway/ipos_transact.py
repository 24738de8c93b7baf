"""
iPOS Transact implementation of the payment gateway.

Charges card tokens captured at the register (SPIn/HPP) through the
iPOS Transact v3 API.
"""

import secrets
import time
from typing import Any, Dict, Optional

import httpx

from common.core.constants import (
    IPOS_TRANSACT_PRODUCTION_URL,
    IPOS_TRANSACT_SANDBOX_URL,
)
from common.core.exceptions import GatewayError
from common.core.otel_axiom_exporter import trace_span, get_logger
from packages.billing.models.domain.gateway import ChargeResult, GatewayCredentials
from packages.billing.providers.gateway.interface import PaymentGatewayInterface

logger = get_logger(__name__)

SALE_TRANSACTION_TYPE = 1
APPROVED_RESPONSE_CODE = "00"
MAX_REFERENCE_ID_LENGTH = 20


def generate_transaction_reference_id() -> str:
    """Unique reference: last 8 digits of the ms clock plus random hex."""
    timestamp = str(int(time.time() * 1000))[-8:]
    return f"{timestamp}{secrets.token_hex(4)}"[:MAX_REFERENCE_ID_LENGTH]


class IPosTransactGateway(PaymentGatewayInterface):
    """iPOS Transact token charging over HTTPS."""

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout_seconds: float = 30.0,
    ):
        # An injected client is reused across calls; otherwise one per call
        self._client = client
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def endpoint_for(test_mode: bool) -> str:
        return IPOS_TRANSACT_SANDBOX_URL if test_mode else IPOS_TRANSACT_PRODUCTION_URL

    def build_sale_payload(
        self,
        amount: int,
        token: str,
        credentials: GatewayCredentials,
        reference_id: str,
    ) -> Dict[str, Any]:
        try:
            merchant_id = int(credentials.merchant_id)
        except (TypeError, ValueError):
            raise GatewayError(
                f"Invalid iPOS TPN {credentials.merchant_id!r}"
            ) from None

        return {
            "merchantAuthentication": {
                "merchantId": merchant_id,
                "transactionReferenceId": reference_id,
            },
            "transactRequest": {
                "amount": str(amount),  # minor units as a string
                "transactionType": SALE_TRANSACTION_TYPE,
                "cardToken": token,
                "applySteamSettingTipFeeTax": "false",  # charge the exact amount
            },
            "preferences": {
                "eReceipt": False,
                "addressVerificationService": False,
            },
        }

    @trace_span
    async def charge(
        self,
        amount: int,
        token: str,
        credentials: GatewayCredentials,
        description: Optional[str] = None,
        attempt_number: int = 1,
    ) -> ChargeResult:
        reference_id = generate_transaction_reference_id()
        payload = self.build_sale_payload(amount, token, credentials, reference_id)
        url = self.endpoint_for(credentials.test_mode)

        logger.info(
            f"Submitting iPOS sale {reference_id} attempt {attempt_number}",
            extra={
                "reference_id": reference_id,
                "amount": amount,
                "attempt_number": attempt_number,
                "charge_description": description,
                "test_mode": credentials.test_mode,
            },
        )

        response = await self._post(url, payload, credentials.auth_token)
        return self.normalize_response(response, reference_id)

    async def _post(
        self, url: str, payload: Dict[str, Any], auth_token: str
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json", "token": auth_token}
        if self._client is not None:
            return await self._client.post(
                url, json=payload, headers=headers, timeout=self.timeout_seconds
            )
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            return await client.post(url, json=payload, headers=headers)

    def normalize_response(
        self, response: httpx.Response, reference_id: str
    ) -> ChargeResult:
        """Fold an iPOS Transact HTTP response into a ChargeResult."""
        try:
            data = response.json()
        except ValueError:
            raise GatewayError(
                f"iPOS Transact returned a non-JSON response ({response.status_code})",
                status_code=response.status_code,
            ) from None

        if not isinstance(data, dict):
            data = {"body": data}

        if response.is_error:
            logger.warning(
                f"iPOS Transact API error {response.status_code} for {reference_id}",
                extra={"reference_id": reference_id, "status_code": response.status_code},
            )
            return ChargeResult(
                success=False,
                error=f"iPOS Transact API error: {response.status_code}{self._error_detail(data)}",
                raw_response=data,
            )

        transact = data.get("transactResponse") or {}
        code = str(transact.get("responseCode", ""))

        if code == APPROVED_RESPONSE_CODE:
            rrn = transact.get("RRN")
            return ChargeResult(
                success=True,
                transaction_id=str(rrn) if rrn is not None else reference_id,
                auth_code=transact.get("authorizationCode"),
                raw_response=data,
            )

        reason = transact.get("responseDescription") or (
            f"Declined with response code {code}" if code else "Missing transaction response"
        )
        return ChargeResult(
            success=False,
            error=f"{reason}{self._error_detail(data)}" if not transact else reason,
            raw_response=data,
        )

    @staticmethod
    def _error_detail(data: Dict[str, Any]) -> str:
        errors = data.get("errors")
        if not errors:
            return ""
        messages = [
            str(error.get("message", error)) if isinstance(error, dict) else str(error)
            for error in errors
        ]
        return " - " + "; ".join(messages)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
