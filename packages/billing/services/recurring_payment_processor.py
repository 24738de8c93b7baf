"""
Recurring payment processor.

Charges stored card tokens for due subscriptions, applies the retry ladder
on failure, and appends one payment log per attempt.
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from common.core.exceptions import LockNotAcquiredError, ProcessingError
from common.core.otel_axiom_exporter import get_logger, trace_span, log_span_event
from common.providers.locking.factory import get_lock_provider
from common.providers.locking.interface import DistributedLockInterface
from packages.billing.lock_keys import recurring_subscription_lock_key
from packages.billing.models.domain.enums import (
    PaymentLogStatus,
    ProcessingStatus,
    SubscriptionStatus,
)
from packages.billing.models.domain.gateway import ChargeResult, GatewayCredentials
from packages.billing.models.domain.payment_log import PaymentLogCreateModel
from packages.billing.models.domain.processing import (
    ProcessingResult,
    RecurringPaymentConfig,
    SubscriptionProcessingResult,
)
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionUpdateModel,
)
from packages.billing.providers.gateway.factory import (
    get_payment_gateway,
    resolve_gateway_credentials,
)
from packages.billing.providers.gateway.interface import PaymentGatewayInterface
from packages.billing.repositories.payment_log_repository import PaymentLogRepository
from packages.billing.repositories.subscription_repository import SubscriptionRepository
from packages.billing.schedule import (
    compute_next_charge_date,
    compute_retry_date,
    utc_now,
)
from packages.customers.repositories.customer_repository import (
    CustomerProfileRepository,
)
from packages.tenants.repositories.tenant_repository import TenantRepository

logger = get_logger(__name__)

DEFAULT_FAILURE_REASON = "Payment declined"


class ChargePreconditionError(ProcessingError):
    """A subscription cannot be charged with the data currently on file."""

    pass


class RecurringPaymentProcessor:
    """
    Processes due recurring subscriptions.

    Per-subscription problems (declines, missing tokens, gateway timeouts)
    become ``failed`` results and never abort a pass. Systemic failures such
    as an unreachable database stop new attempts, wait for in-flight ones,
    then propagate.
    """

    def __init__(
        self,
        config: RecurringPaymentConfig,
        subscription_repo: Optional[SubscriptionRepository] = None,
        payment_log_repo: Optional[PaymentLogRepository] = None,
        customer_repo: Optional[CustomerProfileRepository] = None,
        tenant_repo: Optional[TenantRepository] = None,
        gateway: Optional[PaymentGatewayInterface] = None,
        lock_provider: Optional[DistributedLockInterface] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.config = config
        self.subscription_repo = subscription_repo or SubscriptionRepository()
        self.payment_log_repo = payment_log_repo or PaymentLogRepository()
        self.customer_repo = customer_repo or CustomerProfileRepository()
        self.tenant_repo = tenant_repo or TenantRepository()
        self.gateway = gateway or get_payment_gateway()
        self.lock_provider = lock_provider or get_lock_provider()
        self._clock = clock
        self._stop_event = asyncio.Event()

    def request_stop(self) -> None:
        """Stop starting new attempts. In-flight charges are left to finish."""
        if not self._stop_event.is_set():
            logger.info("Stop requested for recurring payment processing")
        self._stop_event.set()

    @property
    def stop_requested(self) -> bool:
        return self._stop_event.is_set()

    @trace_span
    async def process_all_due_subscriptions(self) -> ProcessingResult:
        """Charge every due subscription across all tenants."""
        return await self._process_due()

    @trace_span
    async def process_tenant_subscriptions(self, tenant_id: int) -> ProcessingResult:
        """Charge the due subscriptions of one tenant."""
        return await self._process_due(tenant_id=tenant_id)

    async def _process_due(self, tenant_id: Optional[int] = None) -> ProcessingResult:
        now = self._clock()
        due = await self.subscription_repo.list_due(
            now, self.config.max_retry_attempts, tenant_id=tenant_id
        )
        logger.info(
            f"Found {len(due)} due subscriptions",
            extra={
                "tenant_id": tenant_id,
                "due_count": len(due),
                "dry_run": self.config.dry_run,
            },
        )

        results = await self._process_batch(due)
        summary = ProcessingResult.from_results(results)

        logger.info(
            f"Recurring payment pass complete: {summary.successful} successful, "
            f"{summary.failed} failed, {summary.skipped} skipped",
            extra={
                "tenant_id": tenant_id,
                "total_processed": summary.total_processed,
                "successful": summary.successful,
                "failed": summary.failed,
                "skipped": summary.skipped,
                "not_started": len(due) - summary.total_processed,
            },
        )
        return summary

    async def _process_batch(
        self, subscriptions: List[Subscription]
    ) -> List[SubscriptionProcessingResult]:
        semaphore = asyncio.Semaphore(self.config.max_concurrency)
        halted = asyncio.Event()

        async def run(subscription: Subscription):
            async with semaphore:
                if self._stop_event.is_set() or halted.is_set():
                    return None
                try:
                    result = await self.process_subscription(subscription)
                except Exception:
                    halted.set()
                    raise
                # Throttle: each slot waits before taking the next subscription
                if not self.config.dry_run:
                    await self._pause(self.config.inter_attempt_delay_seconds)
                return result

        outcomes = await asyncio.gather(
            *(run(subscription) for subscription in subscriptions),
            return_exceptions=True,
        )

        results: List[SubscriptionProcessingResult] = []
        errors: List[BaseException] = []
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                errors.append(outcome)
            elif outcome is not None:
                results.append(outcome)

        if errors:
            logger.error(
                f"Recurring payment pass aborted after {len(results)} attempts: {errors[0]}",
                extra={"error_count": len(errors), "completed": len(results)},
            )
            raise errors[0]
        return results

    async def _pause(self, seconds: float) -> None:
        if seconds <= 0:
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass

    @asynccontextmanager
    async def _claim(self, subscription_id: int):
        lock_key = recurring_subscription_lock_key(subscription_id)
        lock_token = await self.lock_provider.acquire_lock(
            lock_key, self.config.lock_ttl_seconds
        )
        if not lock_token:
            raise LockNotAcquiredError(lock_key)
        try:
            yield
        finally:
            await self.lock_provider.release_lock(lock_key, lock_token)

    @trace_span
    async def process_subscription(
        self, subscription: Subscription
    ) -> SubscriptionProcessingResult:
        """
        Run one subscription through claim, preconditions, charge and
        state transition.

        The subscription is re-read under its lock so a stale snapshot from
        due selection never causes a second charge.
        """
        try:
            async with self._claim(subscription.id):
                current = await self.subscription_repo.get(subscription.id)
                if current is None or not current.is_due(
                    self._clock(), self.config.max_retry_attempts
                ):
                    logger.info(
                        f"Skipping subscription {subscription.id}: no longer due",
                        extra={"subscription_id": subscription.id},
                    )
                    return self._skipped(subscription, "Subscription is no longer due")
                return await self._attempt(current)
        except LockNotAcquiredError:
            logger.info(
                f"Skipping subscription {subscription.id}: claimed by another run",
                extra={"subscription_id": subscription.id},
            )
            return self._skipped(
                subscription, "Subscription is being processed by another run"
            )

    async def _attempt(self, subscription: Subscription) -> SubscriptionProcessingResult:
        attempted_at = self._clock()

        try:
            token, credentials = await self._prepare_charge(subscription)
        except ChargePreconditionError as e:
            reason = str(e)
            logger.warning(
                f"Subscription {subscription.id} cannot be charged: {reason}",
                extra={"subscription_id": subscription.id, "reason": reason},
            )
            if not self.config.dry_run:
                await self._record_failure(subscription, reason, None, attempted_at)
            return self._failed(subscription, reason)

        if self.config.dry_run:
            logger.info(
                f"[DRY RUN] Would charge {subscription.amount} for subscription {subscription.id}",
                extra={
                    "subscription_id": subscription.id,
                    "amount": subscription.amount,
                    "attempt_number": subscription.attempt_number,
                },
            )
            return SubscriptionProcessingResult(
                subscription_id=subscription.id,
                customer_id=subscription.customer_id,
                status=ProcessingStatus.SUCCESS,
            )

        charge = await self._charge(subscription, token, credentials)

        if charge.success:
            await self._record_success(subscription, charge, attempted_at)
            log_span_event(
                f"Recurring charge approved for subscription {subscription.id}",
                {
                    "subscription_id": subscription.id,
                    "transaction_id": charge.transaction_id or "",
                },
            )
            return SubscriptionProcessingResult(
                subscription_id=subscription.id,
                customer_id=subscription.customer_id,
                status=ProcessingStatus.SUCCESS,
                transaction_id=charge.transaction_id,
                auth_code=charge.auth_code,
            )

        reason = charge.error or DEFAULT_FAILURE_REASON
        await self._record_failure(subscription, reason, charge.raw_response, attempted_at)
        logger.warning(
            f"Payment failed for subscription {subscription.id}: {reason}",
            extra={
                "subscription_id": subscription.id,
                "attempt_number": subscription.attempt_number,
            },
        )
        return self._failed(subscription, reason)

    async def _prepare_charge(
        self, subscription: Subscription
    ) -> Tuple[str, GatewayCredentials]:
        customer = await self.customer_repo.get(subscription.customer_id)
        if customer is None:
            raise ChargePreconditionError("Customer not found")
        if not customer.has_active_token():
            raise ChargePreconditionError("No active payment token")

        tenant = await self.tenant_repo.get(subscription.tenant_id)
        if tenant is None:
            raise ChargePreconditionError("Tenant not found")

        credentials = resolve_gateway_credentials(tenant)
        if credentials is None:
            raise ChargePreconditionError("iPOS auth token not configured")

        return customer.payment_token, credentials

    async def _charge(
        self,
        subscription: Subscription,
        token: str,
        credentials: GatewayCredentials,
    ) -> ChargeResult:
        timeout = self.config.gateway_timeout_seconds
        try:
            return await asyncio.wait_for(
                self.gateway.charge(
                    amount=subscription.amount,
                    token=token,
                    credentials=credentials,
                    description=subscription.description
                    or f"Recurring payment - {subscription.billing_cycle}",
                    attempt_number=subscription.attempt_number,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Gateway timed out after {timeout}s for subscription {subscription.id}",
                extra={"subscription_id": subscription.id},
            )
            return ChargeResult(success=False, error=f"Gateway timeout after {timeout}s")
        except Exception as e:
            logger.error(
                f"Gateway error for subscription {subscription.id}: {e}",
                extra={"subscription_id": subscription.id},
                exc_info=True,
            )
            return ChargeResult(success=False, error=str(e) or e.__class__.__name__)

    async def _record_success(
        self,
        subscription: Subscription,
        charge: ChargeResult,
        attempted_at: datetime,
    ) -> None:
        completed_at = self._clock()
        next_charge_date = compute_next_charge_date(
            subscription.billing_cycle, subscription.billing_day, completed_at
        )

        await self.subscription_repo.update(
            subscription.id,
            SubscriptionUpdateModel(
                status=SubscriptionStatus.ACTIVE,
                last_charge_date=completed_at,
                next_charge_date=next_charge_date,
                failed_attempts=0,
                last_failure_reason=None,
            ),
        )
        await self._append_log(
            PaymentLogCreateModel(
                subscription_id=subscription.id,
                tenant_id=subscription.tenant_id,
                customer_id=subscription.customer_id,
                amount=subscription.amount,
                attempt_number=subscription.attempt_number,
                status=PaymentLogStatus.SUCCESS,
                transaction_id=charge.transaction_id,
                auth_code=charge.auth_code,
                raw_response=charge.raw_response,
                attempted_at=attempted_at,
                processed_at=completed_at,
            )
        )
        logger.info(
            f"Payment successful for subscription {subscription.id}: {charge.transaction_id}",
            extra={
                "subscription_id": subscription.id,
                "transaction_id": charge.transaction_id,
                "next_charge_date": next_charge_date.isoformat(),
            },
        )

    async def _record_failure(
        self,
        subscription: Subscription,
        reason: str,
        raw_response: Optional[dict],
        attempted_at: datetime,
    ) -> None:
        failed_attempts = subscription.failed_attempts + 1
        exhausted = failed_attempts >= self.config.max_retry_attempts

        if exhausted:
            # next_charge_date is left as is; due selection excludes failed rows
            update = SubscriptionUpdateModel(
                status=SubscriptionStatus.FAILED,
                failed_attempts=failed_attempts,
                last_failure_reason=reason,
            )
        else:
            update = SubscriptionUpdateModel(
                status=SubscriptionStatus.ACTIVE,
                next_charge_date=compute_retry_date(
                    failed_attempts, self.config.retry_delay_days, self._clock()
                ),
                failed_attempts=failed_attempts,
                last_failure_reason=reason,
            )

        await self.subscription_repo.update(subscription.id, update)
        await self._append_log(
            PaymentLogCreateModel(
                subscription_id=subscription.id,
                tenant_id=subscription.tenant_id,
                customer_id=subscription.customer_id,
                amount=subscription.amount,
                attempt_number=subscription.attempt_number,
                status=PaymentLogStatus.FAILED,
                failure_reason=reason,
                raw_response=raw_response,
                attempted_at=attempted_at,
            )
        )

        if exhausted:
            logger.warning(
                f"Subscription {subscription.id} marked failed after {failed_attempts} attempts",
                extra={
                    "subscription_id": subscription.id,
                    "tenant_id": subscription.tenant_id,
                    "notify": self.config.enable_notifications,
                },
            )

    async def _append_log(self, log: PaymentLogCreateModel) -> None:
        # Best effort: the subscription state is already committed
        try:
            await self.payment_log_repo.append(log)
        except Exception as e:
            logger.error(
                f"Failed to write payment log for subscription {log.subscription_id}: {e}",
                extra={
                    "subscription_id": log.subscription_id,
                    "attempt_number": log.attempt_number,
                    "log_status": log.status,
                },
                exc_info=True,
            )

    @staticmethod
    def _skipped(
        subscription: Subscription, reason: str
    ) -> SubscriptionProcessingResult:
        return SubscriptionProcessingResult(
            subscription_id=subscription.id,
            customer_id=subscription.customer_id,
            status=ProcessingStatus.SKIPPED,
            error=reason,
        )

    @staticmethod
    def _failed(
        subscription: Subscription, reason: str
    ) -> SubscriptionProcessingResult:
        return SubscriptionProcessingResult(
            subscription_id=subscription.id,
            customer_id=subscription.customer_id,
            status=ProcessingStatus.FAILED,
            error=reason,
        )


def get_recurring_payment_processor(
    config: Optional[RecurringPaymentConfig] = None,
) -> RecurringPaymentProcessor:
    """Build a processor wired to the configured repositories and providers."""
    return RecurringPaymentProcessor(config or RecurringPaymentConfig.from_settings())
