from typing import Optional

from common.core.config import settings
from common.core.otel_axiom_exporter import get_logger
from common.workers.base_worker import BaseWorker
from packages.billing.models.domain.processing import (
    ProcessingResult,
    RecurringPaymentConfig,
)
from packages.billing.services.recurring_payment_processor import (
    RecurringPaymentProcessor,
    get_recurring_payment_processor,
)

logger = get_logger(__name__)


class RecurringBillingWorker(BaseWorker):
    """Periodically charges due recurring subscriptions."""

    def __init__(
        self,
        interval_seconds: Optional[float] = None,
        tenant_id: Optional[int] = None,
        run_once: bool = False,
        config: Optional[RecurringPaymentConfig] = None,
        processor: Optional[RecurringPaymentProcessor] = None,
    ):
        super().__init__(
            "recurring_billing",
            interval_seconds or settings.recurring_billing_interval_seconds,
            run_once=run_once,
        )
        self.tenant_id = tenant_id
        self.processor = processor or get_recurring_payment_processor(config)
        self.lock_provider = self.processor.lock_provider
        self.last_result: Optional[ProcessingResult] = None

    async def execute(self):
        if self.tenant_id is not None:
            result = await self.processor.process_tenant_subscriptions(self.tenant_id)
        else:
            result = await self.processor.process_all_due_subscriptions()

        self.last_result = result
        logger.info(
            f"Worker {self.worker_id} pass {self.iterations}: "
            f"{result.successful}/{result.total_processed} successful",
            extra={
                "worker_id": self.worker_id,
                "total_processed": result.total_processed,
                "successful": result.successful,
                "failed": result.failed,
                "skipped": result.skipped,
            },
        )

    async def stop(self):
        self.processor.request_stop()
        await super().stop()
