"""Domain models for billing."""

from packages.billing.models.domain.enums import (
    BillingCycle,
    SubscriptionStatus,
    PaymentLogStatus,
    ProcessingStatus,
)
from packages.billing.models.domain.subscription import (
    Subscription,
    SubscriptionCreateModel,
    SubscriptionUpdateModel,
)
from packages.billing.models.domain.payment_log import (
    PaymentLog,
    PaymentLogCreateModel,
)
from packages.billing.models.domain.gateway import ChargeResult, GatewayCredentials
from packages.billing.models.domain.processing import (
    RecurringPaymentConfig,
    SubscriptionProcessingResult,
    ProcessingResult,
)

__all__ = [
    # Enums
    "BillingCycle",
    "SubscriptionStatus",
    "PaymentLogStatus",
    "ProcessingStatus",
    # Subscription
    "Subscription",
    "SubscriptionCreateModel",
    "SubscriptionUpdateModel",
    # Payment log
    "PaymentLog",
    "PaymentLogCreateModel",
    # Gateway
    "ChargeResult",
    "GatewayCredentials",
    # Processing
    "RecurringPaymentConfig",
    "SubscriptionProcessingResult",
    "ProcessingResult",
]
