"""
Database entity for recurring subscriptions.
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class SubscriptionEntity(Base):
    """
    Recurring billing agreement between a tenant and one of its customers.

    Created by the enrollment workflow, mutated only by the recurring
    payment processor, never deleted by it.
    """

    __tablename__ = "recurring_subscriptions"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(
        BigIntegerType,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    customer_id = Column(
        BigIntegerType,
        ForeignKey("customer_profiles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    # Charge terms
    amount = Column(BigIntegerType, nullable=False)  # minor units (cents)
    billing_cycle = Column(String(20), nullable=False)  # daily, weekly, monthly
    billing_day = Column(Integer, nullable=True)  # 1..31, monthly only
    description = Column(Text, nullable=True)

    status = Column(
        String(20), nullable=False, index=True, server_default="active"
    )  # active, paused, cancelled, failed

    # Schedule
    next_charge_date = Column(UTCDateTime, nullable=False)
    last_charge_date = Column(UTCDateTime, nullable=True)

    # Failure accounting (consecutive failures since last success)
    failed_attempts = Column(Integer, nullable=False, default=0, server_default="0")
    last_failure_reason = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("idx_recurring_subscription_due", "status", "next_charge_date"),
        Index("idx_recurring_subscription_tenant_status", "tenant_id", "status"),
        CheckConstraint("amount > 0", name="ck_recurring_subscription_amount_positive"),
        CheckConstraint(
            "failed_attempts >= 0", name="ck_recurring_subscription_failed_attempts"
        ),
        CheckConstraint(
            "billing_day IS NULL OR (billing_day >= 1 AND billing_day <= 31)",
            name="ck_recurring_subscription_billing_day",
        ),
    )
