"""
Database entity for the recurring payment audit log.
"""

from sqlalchemy import Column, String, Integer, Text, ForeignKey, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, JSONType, UTCDateTime


class PaymentLogEntity(Base):
    """
    One row per charge attempt. Written once, never updated or deleted.
    """

    __tablename__ = "payment_logs"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    subscription_id = Column(
        BigIntegerType,
        ForeignKey("recurring_subscriptions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    tenant_id = Column(BigIntegerType, nullable=False, index=True)
    customer_id = Column(BigIntegerType, nullable=False, index=True)

    amount = Column(BigIntegerType, nullable=False)
    attempt_number = Column(Integer, nullable=False)
    status = Column(String(20), nullable=False, index=True)  # success, failed

    # Gateway outcome
    transaction_id = Column(String(255), nullable=True)
    auth_code = Column(String(64), nullable=True)
    failure_reason = Column(Text, nullable=True)
    raw_response = Column(JSONType, nullable=True)

    attempted_at = Column(UTCDateTime, nullable=False, server_default=func.now())
    processed_at = Column(UTCDateTime, nullable=True)  # success only

    __table_args__ = (
        Index("idx_payment_log_subscription_attempted", "subscription_id", "attempted_at"),
    )
