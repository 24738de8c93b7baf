from sqlalchemy import Column, String, ForeignKey, Index
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class CustomerProfileEntity(Base):
    __tablename__ = "customer_profiles"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    tenant_id = Column(
        BigIntegerType,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)

    # iPOS card token captured at the register
    payment_token = Column(String(512), nullable=True)
    token_status = Column(
        String(20), nullable=False, server_default="inactive"
    )  # active, inactive, expired
    card_last4 = Column(String(4), nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (Index("idx_customer_profile_tenant_email", "tenant_id", "email"),)
