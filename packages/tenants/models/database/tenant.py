from sqlalchemy import Column, String, Boolean
from sqlalchemy.sql import func

from common.db.base import Base, BigIntegerType, UTCDateTime


class TenantEntity(Base):
    __tablename__ = "tenants"

    id = Column(BigIntegerType, primary_key=True, index=True, autoincrement=True)
    name = Column(String, nullable=False, index=True)

    # iPOS Transact credentials (fall back to global settings when unset)
    gateway_auth_token = Column(String(512), nullable=True)
    gateway_merchant_id = Column(String(32), nullable=True)  # TPN
    gateway_test_mode = Column(Boolean, nullable=True)

    created_at = Column(UTCDateTime, server_default=func.now())
    updated_at = Column(UTCDateTime, server_default=func.now(), onupdate=func.now())
