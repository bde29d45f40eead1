import uuid
from sqlalchemy import Boolean, Column, String, DateTime, Enum, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base
from ...enum.leasing_enum import TenantStatus


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    email = Column(String(200), nullable=True)
    phone = Column(String(32), nullable=True)
    status = Column(
        Enum(TenantStatus, name="tenant_status_enum"),
        default=TenantStatus.new,
        nullable=False
    )
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_deleted = Column(Boolean, default=False, nullable=False)

    leases = relationship("LeaseAgreement", back_populates="tenant")
