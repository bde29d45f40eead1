import uuid
from sqlalchemy import Boolean, Column, Date, Enum, ForeignKey, Integer, Numeric, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base
from ...enum.leasing_enum import DepositStatus, LeaseStatus, PaymentCycle, PaymentMethod


class LeaseAgreement(Base):
    __tablename__ = "lease_agreements"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=False, index=True)
    tenant_id = Column(Uuid, ForeignKey("tenants.id"), nullable=False)
    unit_id = Column(Uuid, ForeignKey("units.id"),
                     nullable=False, index=True)

    # inclusive occupancy interval
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    payment_cycle = Column(
        Enum(PaymentCycle, name="payment_cycle_enum"), nullable=False)
    rent_amount = Column(Numeric(14, 2), nullable=False)
    status = Column(
        Enum(LeaseStatus, name="lease_status_enum"),
        default=LeaseStatus.draft,
        nullable=False
    )

    paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_method = Column(
        Enum(PaymentMethod, name="payment_method_enum"), nullable=True)

    grace_period_days = Column(Integer, nullable=True)
    is_auto_renew = Column(Boolean, default=False, nullable=False)
    auto_renewal_notice_days = Column(Integer, nullable=True)

    deposit_amount = Column(Numeric(14, 2), nullable=True)
    deposit_status = Column(
        Enum(DepositStatus, name="deposit_status_enum"), nullable=True)

    renewed_from_id = Column(Uuid, ForeignKey(
        "lease_agreements.id"), nullable=True, unique=True)
    renewed_to_id = Column(Uuid, ForeignKey(
        "lease_agreements.id"), nullable=True, unique=True)

    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # relationships
    tenant = relationship("Tenant", back_populates="leases")
    unit = relationship("Unit", back_populates="leases")
