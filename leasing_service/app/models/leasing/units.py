import uuid
from sqlalchemy import Boolean, Column, String, Numeric, DateTime, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from shared.core.database import Base


class Unit(Base):
    __tablename__ = "units"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=False, index=True)
    name = Column(String(128), nullable=False)
    property_name = Column(String(200), nullable=True)

    # one rate per cadence; a missing rate makes that cadence unavailable
    daily_rate = Column(Numeric(14, 2), nullable=True)
    monthly_rate = Column(Numeric(14, 2), nullable=True)
    annual_rate = Column(Numeric(14, 2), nullable=True)

    is_unavailable = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True),
                        server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
    is_deleted = Column(Boolean, default=False, nullable=False)

    leases = relationship("LeaseAgreement", back_populates="unit")
