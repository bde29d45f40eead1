import uuid
from sqlalchemy import Column, DateTime, Enum, String, Text, Uuid
from sqlalchemy.sql import func
from shared.core.database import Base
from ...enum.leasing_enum import ActivityType


class Activity(Base):
    __tablename__ = "activities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    org_id = Column(Uuid, nullable=False, index=True)

    lease_id = Column(Uuid, nullable=True, index=True)
    unit_id = Column(Uuid, nullable=True)
    tenant_id = Column(Uuid, nullable=True)
    user_id = Column(String(64), nullable=True)

    activity_type = Column(
        Enum(ActivityType, name="activity_type_enum"), nullable=False)
    description = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
