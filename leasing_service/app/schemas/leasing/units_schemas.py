from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams
from ...enum.leasing_enum import PaymentCycle


class UnitBase(BaseModel):
    name: str
    property_name: Optional[str] = None
    daily_rate: Optional[Decimal] = Field(default=None, gt=0)
    monthly_rate: Optional[Decimal] = Field(default=None, gt=0)
    annual_rate: Optional[Decimal] = Field(default=None, gt=0)
    is_unavailable: bool = False


class UnitCreate(UnitBase):
    pass


class UnitOut(UnitBase):
    id: UUID
    org_id: UUID
    available_cycles: List[PaymentCycle] = []
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UnitRequest(CommonQueryParams):
    property_name: Optional[str] = None


class UnitListResponse(BaseModel):
    units: List[UnitOut]
    total: int


class SuggestEndDateResponse(BaseModel):
    start_date: date
    payment_cycle: PaymentCycle
    end_date: date
