from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel

from shared.core.schemas import CommonQueryParams
from ...enum.leasing_enum import TenantStatus


class TenantBase(BaseModel):
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class TenantCreate(TenantBase):
    pass


class TenantOut(TenantBase):
    id: UUID
    org_id: UUID
    status: TenantStatus
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class TenantRequest(CommonQueryParams):
    status: Optional[str] = None


class TenantListResponse(BaseModel):
    tenants: List[TenantOut]
    total: int
