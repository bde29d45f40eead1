from datetime import datetime, date
from uuid import UUID
from typing import Optional, List, Any, Dict
from decimal import Decimal
from pydantic import BaseModel, Field

from shared.core.schemas import CommonQueryParams
from ...enum.leasing_enum import DepositStatus, LeaseStatus, PaymentCycle, PaymentMethod


class LeaseBase(BaseModel):
    tenant_id: UUID
    unit_id: UUID
    start_date: date
    end_date: Optional[date] = None            # derived from the cycle when omitted
    payment_cycle: PaymentCycle
    rent_amount: Decimal = Field(gt=0)
    is_auto_renew: bool = False
    grace_period_days: Optional[int] = Field(default=None, ge=0)
    auto_renewal_notice_days: Optional[int] = Field(default=None, ge=1)
    deposit_amount: Optional[Decimal] = Field(default=None, gt=0)


class LeaseCreate(LeaseBase):
    # org_id comes from the token in the router
    strict_period: Optional[bool] = None


class LeaseUpdate(BaseModel):
    id: UUID
    tenant_id: Optional[UUID] = None
    unit_id: Optional[UUID] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    payment_cycle: Optional[PaymentCycle] = None
    rent_amount: Optional[Decimal] = Field(default=None, gt=0)
    is_auto_renew: Optional[bool] = None
    grace_period_days: Optional[int] = Field(default=None, ge=0)
    auto_renewal_notice_days: Optional[int] = Field(default=None, ge=1)
    deposit_amount: Optional[Decimal] = Field(default=None, gt=0)
    deposit_status: Optional[DepositStatus] = None
    paid_at: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None


class PaymentRecord(BaseModel):
    paid_at: Optional[datetime] = None        # defaults to now
    payment_method: PaymentMethod


class AutoRenewalToggle(BaseModel):
    is_auto_renew: bool
    grace_period_days: Optional[int] = Field(default=None, ge=0)
    auto_renewal_notice_days: Optional[int] = Field(default=None, ge=1)


class DepositDisposition(BaseModel):
    deposit_status: DepositStatus


class LeaseLinkOut(BaseModel):
    id: UUID
    start_date: date
    end_date: date
    status: LeaseStatus

    model_config = {"from_attributes": True}


class LeaseOut(BaseModel):
    id: UUID
    org_id: UUID
    tenant_id: UUID
    unit_id: UUID
    start_date: date
    end_date: date
    payment_cycle: PaymentCycle
    rent_amount: Decimal
    status: LeaseStatus
    paid_at: Optional[datetime] = None
    payment_method: Optional[PaymentMethod] = None
    is_auto_renew: bool
    grace_period_days: Optional[int] = None
    auto_renewal_notice_days: Optional[int] = None
    deposit_amount: Optional[Decimal] = None
    deposit_status: Optional[DepositStatus] = None
    renewed_from_id: Optional[UUID] = None
    renewed_to_id: Optional[UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # display helpers, computed on read
    tenant_name: Optional[str] = None
    unit_name: Optional[str] = None
    property_name: Optional[str] = None
    effective_status: Optional[LeaseStatus] = None
    last_payment_date: Optional[date] = None
    last_cancellation_date: Optional[date] = None
    can_cancel_auto_renewal: bool = False
    is_payment_overdue: bool = False
    renewed_from: Optional[LeaseLinkOut] = None
    renewed_to: Optional[LeaseLinkOut] = None

    model_config = {"from_attributes": True}


class LeaseRequest(CommonQueryParams):
    status: Optional[str] = None       # "all" | "draft" | "active" | ...
    unit_id: Optional[UUID] = None
    tenant_id: Optional[UUID] = None


class LeaseListResponse(BaseModel):
    leases: List[LeaseOut]
    total: int


class LeaseOverview(BaseModel):
    activeLeases: int
    draftLeases: int
    monthlyRentValue: float
    expiringSoon: int
    heldDeposits: float


class FutureLeaseResponse(BaseModel):
    has_future_lease: bool


class LeaseChainResponse(BaseModel):
    chain: List[LeaseLinkOut]


class BulkImportRequest(BaseModel):
    rows: List[Dict[str, Any]]


class BulkImportRowResult(BaseModel):
    row: int
    success: bool
    lease_id: Optional[UUID] = None
    error: Optional[str] = None


class BulkImportResponse(BaseModel):
    total: int
    created: int
    failed: int
    results: List[BulkImportRowResult]


class RenewalDetail(BaseModel):
    lease_id: UUID
    renewal_id: Optional[UUID] = None
    success: bool
    error: Optional[str] = None


class RenewalProcessResponse(BaseModel):
    processed: int
    succeeded: int
    failed: int
    ended: int
    details: List[RenewalDetail]


class DeadlineItem(BaseModel):
    lease_id: UUID
    tenant_id: UUID
    unit_id: UUID
    kind: str                      # lease_end | cancellation_deadline | payment_deadline
    due_date: date


class DeadlineListResponse(BaseModel):
    deadlines: List[DeadlineItem]
    total: int
