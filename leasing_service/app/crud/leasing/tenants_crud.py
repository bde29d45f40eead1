from typing import Optional
from uuid import UUID
from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.helpers.json_response_helper import error_response
from shared.utils.app_status_code import AppStatusCode

from ...enum.leasing_enum import ActivityType, LeaseStatus, TenantStatus
from ...models.leasing.lease_agreements import LeaseAgreement
from ...models.leasing.tenants import Tenant
from ...schemas.leasing.tenants_schemas import TenantCreate, TenantListResponse, TenantOut, TenantRequest
from ..common.activity_crud import log_activity


def get_by_id(db: Session, org_id: UUID, tenant_id: UUID) -> Optional[Tenant]:
    return (
        db.query(Tenant)
        .filter(Tenant.id == tenant_id, Tenant.org_id == org_id, Tenant.is_deleted == False)
        .first()
    )


def get_list(db: Session, org_id: UUID, params: TenantRequest) -> TenantListResponse:
    q = db.query(Tenant).filter(Tenant.org_id == org_id, Tenant.is_deleted == False)

    if params.status and params.status.lower() != "all":
        try:
            status = TenantStatus(params.status.lower())
        except ValueError:
            error_response(message=f"Unknown tenant status '{params.status}'",
                           status_code=AppStatusCode.INVALID_INPUT)
        q = q.filter(Tenant.status == status)

    if params.search:
        like = f"%{params.search}%"
        q = q.filter(or_(Tenant.full_name.ilike(like), Tenant.email.ilike(like)))

    total = q.count()
    rows = q.order_by(Tenant.full_name.asc()).offset(params.skip).limit(params.limit).all()
    return {"tenants": [TenantOut.model_validate(r) for r in rows], "total": total}


def create(db: Session, org_id: UUID, payload: TenantCreate) -> Tenant:
    obj = Tenant(org_id=org_id, status=TenantStatus.new, **payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


# ----------------------------------------------------
# Tenant status follows the tenant's leases
# ----------------------------------------------------
def mark_booked(tenant: Tenant) -> None:
    if tenant.status in (TenantStatus.new, TenantStatus.expired):
        tenant.status = TenantStatus.booked


def mark_active(tenant: Tenant) -> None:
    tenant.status = TenantStatus.active


def mark_expired_if_idle(db: Session, tenant: Tenant, ended_lease_id: UUID, user_id: Optional[str] = None) -> bool:
    other_active = (
        db.query(LeaseAgreement)
        .filter(
            LeaseAgreement.tenant_id == tenant.id,
            LeaseAgreement.id != ended_lease_id,
            LeaseAgreement.status == LeaseStatus.active,
        )
        .count()
    )
    if other_active:
        return False

    tenant.status = TenantStatus.expired
    log_activity(
        db, tenant.org_id, ActivityType.tenant_status_changed,
        description=f"Tenant {tenant.full_name} status changed to expired (all leases ended)",
        user_id=user_id, tenant_id=tenant.id,
    )
    return True
