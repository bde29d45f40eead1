from datetime import date
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import not_found_response, success_response
from shared.utils.app_status_code import AppStatusCode
from ...crud.leasing import leases_crud as crud
from ...schemas.leasing.leases_schemas import (
    AutoRenewalToggle, BulkImportRequest, BulkImportResponse, DeadlineListResponse,
    DepositDisposition, FutureLeaseResponse, LeaseChainResponse, LeaseCreate,
    LeaseListResponse, LeaseOut, LeaseOverview, LeaseRequest, LeaseUpdate,
    PaymentRecord, RenewalProcessResponse
)

router = APIRouter(
    prefix="/api/leases",
    tags=["leases"],
    dependencies=[Depends(validate_current_token)]
)


@router.get("/all", response_model=LeaseListResponse)
def get_leases(
    params: LeaseRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_list(db, current_user.org_id, params)


@router.get("/overview", response_model=LeaseOverview)
def get_lease_overview(
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_overview(db, current_user.org_id)


@router.get("/deadlines", response_model=DeadlineListResponse)
def get_upcoming_deadlines(
    window_days: Optional[int] = Query(None, ge=0),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.upcoming_deadlines(db, current_user.org_id, window_days=window_days)


@router.get("/status-lookup", response_model=List[Lookup])
def lease_status_lookup():
    return crud.lease_status_lookup()


@router.get("/payment-cycle-lookup", response_model=List[Lookup])
def payment_cycle_lookup():
    return crud.payment_cycle_lookup()


@router.get("/{lease_id:uuid}", response_model=LeaseOut)
def get_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    lease = crud.get_lease_by_id(db, current_user.org_id, lease_id)
    if not lease:
        return not_found_response("Lease")
    return lease


@router.post("/", response_model=LeaseOut)
def create_lease(
    payload: LeaseCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create(db, current_user.org_id, payload, current_user.user_id)


@router.put("/", response_model=LeaseOut)
def update_lease(
    payload: LeaseUpdate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    obj = crud.update(db, current_user.org_id, payload, current_user.user_id)
    if not obj:
        return not_found_response("Lease")
    return obj


@router.delete("/{lease_id:uuid}", response_model=LeaseOut)
def delete_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.delete(db, current_user.org_id, lease_id, current_user.user_id)


@router.post("/{lease_id:uuid}/payments", response_model=LeaseOut)
def record_payment(
    lease_id: UUID,
    payload: PaymentRecord,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.record_payment(db, current_user.org_id, lease_id, payload, current_user.user_id)


@router.post("/{lease_id:uuid}/auto-renewal", response_model=LeaseOut)
def toggle_auto_renewal(
    lease_id: UUID,
    payload: AutoRenewalToggle,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.set_auto_renewal(db, current_user.org_id, lease_id, payload, current_user.user_id)


@router.post("/{lease_id:uuid}/terminate", response_model=LeaseOut)
def terminate_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.terminate(db, current_user.org_id, lease_id, current_user.user_id)


@router.post("/{lease_id:uuid}/renew", response_model=LeaseOut)
def renew_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.renew(db, current_user.org_id, lease_id, current_user.user_id)


@router.post("/{lease_id:uuid}/deposit", response_model=LeaseOut)
def settle_deposit(
    lease_id: UUID,
    payload: DepositDisposition,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.disposition_deposit(
        db, current_user.org_id, lease_id, payload.deposit_status, current_user.user_id)


@router.get("/{lease_id:uuid}/check-future-lease", response_model=FutureLeaseResponse)
def check_future_lease(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return {"has_future_lease": crud.has_future_lease(db, current_user.org_id, lease_id)}


@router.get("/{lease_id:uuid}/chain", response_model=LeaseChainResponse)
def get_renewal_chain(
    lease_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_chain(db, current_user.org_id, lease_id)


@router.post("/bulk-import", response_model=BulkImportResponse)
def bulk_import_leases(
    payload: BulkImportRequest,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.bulk_import(db, current_user.org_id, payload.rows, current_user.user_id)


@router.post("/process-renewals")
def process_renewals(
    as_of: Optional[date] = Query(None),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    result = crud.process_lease_periods(
        db, current_user.org_id, today=as_of, user_id=current_user.user_id)
    return success_response(
        data=RenewalProcessResponse.model_validate(result),
        message=f"Processed {result['processed']} renewals, ended {result['ended']} leases",
        status_code=AppStatusCode.OPERATION_SUCCESSFUL,
    )
