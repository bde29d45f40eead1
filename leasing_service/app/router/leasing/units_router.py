from datetime import date
from typing import List, Optional
from uuid import UUID
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from shared.core.auth import validate_current_token
from shared.core.database import get_leasing_db as get_db
from shared.core.schemas import Lookup, UserToken
from shared.helpers.json_response_helper import not_found_response
from ...crud.leasing import leases_crud, units_crud as crud
from ...enum.leasing_enum import PaymentCycle
from ...schemas.leasing.leases_schemas import LeaseOut
from ...schemas.leasing.units_schemas import (
    SuggestEndDateResponse, UnitCreate, UnitListResponse, UnitOut, UnitRequest
)

router = APIRouter(
    prefix="/api/units",
    tags=["units"],
    dependencies=[Depends(validate_current_token)]
)


def _get_unit_or_404(db: Session, org_id: UUID, unit_id: UUID):
    unit = crud.get_by_id(db, org_id, unit_id)
    if not unit:
        not_found_response("Unit")
    return unit


@router.get("/all", response_model=UnitListResponse)
def get_units(
    params: UnitRequest = Depends(),
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.get_list(db, current_user.org_id, params)


@router.post("/", response_model=UnitOut)
def create_unit(
    payload: UnitCreate,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.create(db, current_user.org_id, payload)


@router.get("/suggest-end-date", response_model=SuggestEndDateResponse)
def suggest_end_date(
    start_date: date = Query(...),
    payment_cycle: PaymentCycle = Query(...),
):
    return crud.suggest_end_date(start_date, payment_cycle)


@router.get("/{unit_id:uuid}/cadence-lookup", response_model=List[Lookup])
def cadence_lookup(
    unit_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    return crud.cadence_lookup(_get_unit_or_404(db, current_user.org_id, unit_id))


@router.get("/{unit_id:uuid}/active-lease", response_model=Optional[LeaseOut])
def get_active_lease(
    unit_id: UUID,
    db: Session = Depends(get_db),
    current_user: UserToken = Depends(validate_current_token)
):
    _get_unit_or_404(db, current_user.org_id, unit_id)
    lease = crud.get_active_lease(db, current_user.org_id, unit_id)
    return leases_crud.to_out(db, lease) if lease else None
