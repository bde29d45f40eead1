from datetime import date
from typing import List, Optional
from uuid import UUID
from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.core.schemas import Lookup
from ...engine import period_calculator
from ...enum.leasing_enum import LeaseStatus, PaymentCycle
from ...models.leasing.lease_agreements import LeaseAgreement
from ...models.leasing.units import Unit
from ...schemas.leasing.units_schemas import (
    SuggestEndDateResponse, UnitCreate, UnitListResponse, UnitOut, UnitRequest
)


def to_out(unit: Unit) -> UnitOut:
    return UnitOut.model_validate(
        {
            **{c.name: getattr(unit, c.name) for c in Unit.__table__.columns},
            "available_cycles": period_calculator.available_cadences(unit),
        }
    )


def get_by_id(db: Session, org_id: UUID, unit_id: UUID) -> Optional[Unit]:
    return (
        db.query(Unit)
        .filter(Unit.id == unit_id, Unit.org_id == org_id, Unit.is_deleted == False)
        .first()
    )


def get_list(db: Session, org_id: UUID, params: UnitRequest) -> UnitListResponse:
    q = db.query(Unit).filter(Unit.org_id == org_id, Unit.is_deleted == False)

    if params.property_name:
        q = q.filter(Unit.property_name == params.property_name)

    if params.search:
        like = f"%{params.search}%"
        q = q.filter(or_(Unit.name.ilike(like), Unit.property_name.ilike(like)))

    total = q.count()
    rows = q.order_by(Unit.name.asc()).offset(params.skip).limit(params.limit).all()
    return {"units": [to_out(r) for r in rows], "total": total}


def create(db: Session, org_id: UUID, payload: UnitCreate) -> UnitOut:
    obj = Unit(org_id=org_id, **payload.model_dump())
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return to_out(obj)


def cadence_lookup(unit: Unit) -> List[Lookup]:
    # unpriced cycles are left out so they cannot be selected
    return [
        Lookup(id=cycle.value, name=cycle.name.capitalize())
        for cycle in period_calculator.available_cadences(unit)
    ]


def suggest_end_date(start_date: date, payment_cycle: PaymentCycle) -> SuggestEndDateResponse:
    return SuggestEndDateResponse(
        start_date=start_date,
        payment_cycle=payment_cycle,
        end_date=period_calculator.compute_end_date(start_date, payment_cycle),
    )


def get_active_lease(db: Session, org_id: UUID, unit_id: UUID, today: Optional[date] = None) -> Optional[LeaseAgreement]:
    today = today or date.today()
    return (
        db.query(LeaseAgreement)
        .filter(
            LeaseAgreement.org_id == org_id,
            LeaseAgreement.unit_id == unit_id,
            LeaseAgreement.status == LeaseStatus.active,
            LeaseAgreement.start_date <= today,
            LeaseAgreement.end_date >= today,
        )
        .first()
    )
