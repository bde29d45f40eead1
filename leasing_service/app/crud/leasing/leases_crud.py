import logging
import uuid
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from fastapi import HTTPException
from pydantic import ValidationError
from sqlalchemy import or_
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.schemas import Lookup
from shared.helpers.json_response_helper import error_response, not_found_response
from shared.utils.app_status_code import AppStatusCode
from ...engine import (
    deposit_ledger, lease_lifecycle, period_calculator, renewal_chain, renewal_planner
)
from ...engine.errors import IllegalTransition, LeaseEngineError
from ...engine.occupancy_ledger import SqlOccupancyLedger
from ...enum.leasing_enum import (
    ActivityType, CLAIMING_STATUSES, DepositStatus, LeaseStatus, PaymentCycle, PaymentMethod
)
from ...models.leasing.lease_agreements import LeaseAgreement
from ...models.leasing.tenants import Tenant
from ...models.leasing.units import Unit
from ...schemas.leasing.leases_schemas import (
    AutoRenewalToggle, BulkImportResponse, DeadlineListResponse, LeaseChainResponse,
    LeaseCreate, LeaseLinkOut, LeaseListResponse, LeaseOut, LeaseOverview, LeaseRequest,
    LeaseUpdate, PaymentRecord, RenewalProcessResponse
)
from ..common.activity_crud import log_activity
from . import tenants_crud, units_crud

logger = logging.getLogger(__name__)

INTERVAL_FIELDS = {"unit_id", "start_date", "end_date"}

# rough month-equivalents for the overview rent figure
MONTHLY_FACTOR = {
    PaymentCycle.daily: Decimal(30),
    PaymentCycle.monthly: Decimal(1),
    PaymentCycle.annual: Decimal(1) / Decimal(12),
}


# ----------------------------------------------------
# Loading and projection
# ----------------------------------------------------
def get_by_id(db: Session, org_id: UUID, lease_id: UUID) -> Optional[LeaseAgreement]:
    return (
        db.query(LeaseAgreement)
        .filter(LeaseAgreement.id == lease_id, LeaseAgreement.org_id == org_id)
        .first()
    )


def _require_lease(db: Session, org_id: UUID, lease_id: UUID) -> LeaseAgreement:
    lease = get_by_id(db, org_id, lease_id)
    if not lease:
        not_found_response("Lease")
    return lease


def _require_unit(db: Session, org_id: UUID, unit_id: UUID) -> Unit:
    unit = units_crud.get_by_id(db, org_id, unit_id)
    if not unit:
        not_found_response("Unit")
    if unit.is_unavailable:
        raise IllegalTransition(
            "unit_unavailable", f"Unit {unit.name} is marked unavailable for booking")
    return unit


def _require_tenant(db: Session, org_id: UUID, tenant_id: UUID) -> Tenant:
    tenant = tenants_crud.get_by_id(db, org_id, tenant_id)
    if not tenant:
        not_found_response("Tenant")
    return tenant


def to_out(db: Session, lease: LeaseAgreement, today: Optional[date] = None) -> LeaseOut:
    today = today or date.today()

    predecessor = get_by_id(db, lease.org_id, lease.renewed_from_id) \
        if lease.renewed_from_id else None
    successor = get_by_id(db, lease.org_id, lease.renewed_to_id) \
        if lease.renewed_to_id else None

    return LeaseOut.model_validate(
        {
            **{c.name: getattr(lease, c.name) for c in LeaseAgreement.__table__.columns},
            "tenant_name": lease.tenant.full_name if lease.tenant else None,
            "unit_name": lease.unit.name if lease.unit else None,
            "property_name": lease.unit.property_name if lease.unit else None,
            "effective_status": lease_lifecycle.effective_status(lease, today),
            "last_payment_date": renewal_planner.last_payment_date(lease),
            "last_cancellation_date": renewal_planner.last_cancellation_date(lease),
            "can_cancel_auto_renewal": renewal_planner.can_cancel_auto_renewal(lease, today),
            "is_payment_overdue": renewal_planner.is_payment_overdue(lease, today),
            "renewed_from": LeaseLinkOut.model_validate(predecessor) if predecessor else None,
            "renewed_to": LeaseLinkOut.model_validate(successor) if successor else None,
        }
    )


def _parse_status(value: str) -> LeaseStatus:
    try:
        return LeaseStatus(value.lower())
    except ValueError:
        error_response(message=f"Unknown lease status '{value}'",
                       status_code=AppStatusCode.INVALID_INPUT)


def build_filters(org_id: UUID, params: LeaseRequest):
    filters = [LeaseAgreement.org_id == org_id]

    if params.status and params.status.lower() != "all":
        filters.append(LeaseAgreement.status == _parse_status(params.status))

    if params.unit_id:
        filters.append(LeaseAgreement.unit_id == params.unit_id)

    if params.tenant_id:
        filters.append(LeaseAgreement.tenant_id == params.tenant_id)

    if params.search:
        like = f"%{params.search}%"
        filters.append(
            or_(
                Tenant.full_name.ilike(like),
                Unit.name.ilike(like),
                Unit.property_name.ilike(like),
            )
        )

    return filters


def get_list(db: Session, org_id: UUID, params: LeaseRequest, today: Optional[date] = None) -> LeaseListResponse:
    q = (
        db.query(LeaseAgreement)
        .join(Unit, Unit.id == LeaseAgreement.unit_id)
        .join(Tenant, Tenant.id == LeaseAgreement.tenant_id)
        .filter(*build_filters(org_id, params))
        .order_by(LeaseAgreement.start_date.desc())
    )

    total = q.count()
    rows = q.offset(params.skip).limit(params.limit).all()
    return {"leases": [to_out(db, r, today) for r in rows], "total": total}


def get_lease_by_id(db: Session, org_id: UUID, lease_id: UUID, today: Optional[date] = None) -> Optional[LeaseOut]:
    lease = get_by_id(db, org_id, lease_id)
    if not lease:
        return None
    return to_out(db, lease, today)


def get_overview(db: Session, org_id: UUID, today: Optional[date] = None) -> LeaseOverview:
    today = today or date.today()
    threshold = today + timedelta(days=settings.DEADLINE_WINDOW_DAYS)

    leases = (
        db.query(LeaseAgreement)
        .filter(
            LeaseAgreement.org_id == org_id,
            LeaseAgreement.status.in_(
                (LeaseStatus.draft, LeaseStatus.active, LeaseStatus.ended)),
        )
        .all()
    )

    active = [l for l in leases
              if lease_lifecycle.effective_status(l, today) == LeaseStatus.active]
    drafts = [l for l in leases if l.status == LeaseStatus.draft]

    monthly = sum(
        (Decimal(l.rent_amount) * MONTHLY_FACTOR[PaymentCycle(l.payment_cycle)]
         for l in active),
        Decimal(0),
    )
    expiring = sum(1 for l in active if today <= l.end_date <= threshold)
    holding = [l for l in leases
               if l.status != LeaseStatus.draft
               and l.deposit_amount is not None
               and l.deposit_status == DepositStatus.held]
    holding_ids = {l.id for l in holding}
    # a renewal carries the same deposit; count it once, on the latest lease holding it
    held = sum(
        (Decimal(l.deposit_amount) for l in holding if l.renewed_to_id not in holding_ids),
        Decimal(0),
    )

    return {
        "activeLeases": len(active),
        "draftLeases": len(drafts),
        "monthlyRentValue": round(float(monthly), 2),
        "expiringSoon": expiring,
        "heldDeposits": float(held),
    }


# ----------------------------------------------------
# Create
# ----------------------------------------------------
def _auto_renewal_terms(is_auto_renew: bool, grace_period_days: Optional[int],
                        notice_days: Optional[int]):
    if not is_auto_renew:
        return None, None
    if grace_period_days is None:
        grace_period_days = settings.DEFAULT_GRACE_PERIOD_DAYS
    if notice_days is None:
        notice_days = settings.DEFAULT_AUTO_RENEWAL_NOTICE_DAYS
    return grace_period_days, notice_days


def create(db: Session, org_id: UUID, payload: LeaseCreate,
           user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    ledger = SqlOccupancyLedger(db, org_id)
    try:
        unit = _require_unit(db, org_id, payload.unit_id)
        tenant = _require_tenant(db, org_id, payload.tenant_id)
        period_calculator.require_cadence(unit, payload.payment_cycle)

        end_date = payload.end_date or period_calculator.compute_end_date(
            payload.start_date, payload.payment_cycle)
        strict = payload.strict_period if payload.strict_period is not None \
            else settings.STRICT_PERIOD_VALIDATION
        period_calculator.validate_date_range(
            payload.start_date, end_date, payload.payment_cycle, strict)

        grace, notice = _auto_renewal_terms(
            payload.is_auto_renew, payload.grace_period_days, payload.auto_renewal_notice_days)
        if payload.is_auto_renew:
            renewal_planner.assert_terms(grace, notice)

        with ledger.unit_lock(unit.id):
            ledger.ensure_available(
                unit.id, payload.start_date, end_date,
                block_behind_auto_renewal=settings.BLOCK_BOOKINGS_BEHIND_AUTO_RENEWAL)

            lease = LeaseAgreement(
                id=uuid.uuid4(),
                org_id=org_id,
                tenant_id=tenant.id,
                unit_id=unit.id,
                start_date=payload.start_date,
                end_date=end_date,
                payment_cycle=payload.payment_cycle,
                rent_amount=payload.rent_amount,
                status=LeaseStatus.draft,
                is_auto_renew=payload.is_auto_renew,
                grace_period_days=grace,
                auto_renewal_notice_days=notice,
                deposit_amount=payload.deposit_amount,
                deposit_status=deposit_ledger.initial_status(payload.deposit_amount),
            )
            if lease.is_auto_renew:
                renewal_planner.assert_can_enable(lease, ledger)

            db.add(lease)
            ledger.claim(unit.id, lease.id, lease.start_date,
                         lease.end_date, lease.is_auto_renew)

        tenants_crud.mark_booked(tenant)
        log_activity(
            db, org_id, ActivityType.lease_created, lease,
            description=f"Lease created for {tenant.full_name} on {unit.name} "
                        f"({lease.start_date.isoformat()} - {lease.end_date.isoformat()})",
            user_id=user_id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    logger.info("Created lease %s on unit %s", lease.id, lease.unit_id)
    return to_out(db, lease, today)


# ----------------------------------------------------
# Expiry and renewal
# ----------------------------------------------------
def _renew(db: Session, lease: LeaseAgreement, user_id: Optional[str] = None) -> LeaseAgreement:
    """Create and link the DRAFT successor continuing ``lease``."""
    if lease.renewed_to_id is not None:
        raise IllegalTransition("renewal_exists", "This lease has already been renewed")

    ledger = SqlOccupancyLedger(db, lease.org_id)
    terms = renewal_planner.renewal_terms(lease)

    with ledger.unit_lock(lease.unit_id):
        ledger.ensure_available(
            lease.unit_id, terms["start_date"], terms["end_date"],
            renewal_of=lease.id,
            block_behind_auto_renewal=settings.BLOCK_BOOKINGS_BEHIND_AUTO_RENEWAL)

        successor = LeaseAgreement(id=uuid.uuid4(), **terms)
        # insert before linking so neither foreign key points at a missing row
        db.add(successor)
        db.flush()
        renewal_chain.link(
            lease, successor, load=lambda i: get_by_id(db, lease.org_id, i))
        ledger.claim(successor.unit_id, successor.id, successor.start_date,
                     successor.end_date, successor.is_auto_renew)

    log_activity(
        db, lease.org_id, ActivityType.lease_renewed, lease,
        description=f"Lease renewed for {successor.start_date.isoformat()} - "
                    f"{successor.end_date.isoformat()} (renewal {successor.id})",
        user_id=user_id,
    )
    logger.info("Renewed lease %s as %s", lease.id, successor.id)
    return successor


def _end(db: Session, lease: LeaseAgreement, description: str, user_id: Optional[str] = None) -> None:
    lease_lifecycle.terminate(lease)
    SqlOccupancyLedger(db, lease.org_id).release(lease.unit_id, lease.id)
    log_activity(db, lease.org_id, ActivityType.lease_terminated, lease,
                 description=description, user_id=user_id)

    # a renewed lease hands the tenant over to its successor
    if lease.renewed_to_id is None and lease.tenant is not None:
        tenants_crud.mark_expired_if_idle(db, lease.tenant, lease.id, user_id)


def _try_auto_renew(db: Session, lease: LeaseAgreement, user_id: Optional[str] = None) -> Dict:
    # _renew checks availability before it writes, so a rejection leaves nothing behind
    try:
        successor = _renew(db, lease, user_id)
        return {"lease_id": lease.id, "renewal_id": successor.id, "success": True}
    except LeaseEngineError as e:
        logger.warning("Auto-renewal of lease %s failed: %s", lease.id, e.message)
        return {"lease_id": lease.id, "success": False, "error": e.message}


def settle_expired(db: Session, lease: LeaseAgreement, today: Optional[date] = None,
                   user_id: Optional[str] = None) -> Optional[Dict]:
    """Persist the ACTIVE -> ENDED move of a lease whose end date has passed.

    A lease still due for auto-renewal gets its successor first. The period is
    over either way, so a rejected renewal does not keep the lease ACTIVE.
    Returns the renewal outcome when a renewal was due. Does not commit.
    """
    today = today or date.today()
    if not lease_lifecycle.is_expired(lease, today):
        return None

    outcome = None
    if renewal_planner.should_auto_renew(lease, today):
        outcome = _try_auto_renew(db, lease, user_id)
    _end(db, lease, f"Lease ended on {lease.end_date.isoformat()}", user_id)
    return outcome


def _load_for_update(db: Session, org_id: UUID, lease_id: UUID, today: Optional[date] = None,
                     user_id: Optional[str] = None) -> LeaseAgreement:
    lease = _require_lease(db, org_id, lease_id)
    settle_expired(db, lease, today, user_id)
    return lease


def renew(db: Session, org_id: UUID, lease_id: UUID,
          user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    try:
        lease = _load_for_update(db, org_id, lease_id, today, user_id)
        if lease.status != LeaseStatus.active:
            raise IllegalTransition(
                "renew_requires_active", "Only active leases can be renewed")
        successor = _renew(db, lease, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(successor)
    return to_out(db, successor, today)


def process_lease_periods(db: Session, org_id: UUID, today: Optional[date] = None,
                          user_id: Optional[str] = None) -> RenewalProcessResponse:
    """Run due auto-renewals, then end every lease whose period is over.

    Each lease is committed on its own so one failure does not block the rest.
    A running lease whose renewal failed stays ACTIVE and is retried on the
    next run; an expired one ends without a successor.
    """
    today = today or date.today()

    candidates = (
        db.query(LeaseAgreement)
        .filter(
            LeaseAgreement.org_id == org_id,
            LeaseAgreement.status == LeaseStatus.active,
            LeaseAgreement.is_auto_renew == True,
            LeaseAgreement.renewed_to_id.is_(None),
            LeaseAgreement.end_date >= today,
        )
        .order_by(LeaseAgreement.end_date.asc())
        .all()
    )
    due = [l.id for l in candidates if renewal_planner.should_auto_renew(l, today)]

    details: List[Dict] = []
    for lease_id in due:
        lease = get_by_id(db, org_id, lease_id)
        outcome = _try_auto_renew(db, lease, user_id)
        if outcome["success"]:
            db.commit()
        else:
            db.rollback()
        details.append(outcome)

    expired_ids = [
        row.id for row in (
            db.query(LeaseAgreement.id)
            .filter(
                LeaseAgreement.org_id == org_id,
                LeaseAgreement.status == LeaseStatus.active,
                LeaseAgreement.end_date < today,
            )
            .order_by(LeaseAgreement.end_date.asc())
            .all()
        )
    ]

    ended = 0
    for lease_id in expired_ids:
        lease = get_by_id(db, org_id, lease_id)
        try:
            outcome = settle_expired(db, lease, today, user_id)
            db.commit()
            ended += 1
            if outcome is not None:
                details.append(outcome)
        except LeaseEngineError as e:
            db.rollback()
            logger.warning("Could not end lease %s: %s", lease_id, e.message)
            details.append({"lease_id": lease_id,
                            "success": False, "error": e.message})

    succeeded = sum(1 for d in details if d["success"])
    logger.info("Processed lease periods for org %s: %d renewed, %d ended, %d failed",
                org_id, succeeded, ended, len(details) - succeeded)
    return {
        "processed": len(details),
        "succeeded": succeeded,
        "failed": len(details) - succeeded,
        "ended": ended,
        "details": details,
    }


# ----------------------------------------------------
# Transitions
# ----------------------------------------------------
def _apply_payment(db: Session, lease: LeaseAgreement, paid_at: datetime,
                   payment_method: PaymentMethod, user_id: Optional[str] = None) -> None:
    activated = lease_lifecycle.record_payment(lease, paid_at, payment_method)
    log_activity(
        db, lease.org_id, ActivityType.payment_recorded, lease,
        description=f"Payment recorded via {PaymentMethod(payment_method).value}",
        user_id=user_id,
    )
    if activated:
        if lease.tenant is not None:
            tenants_crud.mark_active(lease.tenant)
        log_activity(db, lease.org_id, ActivityType.lease_activated, lease,
                     description="Lease activated", user_id=user_id)


def record_payment(db: Session, org_id: UUID, lease_id: UUID, payload: PaymentRecord,
                   user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    try:
        lease = _load_for_update(db, org_id, lease_id, today, user_id)
        _apply_payment(db, lease, payload.paid_at or datetime.now(timezone.utc),
                       payload.payment_method, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


def _apply_auto_renewal(db: Session, lease: LeaseAgreement, enable: bool,
                        grace_period_days: Optional[int], notice_days: Optional[int],
                        today: Optional[date] = None, user_id: Optional[str] = None) -> None:
    lease_lifecycle.assert_editable(lease, ["is_auto_renew"])
    grace, notice = _auto_renewal_terms(enable, grace_period_days, notice_days)
    changed = renewal_planner.set_auto_renewal(
        lease, enable, SqlOccupancyLedger(db, lease.org_id), grace, notice, today)
    if changed:
        log_activity(
            db, lease.org_id, ActivityType.auto_renewal_toggled, lease,
            description="Auto-renewal enabled" if enable else "Auto-renewal disabled",
            user_id=user_id,
        )


def set_auto_renewal(db: Session, org_id: UUID, lease_id: UUID, payload: AutoRenewalToggle,
                     user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    try:
        lease = _load_for_update(db, org_id, lease_id, today, user_id)
        grace = payload.grace_period_days
        notice = payload.auto_renewal_notice_days
        # keep the stored terms when the toggle only flips the switch
        if payload.is_auto_renew:
            grace = grace if grace is not None else lease.grace_period_days
            notice = notice if notice is not None else lease.auto_renewal_notice_days
        _apply_auto_renewal(db, lease, payload.is_auto_renew,
                            grace, notice, today, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


def terminate(db: Session, org_id: UUID, lease_id: UUID,
              user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    try:
        lease = _require_lease(db, org_id, lease_id)
        if lease_lifecycle.is_expired(lease, today):
            settle_expired(db, lease, today, user_id)
        else:
            _end(db, lease, "Lease terminated", user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


def delete(db: Session, org_id: UUID, lease_id: UUID,
           user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    """Cancel a DRAFT lease. Rows are never removed."""
    try:
        lease = _load_for_update(db, org_id, lease_id, today, user_id)
        lease_lifecycle.cancel(lease)

        # a cancelled renewal frees its predecessor to be renewed again
        if lease.renewed_from_id:
            predecessor = get_by_id(db, org_id, lease.renewed_from_id)
            if predecessor is not None:
                renewal_chain.unlink(predecessor, lease)

        SqlOccupancyLedger(db, org_id).release(lease.unit_id, lease.id)
        log_activity(db, org_id, ActivityType.lease_cancelled, lease,
                     description="Draft lease cancelled", user_id=user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


def _apply_deposit(db: Session, lease: LeaseAgreement, target: DepositStatus,
                   user_id: Optional[str] = None) -> None:
    outcome = deposit_ledger.disposition(lease, target)
    activity = ActivityType.deposit_returned if outcome == DepositStatus.returned \
        else ActivityType.deposit_forfeited
    log_activity(db, lease.org_id, activity, lease,
                 description=f"Deposit {outcome.value}", user_id=user_id)


def disposition_deposit(db: Session, org_id: UUID, lease_id: UUID, target: DepositStatus,
                        user_id: Optional[str] = None, today: Optional[date] = None) -> LeaseOut:
    try:
        lease = _load_for_update(db, org_id, lease_id, today, user_id)
        _apply_deposit(db, lease, target, user_id)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


# ----------------------------------------------------
# Update (only the fields sent are applied)
# ----------------------------------------------------
def _apply_core_terms(db: Session, lease: LeaseAgreement, changes: dict) -> bool:
    """Returns True when the occupied interval moved."""
    if "tenant_id" in changes:
        tenant = _require_tenant(db, lease.org_id, changes["tenant_id"])
        lease.tenant_id = tenant.id
        tenants_crud.mark_booked(tenant)

    if "rent_amount" in changes:
        lease.rent_amount = changes["rent_amount"]

    if "deposit_amount" in changes:
        deposit_ledger.set_amount(lease, changes["deposit_amount"])

    if not INTERVAL_FIELDS & changes.keys():
        return False

    if lease.renewed_from_id:
        raise IllegalTransition(
            "renewal_dates_fixed",
            "A renewal must start the day after its predecessor; its unit and dates cannot change")

    unit = _require_unit(db, lease.org_id, changes.get("unit_id", lease.unit_id))
    period_calculator.require_cadence(unit, lease.payment_cycle)

    start_date = changes.get("start_date", lease.start_date)
    end_date = changes.get("end_date")
    if end_date is None:
        end_date = period_calculator.compute_end_date(start_date, lease.payment_cycle) \
            if "start_date" in changes else lease.end_date
    period_calculator.validate_date_range(
        start_date, end_date, lease.payment_cycle, settings.STRICT_PERIOD_VALIDATION)

    ledger = SqlOccupancyLedger(db, lease.org_id)
    with ledger.unit_lock(unit.id):
        ledger.ensure_available(
            unit.id, start_date, end_date, exclude_lease_id=lease.id,
            block_behind_auto_renewal=settings.BLOCK_BOOKINGS_BEHIND_AUTO_RENEWAL)
        lease.unit_id = unit.id
        lease.start_date = start_date
        lease.end_date = end_date
        ledger.claim(unit.id, lease.id, start_date, end_date, lease.is_auto_renew)
    return True


def update(db: Session, org_id: UUID, payload: LeaseUpdate,
           user_id: Optional[str] = None, today: Optional[date] = None) -> Optional[LeaseOut]:
    try:
        lease = get_by_id(db, org_id, payload.id)
        if not lease:
            return None
        settle_expired(db, lease, today, user_id)

        data = payload.model_dump(exclude_unset=True, exclude={"id"})
        changes = {k: v for k, v in data.items() if getattr(lease, k) != v}
        if not changes:
            db.commit()
            db.refresh(lease)
            return to_out(db, lease, today)

        lease_lifecycle.assert_editable(lease, changes.keys())

        moved = False
        if changes.keys() & lease_lifecycle.CORE_TERMS:
            moved = _apply_core_terms(db, lease, changes)

        if changes.keys() & lease_lifecycle.AUTO_RENEWAL_FIELDS:
            enable = changes.get("is_auto_renew", lease.is_auto_renew)
            _apply_auto_renewal(
                db, lease, enable,
                changes.get("grace_period_days", lease.grace_period_days),
                changes.get("auto_renewal_notice_days", lease.auto_renewal_notice_days),
                today, user_id,
            )
        elif moved and lease.is_auto_renew:
            renewal_planner.assert_can_enable(lease, SqlOccupancyLedger(db, org_id))

        if changes.keys() & lease_lifecycle.PAYMENT_FIELDS:
            method = changes.get("payment_method") or lease.payment_method
            if method is None:
                raise IllegalTransition(
                    "payment_method_required", "Payment method is required to record a payment")
            paid_at = changes.get("paid_at") or lease.paid_at or datetime.now(timezone.utc)
            _apply_payment(db, lease, paid_at, method, user_id)

        if "deposit_status" in changes:
            _apply_deposit(db, lease, changes["deposit_status"], user_id)

        log_activity(
            db, org_id, ActivityType.lease_updated, lease,
            description=f"Lease updated ({', '.join(sorted(changes))})",
            user_id=user_id,
        )
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(lease)
    return to_out(db, lease, today)


# ----------------------------------------------------
# Queries
# ----------------------------------------------------
def has_future_lease(db: Session, org_id: UUID, lease_id: UUID) -> bool:
    lease = _require_lease(db, org_id, lease_id)
    ledger = SqlOccupancyLedger(db, org_id)
    return ledger.has_future_claim(lease.unit_id, lease.end_date, exclude_lease_id=lease.id)


def get_chain(db: Session, org_id: UUID, lease_id: UUID) -> LeaseChainResponse:
    lease = _require_lease(db, org_id, lease_id)
    chain = renewal_chain.walk(lease, lambda i: get_by_id(db, org_id, i))
    return {"chain": [LeaseLinkOut.model_validate(l) for l in chain]}


def upcoming_deadlines(db: Session, org_id: UUID, today: Optional[date] = None,
                       window_days: Optional[int] = None) -> DeadlineListResponse:
    today = today or date.today()
    window_days = settings.DEADLINE_WINDOW_DAYS if window_days is None else window_days
    horizon = today + timedelta(days=window_days)

    leases = (
        db.query(LeaseAgreement)
        .filter(
            LeaseAgreement.org_id == org_id,
            LeaseAgreement.status.in_(CLAIMING_STATUSES),
        )
        .all()
    )

    items = []

    def add(lease, kind, due):
        if due is not None and today <= due <= horizon:
            items.append({"lease_id": lease.id, "tenant_id": lease.tenant_id,
                          "unit_id": lease.unit_id, "kind": kind, "due_date": due})

    for lease in leases:
        status = lease_lifecycle.effective_status(lease, today)
        if status == LeaseStatus.active:
            add(lease, "lease_end", lease.end_date)
            if lease.renewed_to_id is None:
                add(lease, "cancellation_deadline",
                    renewal_planner.last_cancellation_date(lease))
        elif status == LeaseStatus.draft and lease.paid_at is None:
            add(lease, "payment_deadline", renewal_planner.payment_deadline(lease))

    items.sort(key=lambda i: (i["due_date"], i["kind"]))
    return {"deadlines": items, "total": len(items)}


# ----------------------------------------------------
# Bulk import
# ----------------------------------------------------
def _row_error(exc: Exception) -> str:
    if isinstance(exc, ValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors())
    if isinstance(exc, HTTPException):
        detail = exc.detail
        return detail.get("message") if isinstance(detail, dict) else str(detail)
    return exc.message


def bulk_import(db: Session, org_id: UUID, rows: List[dict],
                user_id: Optional[str] = None, today: Optional[date] = None) -> BulkImportResponse:
    """Create leases row by row through the normal create path.

    Rows are independent: a rejected row is reported and the rest continue.
    """
    results = []
    for index, row in enumerate(rows, start=1):
        try:
            payload = LeaseCreate.model_validate(row)
            lease = create(db, org_id, payload, user_id, today)
            results.append({"row": index, "success": True, "lease_id": lease.id})
        except (ValidationError, HTTPException, LeaseEngineError) as e:
            results.append({"row": index, "success": False, "error": _row_error(e)})

    created = sum(1 for r in results if r["success"])
    logger.info("Bulk import for org %s: %d of %d rows created",
                org_id, created, len(rows))
    return {"total": len(rows), "created": created,
            "failed": len(rows) - created, "results": results}


# ----------------------------------------------------
# Lookups
# ----------------------------------------------------
def lease_status_lookup() -> List[Lookup]:
    return [Lookup(id=s.value, name=s.name.capitalize()) for s in LeaseStatus]


def payment_cycle_lookup() -> List[Lookup]:
    return [Lookup(id=c.value, name=c.name.capitalize()) for c in PaymentCycle]
