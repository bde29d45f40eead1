"""Synthetic leasing data.

Histories are laid out unit by unit through the same engine the API uses, so
every generated dataset satisfies the occupancy and renewal rules:
``python -m leasing_service.seed``.
"""
import logging
import random
import uuid
from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from faker import Faker
from sqlalchemy.orm import Session

from shared.core.config import settings
from shared.core.database import Base, LeasingSessionLocal, leasing_engine
from leasing_service.app.engine import (
    deposit_ledger, lease_lifecycle, period_calculator, renewal_chain, renewal_planner
)
from leasing_service.app.engine.occupancy_ledger import InMemoryOccupancyLedger
from leasing_service.app.enum.leasing_enum import (
    ActivityType, DepositStatus, LeaseStatus, PaymentMethod, TenantStatus
)
from leasing_service.app.models.leasing.activities import Activity
from leasing_service.app.models.leasing.lease_agreements import LeaseAgreement
from leasing_service.app.models.leasing.tenants import Tenant
from leasing_service.app.models.leasing.units import Unit

logger = logging.getLogger(__name__)

fake = Faker()

MAX_CHAIN = {"daily": 5, "monthly": 4, "annual": 2}


def _paid_at(day: date, rng: random.Random) -> datetime:
    return datetime.combine(day, time(hour=rng.randint(8, 18)), tzinfo=timezone.utc)


def _new_lease(org_id, unit: Unit, tenant: Tenant, start_date: date, cycle, rng: random.Random) -> LeaseAgreement:
    deposit = None
    if rng.random() < 0.5:
        deposit = Decimal(period_calculator.rate_for(unit, cycle))
    return LeaseAgreement(
        id=uuid.uuid4(),
        org_id=org_id,
        tenant_id=tenant.id,
        unit_id=unit.id,
        start_date=start_date,
        end_date=period_calculator.compute_end_date(start_date, cycle),
        payment_cycle=cycle,
        rent_amount=period_calculator.rate_for(unit, cycle),
        status=LeaseStatus.draft,
        is_auto_renew=True,
        grace_period_days=settings.DEFAULT_GRACE_PERIOD_DAYS,
        auto_renewal_notice_days=settings.DEFAULT_AUTO_RENEWAL_NOTICE_DAYS,
        deposit_amount=deposit,
        deposit_status=deposit_ledger.initial_status(deposit),
    )


def _opt_out(lease: LeaseAgreement) -> None:
    lease.is_auto_renew = False
    lease.grace_period_days = None
    lease.auto_renewal_notice_days = None


def generate_unit_history(
    org_id,
    unit: Unit,
    tenants: Sequence[Tenant],
    start: date,
    today: date,
    rng: Optional[random.Random] = None,
    ledger: Optional[InMemoryOccupancyLedger] = None,
) -> List[LeaseAgreement]:
    """Lay out non-overlapping lease chains on one unit from ``start`` to ``today``.

    Returns transient ``LeaseAgreement`` objects, oldest first. Periods that
    have passed are ENDED, the one covering ``today`` is ACTIVE, and units
    without an auto-renewing tenant may get one future DRAFT booking.
    """
    rng = rng or random.Random()
    ledger = ledger or InMemoryOccupancyLedger()
    cycles = period_calculator.available_cadences(unit)
    if not cycles or not tenants:
        return []

    leases: List[LeaseAgreement] = []
    cursor = start + timedelta(days=rng.randint(0, 14))

    while cursor <= today:
        cycle = rng.choice(cycles)
        tenant = rng.choice(tenants)
        chain: List[LeaseAgreement] = []
        lease = _new_lease(org_id, unit, tenant, cursor, cycle, rng)

        for _ in range(rng.randint(1, MAX_CHAIN[cycle.value])):
            if lease.start_date > today:
                break
            if not ledger.claim_if_available(unit.id, lease.id, lease.start_date,
                                             lease.end_date, lease.is_auto_renew):
                break
            if chain:
                renewal_chain.link(chain[-1], lease)
                ledger.mark_renewed(unit.id, chain[-1].id, lease.id)

            lease_lifecycle.record_payment(
                lease, _paid_at(lease.start_date, rng), rng.choice(list(PaymentMethod)))
            if lease.end_date < today:
                lease_lifecycle.terminate(lease)
            chain.append(lease)

            if LeaseStatus(lease.status) == LeaseStatus.active:
                break
            lease = LeaseAgreement(id=uuid.uuid4(), **renewal_planner.renewal_terms(lease))

        if not chain:
            break

        last = chain[-1]
        if LeaseStatus(last.status) == LeaseStatus.ended:
            # the tenant gave notice before the last period ran out
            _opt_out(last)
            if last.deposit_amount is not None:
                deposit_ledger.disposition(
                    last, rng.choice([DepositStatus.returned, DepositStatus.returned,
                                      DepositStatus.forfeited]))
        elif rng.random() < 0.5:
            _opt_out(last)

        leases.extend(chain)
        cursor = last.end_date + timedelta(days=1 + rng.randint(0, 10))

    last = leases[-1] if leases else None
    if last is not None and not last.is_auto_renew and rng.random() < 0.4:
        booking = _new_lease(org_id, unit, rng.choice(tenants),
                             last.end_date + timedelta(days=rng.randint(1, 20)),
                             rng.choice(cycles), rng)
        _opt_out(booking)
        if ledger.claim_if_available(unit.id, booking.id, booking.start_date, booking.end_date):
            leases.append(booking)

    return leases


def tenant_status_for(leases: Sequence[LeaseAgreement]) -> TenantStatus:
    statuses = {LeaseStatus(l.status) for l in leases}
    if LeaseStatus.active in statuses:
        return TenantStatus.active
    if LeaseStatus.draft in statuses:
        return TenantStatus.booked
    if statuses:
        return TenantStatus.expired
    return TenantStatus.new


def _persist_leases(db: Session, leases: Sequence[LeaseAgreement]) -> None:
    # rows first, renewal links second, so no foreign key targets a missing row
    links = [(l, l.renewed_from_id, l.renewed_to_id) for l in leases]
    for lease, _, _ in links:
        lease.renewed_from_id = None
        lease.renewed_to_id = None
    db.add_all(leases)
    db.flush()
    for lease, renewed_from_id, renewed_to_id in links:
        lease.renewed_from_id = renewed_from_id
        lease.renewed_to_id = renewed_to_id
    db.flush()


def seed_data(org_count: int = 2, units_per_org: int = 6, tenants_per_org: int = 10,
              history_days: int = 540, seed: Optional[int] = None, today: Optional[date] = None):
    rng = random.Random(seed)
    if seed is not None:
        Faker.seed(seed)
    today = today or date.today()
    start = today - timedelta(days=history_days)

    Base.metadata.create_all(bind=leasing_engine)
    db: Session = LeasingSessionLocal()
    try:
        for _ in range(org_count):
            org_id = uuid.uuid4()
            property_name = f"{fake.last_name()} Residences"

            tenants = [
                Tenant(
                    id=uuid.uuid4(),
                    org_id=org_id,
                    full_name=fake.name(),
                    email=fake.email(),
                    phone=fake.phone_number()[:32],
                    status=TenantStatus.new,
                )
                for _ in range(tenants_per_org)
            ]
            db.add_all(tenants)

            units = []
            for index in range(1, units_per_org + 1):
                monthly = Decimal(rng.randrange(1_500_000, 6_000_000, 50_000))
                units.append(Unit(
                    id=uuid.uuid4(),
                    org_id=org_id,
                    name=f"Room {index:02d}",
                    property_name=property_name,
                    daily_rate=(monthly / 20).quantize(Decimal("1")) if rng.random() < 0.6 else None,
                    monthly_rate=monthly,
                    annual_rate=monthly * 11 if rng.random() < 0.5 else None,
                ))
            db.add_all(units)
            db.flush()

            all_leases: List[LeaseAgreement] = []
            for unit in units:
                history = generate_unit_history(org_id, unit, tenants, start, today, rng)
                _persist_leases(db, history)
                all_leases.extend(history)

            for tenant in tenants:
                tenant.status = tenant_status_for(
                    [l for l in all_leases if l.tenant_id == tenant.id])

            db.add_all(
                Activity(
                    org_id=org_id,
                    activity_type=ActivityType.lease_created,
                    lease_id=l.id,
                    unit_id=l.unit_id,
                    tenant_id=l.tenant_id,
                    description="Seeded lease",
                )
                for l in all_leases
            )
            logger.info("Seeded org %s: %d units, %d tenants, %d leases",
                        org_id, len(units), len(tenants), len(all_leases))

        db.commit()
    except Exception:
        db.rollback()
        logger.exception("Error seeding leasing data")
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    seed_data()
