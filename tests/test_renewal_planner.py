from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from leasing_service.app.engine import renewal_planner
from leasing_service.app.engine.errors import IllegalTransition
from leasing_service.app.engine.occupancy_ledger import InMemoryOccupancyLedger
from leasing_service.app.enum.leasing_enum import DepositStatus, LeaseStatus, PaymentCycle

T = date(2025, 1, 31)


@pytest.fixture
def renewing(lease_factory):
    return lease_factory(
        status=LeaseStatus.active,
        is_auto_renew=True,
        grace_period_days=3,
        auto_renewal_notice_days=5,
    )


def test_deadlines(renewing):
    assert renewal_planner.last_payment_date(renewing) == date(2025, 2, 3)
    assert renewal_planner.last_cancellation_date(renewing) == date(2025, 1, 26)
    assert renewal_planner.payment_deadline(renewing) == date(2025, 1, 4)


def test_no_deadlines_without_auto_renewal(lease_factory):
    lease = lease_factory(status=LeaseStatus.active)
    assert renewal_planner.last_payment_date(lease) is None
    assert renewal_planner.last_cancellation_date(lease) is None
    assert renewal_planner.can_cancel_auto_renewal(lease, date(2025, 1, 2)) is False


def test_disabling_after_the_notice_deadline_fails(renewing):
    ledger = InMemoryOccupancyLedger()

    with pytest.raises(IllegalTransition) as exc:
        renewal_planner.set_auto_renewal(renewing, False, ledger, today=date(2025, 1, 27))
    assert exc.value.guard == "notice_deadline_passed"
    assert renewing.is_auto_renew is True


def test_disabling_on_the_deadline_day_fails(renewing):
    with pytest.raises(IllegalTransition):
        renewal_planner.assert_can_disable(renewing, date(2025, 1, 26))


def test_disabling_before_the_notice_deadline_clears_terms(renewing):
    changed = renewal_planner.set_auto_renewal(
        renewing, False, InMemoryOccupancyLedger(), today=date(2025, 1, 25))

    assert changed is True
    assert renewing.is_auto_renew is False
    assert renewing.grace_period_days is None
    assert renewing.auto_renewal_notice_days is None


def test_can_cancel_flag_tracks_deadline(renewing):
    assert renewal_planner.can_cancel_auto_renewal(renewing, date(2025, 1, 25)) is True
    assert renewal_planner.can_cancel_auto_renewal(renewing, date(2025, 1, 26)) is False


def test_enabling_with_a_future_lease_on_the_unit_fails(lease_factory):
    ledger = InMemoryOccupancyLedger()
    current = lease_factory(status=LeaseStatus.active)
    ledger.claim(current.unit_id, current.id, current.start_date, current.end_date)
    ledger.claim(current.unit_id, None, date(2025, 2, 10), date(2025, 3, 9))

    with pytest.raises(IllegalTransition) as exc:
        renewal_planner.set_auto_renewal(current, True, ledger, 3, 5)
    assert exc.value.guard == "future_lease_exists"
    assert current.is_auto_renew is False


def test_enabling_on_a_free_timeline(lease_factory):
    ledger = InMemoryOccupancyLedger()
    lease = lease_factory(status=LeaseStatus.active)
    ledger.claim(lease.unit_id, lease.id, lease.start_date, lease.end_date)

    assert renewal_planner.set_auto_renewal(lease, True, ledger, 0, 1) is True
    assert (lease.is_auto_renew, lease.grace_period_days, lease.auto_renewal_notice_days) == (True, 0, 1)
    assert renewal_planner.set_auto_renewal(lease, True, ledger, 0, 1) is False


@pytest.mark.parametrize(
    "grace, notice, guard",
    [
        (None, 5, "auto_renewal_terms_missing"),
        (3, None, "auto_renewal_terms_missing"),
        (-1, 5, "auto_renewal_terms_invalid"),
        (3, 0, "auto_renewal_terms_invalid"),
    ],
)
def test_enabling_requires_valid_terms(lease_factory, grace, notice, guard):
    with pytest.raises(IllegalTransition) as exc:
        renewal_planner.set_auto_renewal(
            lease_factory(), True, InMemoryOccupancyLedger(), grace, notice)
    assert exc.value.guard == guard


def test_payment_overdue_only_for_unpaid_drafts(lease_factory):
    draft = lease_factory(grace_period_days=3)
    assert renewal_planner.is_payment_overdue(draft, date(2025, 1, 4)) is False
    assert renewal_planner.is_payment_overdue(draft, date(2025, 1, 5)) is True

    draft.paid_at = datetime(2025, 1, 2, tzinfo=timezone.utc)
    assert renewal_planner.is_payment_overdue(draft, date(2025, 1, 5)) is False


def test_should_auto_renew_from_notice_deadline(renewing):
    assert renewal_planner.should_auto_renew(renewing, date(2025, 1, 25)) is False
    assert renewal_planner.should_auto_renew(renewing, date(2025, 1, 26)) is True

    renewing.renewed_to_id = renewing.id
    assert renewal_planner.should_auto_renew(renewing, date(2025, 1, 26)) is False


def test_renewal_terms_continue_the_lease(renewing):
    renewing.deposit_amount = Decimal("1000000")
    renewing.deposit_status = DepositStatus.held

    terms = renewal_planner.renewal_terms(renewing)

    assert terms["start_date"] == date(2025, 2, 1)
    assert terms["end_date"] == date(2025, 2, 28)
    assert terms["status"] == LeaseStatus.draft
    assert terms["payment_cycle"] == PaymentCycle.monthly
    assert terms["unit_id"] == renewing.unit_id
    assert terms["is_auto_renew"] is True
    assert terms["auto_renewal_notice_days"] == 5
    assert terms["deposit_amount"] == Decimal("1000000")
    assert terms["deposit_status"] == DepositStatus.held
