"""Grace and notice deadlines, auto-renewal toggling, renewal terms.

Deadlines are pure functions of the stored lease fields and are recomputed
on every read.
"""
import logging
from datetime import date, timedelta
from typing import Optional

from ..enum.leasing_enum import DepositStatus, LeaseStatus
from .errors import IllegalTransition
from .occupancy_ledger import OccupancyLedger
from .period_calculator import next_period

logger = logging.getLogger(__name__)


def last_payment_date(lease) -> Optional[date]:
    if not lease.is_auto_renew or lease.grace_period_days is None:
        return None
    return lease.end_date + timedelta(days=lease.grace_period_days)


def last_cancellation_date(lease) -> Optional[date]:
    if not lease.is_auto_renew or lease.auto_renewal_notice_days is None:
        return None
    return lease.end_date - timedelta(days=lease.auto_renewal_notice_days)


def can_cancel_auto_renewal(lease, today: Optional[date] = None) -> bool:
    deadline = last_cancellation_date(lease)
    if deadline is None:
        return False
    return (today or date.today()) < deadline


def payment_deadline(lease) -> Optional[date]:
    """Last acceptable payment date for the current, still unpaid period."""
    if lease.grace_period_days is None:
        return None
    return lease.start_date + timedelta(days=lease.grace_period_days)


def is_payment_overdue(lease, today: Optional[date] = None) -> bool:
    if LeaseStatus(lease.status) != LeaseStatus.draft or lease.paid_at is not None:
        return False
    deadline = payment_deadline(lease)
    return deadline is not None and (today or date.today()) > deadline


def assert_can_disable(lease, today: Optional[date] = None) -> None:
    if not lease.is_auto_renew:
        return
    deadline = last_cancellation_date(lease)
    if deadline is not None and (today or date.today()) >= deadline:
        raise IllegalTransition(
            "notice_deadline_passed",
            f"Auto-renewal can no longer be cancelled; the notice deadline was {deadline.isoformat()}")


def assert_can_enable(lease, ledger: OccupancyLedger) -> None:
    if ledger.has_future_claim(lease.unit_id, lease.end_date, exclude_lease_id=lease.id):
        raise IllegalTransition(
            "future_lease_exists",
            "Cannot enable auto-renewal: a future lease already exists on this unit")


def assert_terms(grace_period_days: Optional[int], auto_renewal_notice_days: Optional[int]) -> None:
    if grace_period_days is None or auto_renewal_notice_days is None:
        raise IllegalTransition(
            "auto_renewal_terms_missing",
            "Grace period and notice period are required to enable auto-renewal")
    if grace_period_days < 0 or auto_renewal_notice_days < 1:
        raise IllegalTransition(
            "auto_renewal_terms_invalid",
            "Grace period must be non-negative and notice period at least 1 day")


def set_auto_renewal(
    lease,
    enable: bool,
    ledger: OccupancyLedger,
    grace_period_days: Optional[int] = None,
    auto_renewal_notice_days: Optional[int] = None,
    today: Optional[date] = None,
) -> bool:
    """Apply an auto-renewal toggle; returns True when anything changed."""
    if enable:
        assert_terms(grace_period_days, auto_renewal_notice_days)
        if not lease.is_auto_renew:
            assert_can_enable(lease, ledger)

        changed = (not lease.is_auto_renew
                   or lease.grace_period_days != grace_period_days
                   or lease.auto_renewal_notice_days != auto_renewal_notice_days)
        lease.is_auto_renew = True
        lease.grace_period_days = grace_period_days
        lease.auto_renewal_notice_days = auto_renewal_notice_days
        return changed

    assert_can_disable(lease, today)
    changed = bool(lease.is_auto_renew) or lease.grace_period_days is not None \
        or lease.auto_renewal_notice_days is not None
    lease.is_auto_renew = False
    lease.grace_period_days = None
    lease.auto_renewal_notice_days = None
    return changed


def should_auto_renew(lease, today: Optional[date] = None) -> bool:
    if not lease.is_auto_renew or not lease.auto_renewal_notice_days:
        return False
    if LeaseStatus(lease.status) != LeaseStatus.active:
        return False
    if lease.renewed_to_id is not None:
        return False
    return (today or date.today()) >= last_cancellation_date(lease)


def renewal_terms(lease) -> dict:
    """Field values for the lease continuing ``lease`` into its next period."""
    start_date, end_date = next_period(lease.end_date, lease.payment_cycle)
    return {
        "org_id": lease.org_id,
        "tenant_id": lease.tenant_id,
        "unit_id": lease.unit_id,
        "start_date": start_date,
        "end_date": end_date,
        "payment_cycle": lease.payment_cycle,
        "rent_amount": lease.rent_amount,
        "grace_period_days": lease.grace_period_days,
        "is_auto_renew": lease.is_auto_renew,
        "auto_renewal_notice_days": lease.auto_renewal_notice_days,
        "deposit_amount": lease.deposit_amount,
        "deposit_status": DepositStatus.held if lease.deposit_amount is not None else None,
        "status": LeaseStatus.draft,
    }
