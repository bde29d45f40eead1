"""Lease status state machine and field-edit rules.

DRAFT -> ACTIVE (payment recorded), DRAFT -> CANCELLED (deleted),
ACTIVE -> ENDED (terminated, or its end date has passed). ENDED and
CANCELLED are terminal.
"""
import logging
from datetime import date, datetime
from typing import Iterable, Optional

from ..enum.leasing_enum import LeaseStatus, PaymentMethod, TERMINAL_STATUSES
from .errors import IllegalTransition

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS = {
    LeaseStatus.draft: {LeaseStatus.active, LeaseStatus.cancelled},
    LeaseStatus.active: {LeaseStatus.ended},
    LeaseStatus.ended: set(),
    LeaseStatus.cancelled: set(),
}

CORE_TERMS = {"tenant_id", "unit_id", "start_date",
              "end_date", "rent_amount", "deposit_amount"}
AUTO_RENEWAL_FIELDS = {"is_auto_renew",
                       "grace_period_days", "auto_renewal_notice_days"}
PAYMENT_FIELDS = {"paid_at", "payment_method"}
DEPOSIT_FIELDS = {"deposit_status"}

EDITABLE_FIELDS = {
    LeaseStatus.draft: CORE_TERMS | AUTO_RENEWAL_FIELDS | PAYMENT_FIELDS,
    LeaseStatus.active: AUTO_RENEWAL_FIELDS | PAYMENT_FIELDS,
    LeaseStatus.ended: DEPOSIT_FIELDS,
    LeaseStatus.cancelled: set(),
}


def is_terminal(lease) -> bool:
    return LeaseStatus(lease.status) in TERMINAL_STATUSES


def is_expired(lease, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return LeaseStatus(lease.status) == LeaseStatus.active and lease.end_date < today


def effective_status(lease, today: Optional[date] = None) -> LeaseStatus:
    """Status as of ``today`` without persisting anything."""
    if is_expired(lease, today):
        return LeaseStatus.ended
    return LeaseStatus(lease.status)


def assert_transition(lease, target: LeaseStatus) -> None:
    current = LeaseStatus(lease.status)
    if target not in ALLOWED_TRANSITIONS[current]:
        if target == LeaseStatus.cancelled:
            raise IllegalTransition(
                "delete_non_draft", "Only draft leases can be deleted")
        if current in TERMINAL_STATUSES:
            raise IllegalTransition(
                "terminal_status", f"Cannot change status of a {current.value} lease")
        raise IllegalTransition(
            "invalid_status_transition",
            f"Invalid status transition from {current.value} to {LeaseStatus(target).value}")


def transition(lease, target: LeaseStatus) -> LeaseStatus:
    assert_transition(lease, target)
    previous = LeaseStatus(lease.status)
    lease.status = target
    logger.info("Lease %s: %s -> %s", lease.id,
                previous.value, LeaseStatus(target).value)
    return previous


def assert_editable(lease, fields: Iterable[str]) -> None:
    current = LeaseStatus(lease.status)
    fields = set(fields)

    if "payment_cycle" in fields:
        raise IllegalTransition(
            "cadence_fixed", "Payment cycle cannot be changed after creation")

    locked = sorted(fields - EDITABLE_FIELDS[current])
    if locked:
        raise IllegalTransition(
            "field_locked",
            f"Cannot change {', '.join(locked)} on a {current.value} lease")


def record_payment(lease, paid_at: datetime, payment_method: PaymentMethod) -> bool:
    """Set the payment pair; returns True when this activated the lease."""
    current = LeaseStatus(lease.status)
    if current in TERMINAL_STATUSES:
        raise IllegalTransition(
            "payment_on_terminal", f"Cannot mark {current.value} leases as paid")

    lease.paid_at = paid_at
    lease.payment_method = PaymentMethod(payment_method)

    if current == LeaseStatus.draft:
        transition(lease, LeaseStatus.active)
        return True
    return False


def cancel(lease) -> None:
    transition(lease, LeaseStatus.cancelled)


def terminate(lease) -> None:
    transition(lease, LeaseStatus.ended)
