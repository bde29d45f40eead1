from typing import Optional

from ..enum.leasing_enum import DepositStatus, LeaseStatus
from .errors import IllegalTransition

DISPOSITIONS = (DepositStatus.returned, DepositStatus.forfeited)


def initial_status(deposit_amount) -> Optional[DepositStatus]:
    return DepositStatus.held if deposit_amount is not None else None


def set_amount(lease, deposit_amount) -> None:
    """Only valid while the lease terms are still editable (DRAFT)."""
    if deposit_amount is not None and deposit_amount <= 0:
        raise IllegalTransition(
            "deposit_amount_invalid", "Deposit amount must be positive")
    lease.deposit_amount = deposit_amount
    lease.deposit_status = initial_status(deposit_amount)


def disposition(lease, target: DepositStatus) -> DepositStatus:
    """HELD -> RETURNED | FORFEITED, once, at a true move-out."""
    target = DepositStatus(target)

    if target not in DISPOSITIONS:
        raise IllegalTransition(
            "deposit_invalid_target", "A deposit can only be returned or forfeited")
    if lease.deposit_amount is None or lease.deposit_status is None:
        raise IllegalTransition(
            "deposit_missing", "This lease has no deposit")
    if DepositStatus(lease.deposit_status) != DepositStatus.held:
        raise IllegalTransition(
            "deposit_already_dispositioned",
            f"Deposit was already {DepositStatus(lease.deposit_status).value}")
    if LeaseStatus(lease.status) != LeaseStatus.ended:
        raise IllegalTransition(
            "deposit_not_ended", "Deposit can only be settled once the lease has ended")
    if lease.renewed_to_id is not None:
        raise IllegalTransition(
            "deposit_renewed", "Deposit stays held while the lease continues through a renewal")

    lease.deposit_status = target
    return target
