from decimal import Decimal
import uuid

import pytest

from leasing_service.app.engine import deposit_ledger
from leasing_service.app.engine.errors import IllegalTransition
from leasing_service.app.enum.leasing_enum import DepositStatus, LeaseStatus


@pytest.fixture
def ended_with_deposit(lease_factory):
    return lease_factory(
        status=LeaseStatus.ended,
        deposit_amount=Decimal("1500000"),
        deposit_status=DepositStatus.held,
    )


def test_initial_status():
    assert deposit_ledger.initial_status(Decimal("10")) == DepositStatus.held
    assert deposit_ledger.initial_status(None) is None


@pytest.mark.parametrize("target", [DepositStatus.returned, DepositStatus.forfeited])
def test_disposition_is_one_shot(ended_with_deposit, target):
    assert deposit_ledger.disposition(ended_with_deposit, target) == target

    for again in (DepositStatus.returned, DepositStatus.forfeited):
        with pytest.raises(IllegalTransition) as exc:
            deposit_ledger.disposition(ended_with_deposit, again)
        assert exc.value.guard == "deposit_already_dispositioned"
    assert ended_with_deposit.deposit_status == target


def test_disposition_waits_for_the_lease_to_end(lease_factory):
    lease = lease_factory(status=LeaseStatus.active, deposit_amount=Decimal("10"),
                          deposit_status=DepositStatus.held)
    with pytest.raises(IllegalTransition) as exc:
        deposit_ledger.disposition(lease, DepositStatus.returned)
    assert exc.value.guard == "deposit_not_ended"


def test_disposition_blocked_while_renewal_continues(ended_with_deposit):
    ended_with_deposit.renewed_to_id = uuid.uuid4()
    with pytest.raises(IllegalTransition) as exc:
        deposit_ledger.disposition(ended_with_deposit, DepositStatus.returned)
    assert exc.value.guard == "deposit_renewed"


def test_disposition_requires_a_deposit(lease_factory):
    with pytest.raises(IllegalTransition) as exc:
        deposit_ledger.disposition(lease_factory(status=LeaseStatus.ended), DepositStatus.returned)
    assert exc.value.guard == "deposit_missing"


def test_held_is_not_a_disposition(ended_with_deposit):
    with pytest.raises(IllegalTransition) as exc:
        deposit_ledger.disposition(ended_with_deposit, DepositStatus.held)
    assert exc.value.guard == "deposit_invalid_target"


def test_set_amount_resets_status(lease_factory):
    lease = lease_factory()
    deposit_ledger.set_amount(lease, Decimal("500000"))
    assert lease.deposit_status == DepositStatus.held

    deposit_ledger.set_amount(lease, None)
    assert lease.deposit_amount is None and lease.deposit_status is None

    with pytest.raises(IllegalTransition):
        deposit_ledger.set_amount(lease, Decimal("0"))
