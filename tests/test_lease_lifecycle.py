from datetime import date, datetime, timezone

import pytest

from leasing_service.app.engine import lease_lifecycle
from leasing_service.app.engine.errors import IllegalTransition
from leasing_service.app.enum.leasing_enum import LeaseStatus, PaymentMethod

PAID_AT = datetime(2025, 1, 1, 9, 0, tzinfo=timezone.utc)


def test_payment_activates_a_draft(lease_factory):
    lease = lease_factory()

    assert lease_lifecycle.record_payment(lease, PAID_AT, PaymentMethod.cash) is True
    assert lease.status == LeaseStatus.active
    assert lease.paid_at == PAID_AT
    assert lease.payment_method == PaymentMethod.cash


def test_payment_on_active_lease_only_updates_fields(lease_factory):
    lease = lease_factory(status=LeaseStatus.active)

    assert lease_lifecycle.record_payment(lease, PAID_AT, "qris") is False
    assert lease.status == LeaseStatus.active
    assert lease.payment_method == PaymentMethod.qris


@pytest.mark.parametrize("status", [LeaseStatus.ended, LeaseStatus.cancelled])
def test_payment_rejected_on_terminal_lease(lease_factory, status):
    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.record_payment(lease_factory(status=status), PAID_AT, PaymentMethod.cash)
    assert exc.value.guard == "payment_on_terminal"


def test_only_drafts_can_be_cancelled(lease_factory):
    draft = lease_factory()
    lease_lifecycle.cancel(draft)
    assert draft.status == LeaseStatus.cancelled

    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.cancel(lease_factory(status=LeaseStatus.active))
    assert exc.value.guard == "delete_non_draft"


def test_terminate_moves_active_to_ended(lease_factory):
    lease = lease_factory(status=LeaseStatus.active)
    lease_lifecycle.terminate(lease)
    assert lease.status == LeaseStatus.ended


def test_drafts_cannot_be_terminated(lease_factory):
    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.terminate(lease_factory())
    assert exc.value.guard == "invalid_status_transition"


def test_terminal_states_have_no_way_out(lease_factory):
    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.transition(lease_factory(status=LeaseStatus.ended), LeaseStatus.active)
    assert exc.value.guard == "terminal_status"


def test_effective_status_reports_expiry_without_writing(lease_factory):
    lease = lease_factory(status=LeaseStatus.active)

    assert lease_lifecycle.effective_status(lease, date(2025, 1, 31)) == LeaseStatus.active
    assert lease_lifecycle.effective_status(lease, date(2025, 2, 1)) == LeaseStatus.ended
    assert lease.status == LeaseStatus.active


def test_draft_terms_are_editable(lease_factory):
    lease_lifecycle.assert_editable(
        lease_factory(), ["tenant_id", "unit_id", "start_date", "end_date", "rent_amount"])


def test_active_lease_core_terms_are_locked(lease_factory):
    lease = lease_factory(status=LeaseStatus.active)
    lease_lifecycle.assert_editable(lease, ["is_auto_renew", "paid_at"])

    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.assert_editable(lease, ["rent_amount", "start_date"])
    assert exc.value.guard == "field_locked"
    assert "rent_amount" in exc.value.message


def test_ended_lease_only_accepts_deposit_status(lease_factory):
    lease = lease_factory(status=LeaseStatus.ended)
    lease_lifecycle.assert_editable(lease, ["deposit_status"])

    with pytest.raises(IllegalTransition):
        lease_lifecycle.assert_editable(lease, ["is_auto_renew"])


def test_cadence_never_changes(lease_factory):
    with pytest.raises(IllegalTransition) as exc:
        lease_lifecycle.assert_editable(lease_factory(), ["payment_cycle"])
    assert exc.value.guard == "cadence_fixed"
