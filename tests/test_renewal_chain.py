from datetime import date

import pytest

from leasing_service.app.engine import renewal_chain
from leasing_service.app.engine.errors import IllegalTransition
from leasing_service.app.enum.leasing_enum import LeaseStatus


@pytest.fixture
def pair(lease_factory):
    first = lease_factory(status=LeaseStatus.active)
    second = lease_factory(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
    return first, second


def test_link_sets_both_directions(pair):
    first, second = pair
    renewal_chain.link(first, second)

    assert first.renewed_to_id == second.id
    assert second.renewed_from_id == first.id


def test_link_requires_adjacency(lease_factory):
    first = lease_factory()
    gap = lease_factory(start_date=date(2025, 2, 2), end_date=date(2025, 3, 1))
    with pytest.raises(IllegalTransition) as exc:
        renewal_chain.link(first, gap)
    assert exc.value.guard == "renewal_not_adjacent"


def test_link_requires_same_unit(pair, lease_factory):
    first, _ = pair
    other = lease_factory(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
    other.unit_id = first.id
    with pytest.raises(IllegalTransition) as exc:
        renewal_chain.link(first, other)
    assert exc.value.guard == "renewal_unit_mismatch"


def test_a_lease_is_renewed_at_most_once(pair, lease_factory):
    first, second = pair
    renewal_chain.link(first, second)
    again = lease_factory(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
    with pytest.raises(IllegalTransition) as exc:
        renewal_chain.link(first, again)
    assert exc.value.guard == "renewal_exists"


def test_walk_returns_whole_chain_oldest_first(lease_factory):
    a = lease_factory(start_date=date(2025, 1, 1), end_date=date(2025, 1, 31))
    b = lease_factory(start_date=date(2025, 2, 1), end_date=date(2025, 2, 28))
    c = lease_factory(start_date=date(2025, 3, 1), end_date=date(2025, 3, 31))
    renewal_chain.link(a, b)
    renewal_chain.link(b, c)
    by_id = {l.id: l for l in (a, b, c)}

    assert renewal_chain.walk(b, by_id.get) == [a, b, c]
    assert renewal_chain.walk(c, by_id.get) == [a, b, c]


def test_unlink_clears_both_directions(pair):
    first, second = pair
    renewal_chain.link(first, second)
    renewal_chain.unlink(first, second)

    assert first.renewed_to_id is None
    assert second.renewed_from_id is None


def test_project(pair):
    first, _ = pair
    link = renewal_chain.project(first)
    assert link.id == first.id and link.status == LeaseStatus.active
    assert renewal_chain.project(None) is None
