from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional
from uuid import UUID

from ..enum.leasing_enum import LeaseStatus
from .errors import IllegalTransition
from .period_calculator import ONE_DAY


@dataclass(frozen=True)
class LeaseLink:
    id: UUID
    start_date: date
    end_date: date
    status: LeaseStatus


def project(lease) -> Optional[LeaseLink]:
    if lease is None:
        return None
    return LeaseLink(lease.id, lease.start_date, lease.end_date, LeaseStatus(lease.status))


def link(predecessor, successor, load: Optional[Callable[[UUID], object]] = None) -> None:
    """Join two leases as a renewal, setting both directions together."""
    if predecessor.unit_id != successor.unit_id:
        raise IllegalTransition(
            "renewal_unit_mismatch", "A renewal must be on the same unit")
    if predecessor.renewed_to_id is not None:
        raise IllegalTransition(
            "renewal_exists", "This lease has already been renewed")
    if successor.renewed_from_id is not None:
        raise IllegalTransition(
            "renewal_exists", "The renewal is already linked to another lease")
    if successor.start_date != predecessor.end_date + ONE_DAY:
        raise IllegalTransition(
            "renewal_not_adjacent",
            "A renewal must start the day after its predecessor ends")
    if load is not None and successor.id in {l.id for l in walk(predecessor, load)}:
        raise IllegalTransition(
            "renewal_cycle", "Linking these leases would create a cycle")

    successor.renewed_from_id = predecessor.id
    predecessor.renewed_to_id = successor.id


def walk(lease, load: Callable[[UUID], object]) -> List[object]:
    """Whole chain containing ``lease``, oldest first."""
    head = lease
    seen = {head.id}
    while head.renewed_from_id is not None:
        prev = load(head.renewed_from_id)
        if prev is None or prev.id in seen:
            break
        seen.add(prev.id)
        head = prev

    chain = [head]
    while chain[-1].renewed_to_id is not None:
        nxt = load(chain[-1].renewed_to_id)
        if nxt is None or nxt.id in {l.id for l in chain}:
            break
        chain.append(nxt)
    return chain


def unlink(predecessor, successor) -> None:
    if predecessor.renewed_to_id != successor.id or successor.renewed_from_id != predecessor.id:
        raise IllegalTransition(
            "renewal_not_linked", "These leases are not linked as a renewal")
    predecessor.renewed_to_id = None
    successor.renewed_from_id = None
