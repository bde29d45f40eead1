"""Per-unit record of the intervals claimed by non-terminal leases.

``OccupancyLedger`` holds the overlap rules; subclasses only decide where
claims come from. ``SqlOccupancyLedger`` reads the live lease rows (the row
*is* the claim, its status change *is* the release) and
``InMemoryOccupancyLedger`` keeps explicit claim lists for batch generation.
"""
import logging
import threading
from bisect import insort
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from ..enum.leasing_enum import CLAIMING_STATUSES
from ..models.leasing.lease_agreements import LeaseAgreement
from ..models.leasing.units import Unit
from .errors import UnavailableInterval

logger = logging.getLogger(__name__)


@dataclass(frozen=True, order=True)
class Claim:
    start_date: date
    end_date: date
    lease_id: Optional[UUID] = field(default=None, compare=False)
    is_auto_renew: bool = field(default=False, compare=False)
    renewed_to_id: Optional[UUID] = field(default=None, compare=False)


def intervals_intersect(s1: date, e1: date, s2: date, e2: date) -> bool:
    # closed intervals; back-to-back periods do not intersect
    return s1 <= e2 and s2 <= e1


class OccupancyLedger:

    def claims(self, unit_id: UUID) -> Iterable[Claim]:
        raise NotImplementedError

    def unit_lock(self, unit_id: UUID):
        """Context manager serializing check-then-claim for one unit."""
        raise NotImplementedError

    def claim(self, unit_id: UUID, lease_id: UUID, start_date: date, end_date: date,
              is_auto_renew: bool = False) -> None:
        raise NotImplementedError

    def release(self, unit_id: UUID, lease_id: UUID) -> None:
        raise NotImplementedError

    def _other_claims(self, unit_id: UUID, exclude_lease_id: Optional[UUID]):
        return [c for c in self.claims(unit_id)
                if exclude_lease_id is None or c.lease_id != exclude_lease_id]

    def find_conflict(
        self,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        exclude_lease_id: Optional[UUID] = None,
    ) -> Optional[Claim]:
        for c in sorted(self._other_claims(unit_id, exclude_lease_id)):
            if intervals_intersect(start_date, end_date, c.start_date, c.end_date):
                return c
        return None

    def is_available(
        self,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        exclude_lease_id: Optional[UUID] = None,
    ) -> bool:
        return self.find_conflict(unit_id, start_date, end_date, exclude_lease_id) is None

    def find_auto_renewal_blocker(
        self,
        unit_id: UUID,
        end_date: date,
        exclude_lease_id: Optional[UUID] = None,
        renewal_of: Optional[UUID] = None,
    ) -> Optional[Claim]:
        """An auto-renewing claim whose rollover would run into the candidate.

        ``renewal_of`` names the predecessor when the candidate is its renewal
        successor; that claim is the one being continued, not a blocker.
        """
        for c in sorted(self._other_claims(unit_id, exclude_lease_id)):
            if renewal_of is not None and c.lease_id == renewal_of:
                continue
            if c.is_auto_renew and c.renewed_to_id is None and c.start_date <= end_date:
                return c
        return None

    def ensure_available(
        self,
        unit_id: UUID,
        start_date: date,
        end_date: date,
        exclude_lease_id: Optional[UUID] = None,
        renewal_of: Optional[UUID] = None,
        block_behind_auto_renewal: bool = False,
    ) -> None:
        conflict = self.find_conflict(
            unit_id, start_date, end_date, exclude_lease_id)
        if conflict is not None:
            logger.warning(
                "Interval %s..%s on unit %s overlaps lease %s",
                start_date, end_date, unit_id, conflict.lease_id)
            raise UnavailableInterval(
                conflict.lease_id, conflict.start_date, conflict.end_date)

        if block_behind_auto_renewal:
            blocker = self.find_auto_renewal_blocker(
                unit_id, end_date, exclude_lease_id, renewal_of)
            if blocker is not None:
                logger.warning(
                    "Interval %s..%s on unit %s is behind auto-renewing lease %s",
                    start_date, end_date, unit_id, blocker.lease_id)
                raise UnavailableInterval(
                    blocker.lease_id, blocker.start_date, blocker.end_date,
                    reason="auto_renewal")

    def has_future_claim(
        self,
        unit_id: UUID,
        after_date: date,
        exclude_lease_id: Optional[UUID] = None,
    ) -> bool:
        return any(c.start_date > after_date
                   for c in self._other_claims(unit_id, exclude_lease_id))


class SqlOccupancyLedger(OccupancyLedger):
    """Ledger backed by ``lease_agreements`` rows of one organization."""

    def __init__(self, db: Session, org_id: UUID):
        self.db = db
        self.org_id = org_id

    def claims(self, unit_id):
        rows = (
            self.db.query(LeaseAgreement)
            .filter(
                LeaseAgreement.org_id == self.org_id,
                LeaseAgreement.unit_id == unit_id,
                LeaseAgreement.status.in_(CLAIMING_STATUSES),
            )
            .order_by(LeaseAgreement.start_date.asc())
            .all()
        )
        return [
            Claim(r.start_date, r.end_date, r.id,
                  bool(r.is_auto_renew), r.renewed_to_id)
            for r in rows
        ]

    @contextmanager
    def unit_lock(self, unit_id):
        # row lock lives until the caller's transaction commits or rolls back
        (
            self.db.query(Unit.id)
            .filter(Unit.id == unit_id, Unit.org_id == self.org_id)
            .with_for_update()
            .first()
        )
        yield

    def claim(self, unit_id, lease_id, start_date, end_date, is_auto_renew=False):
        # the lease row itself is the claim; it only has to be visible to the
        # rest of this transaction
        self.db.flush()

    def release(self, unit_id, lease_id):
        # terminal statuses drop out of claims() on their own
        self.db.flush()


class InMemoryOccupancyLedger(OccupancyLedger):

    def __init__(self):
        self._claims: Dict[UUID, List[Claim]] = {}
        self._locks: Dict[UUID, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def claims(self, unit_id):
        return list(self._claims.get(unit_id, []))

    @contextmanager
    def unit_lock(self, unit_id):
        with self._registry_lock:
            lock = self._locks.setdefault(unit_id, threading.Lock())
        with lock:
            yield

    def claim(self, unit_id, lease_id, start_date, end_date, is_auto_renew=False):
        conflict = self.find_conflict(unit_id, start_date, end_date)
        if conflict is not None:
            raise UnavailableInterval(
                conflict.lease_id, conflict.start_date, conflict.end_date)
        insort(self._claims.setdefault(unit_id, []),
               Claim(start_date, end_date, lease_id, is_auto_renew))

    def claim_if_available(self, unit_id, lease_id, start_date, end_date, is_auto_renew=False) -> bool:
        with self.unit_lock(unit_id):
            if not self.is_available(unit_id, start_date, end_date):
                return False
            self.claim(unit_id, lease_id, start_date, end_date, is_auto_renew)
            return True

    def release(self, unit_id, lease_id):
        self._claims[unit_id] = [
            c for c in self._claims.get(unit_id, []) if c.lease_id != lease_id]

    def mark_renewed(self, unit_id, lease_id, successor_id):
        self._claims[unit_id] = [
            Claim(c.start_date, c.end_date, c.lease_id, c.is_auto_renew, successor_id)
            if c.lease_id == lease_id else c
            for c in self._claims.get(unit_id, [])
        ]
