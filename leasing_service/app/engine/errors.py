from datetime import date
from typing import Any, Optional
from uuid import UUID

from shared.utils.app_status_code import AppStatusCode


class LeaseEngineError(Exception):
    """Base class for caller-facing lease business errors.

    These are never retried by the engine; the exception handler renders
    them into the shared JSON envelope.
    """

    http_status = 400
    status_code = AppStatusCode.OPERATION_FAILED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"error": type(self).__name__}


class UnavailableInterval(LeaseEngineError):
    http_status = 409
    status_code = AppStatusCode.LEASE_INTERVAL_UNAVAILABLE

    def __init__(
        self,
        conflicting_lease_id: Optional[UUID],
        start_date: date,
        end_date: date,
        reason: str = "overlap",
        message: Optional[str] = None,
    ):
        self.conflicting_lease_id = conflicting_lease_id
        self.start_date = start_date
        self.end_date = end_date
        self.reason = reason
        if message is None:
            if reason == "auto_renewal":
                message = ("Unit has an active auto-renewal lease. The lease must be "
                           "ended before booking future dates.")
            else:
                message = (f"Unit already has an overlapping lease "
                           f"({start_date.isoformat()} - {end_date.isoformat()})")
        super().__init__(message)

    def to_dict(self):
        return {
            **super().to_dict(),
            "reason": self.reason,
            "conflicting_lease_id": str(self.conflicting_lease_id) if self.conflicting_lease_id else None,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }


class InvalidCadenceForUnit(LeaseEngineError):
    status_code = AppStatusCode.LEASE_INVALID_CADENCE

    def __init__(self, unit_id: Optional[UUID], cadence: str):
        self.unit_id = unit_id
        self.cadence = cadence
        super().__init__(
            f"Unit has no {cadence} rate configured; this payment cycle is not available")

    def to_dict(self):
        return {
            **super().to_dict(),
            "unit_id": str(self.unit_id) if self.unit_id else None,
            "cadence": self.cadence,
        }


class IllegalTransition(LeaseEngineError):
    status_code = AppStatusCode.LEASE_ILLEGAL_TRANSITION

    def __init__(self, guard: str, message: str):
        self.guard = guard
        super().__init__(message)

    def to_dict(self):
        return {**super().to_dict(), "guard": self.guard}


class InvalidDateRange(LeaseEngineError):
    http_status = 422
    status_code = AppStatusCode.LEASE_INVALID_DATE_RANGE

    def __init__(self, start_date: date, end_date: date, message: Optional[str] = None):
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(message or "End date must not be before start date")

    def to_dict(self):
        return {
            **super().to_dict(),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
        }
