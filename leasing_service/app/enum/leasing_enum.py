from enum import Enum


class PaymentCycle(str, Enum):
    daily = "daily"
    monthly = "monthly"
    annual = "annual"


class LeaseStatus(str, Enum):
    draft = "draft"
    active = "active"
    ended = "ended"
    cancelled = "cancelled"


# statuses that hold a claim on the unit's timeline
CLAIMING_STATUSES = (LeaseStatus.draft, LeaseStatus.active)
TERMINAL_STATUSES = (LeaseStatus.ended, LeaseStatus.cancelled)


class DepositStatus(str, Enum):
    held = "held"
    returned = "returned"
    forfeited = "forfeited"


class PaymentMethod(str, Enum):
    cash = "cash"
    bank_transfer = "bank_transfer"
    virtual_account = "virtual_account"
    qris = "qris"
    manual = "manual"


class TenantStatus(str, Enum):
    new = "new"
    booked = "booked"
    active = "active"
    expired = "expired"


class ActivityType(str, Enum):
    lease_created = "lease_created"
    lease_updated = "lease_updated"
    payment_recorded = "payment_recorded"
    lease_activated = "lease_activated"
    auto_renewal_toggled = "auto_renewal_toggled"
    lease_renewed = "lease_renewed"
    lease_terminated = "lease_terminated"
    lease_cancelled = "lease_cancelled"
    deposit_returned = "deposit_returned"
    deposit_forfeited = "deposit_forfeited"
    tenant_status_changed = "tenant_status_changed"
