from typing import List, Optional
from uuid import UUID
from sqlalchemy.orm import Session

from ...enum.leasing_enum import ActivityType
from ...models.leasing.activities import Activity


def log_activity(
    db: Session,
    org_id: UUID,
    activity_type: ActivityType,
    lease=None,
    description: str | None = None,
    user_id: str | None = None,
    tenant_id: UUID | None = None,
):
    # joins the caller's transaction; written only if the transition commits
    event = Activity(
        org_id=org_id,
        activity_type=activity_type,
        lease_id=lease.id if lease is not None else None,
        unit_id=lease.unit_id if lease is not None else None,
        tenant_id=tenant_id or (lease.tenant_id if lease is not None else None),
        user_id=user_id,
        description=description,
    )
    db.add(event)
    return event


def get_lease_activities(db: Session, org_id: UUID, lease_id: UUID, limit: Optional[int] = 50) -> List[Activity]:
    return (
        db.query(Activity)
        .filter(Activity.org_id == org_id, Activity.lease_id == lease_id)
        .order_by(Activity.created_at.desc())
        .limit(limit)
        .all()
    )
