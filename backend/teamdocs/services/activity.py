from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.orm import Session

from teamdocs.db.base import ensure_aware, utcnow
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import ActivityType
from teamdocs.models.team_member import TeamMember

logger = logging.getLogger(__name__)


def log_activity(
    db: Session,
    *,
    activity_type: ActivityType,
    actor: TeamMember,
    target: str,
    description: Optional[str] = None,
    from_value: Optional[str] = None,
    to_value: Optional[str] = None,
    assignment_id: Optional[int] = None,
    team_member_id: Optional[int] = None,
    actor_name: Optional[str] = None,
) -> ActivityLog:
    """Append an activity entry; the actor name is copied from the member at write time."""
    details = {"from": from_value, "to": to_value, "description": description}
    activity = ActivityLog(
        type=activity_type,
        actor_id=actor.id,
        actor_name=actor_name or actor.name,
        target=target,
        details={key: value for key, value in details.items() if value is not None},
        assignment_id=assignment_id,
        team_member_id=team_member_id,
    )
    db.add(activity)
    db.flush()
    return activity


def cleanup_activity(db: Session, *, days_old: int, now: Optional[datetime] = None) -> int:
    cutoff = ensure_aware(now or utcnow()) - timedelta(days=days_old)
    result = db.execute(delete(ActivityLog).where(ActivityLog.created_at < cutoff))
    deleted = result.rowcount or 0
    logger.info("activity_cleanup days_old=%s deleted=%s", days_old, deleted)
    return deleted
