from __future__ import annotations

import logging
from typing import Iterable, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from teamdocs.models.assignment import Assignment
from teamdocs.models.enums import AssignmentStatus
from teamdocs.models.team_member import TeamMember

logger = logging.getLogger(__name__)


def recompute_member_counts(db: Session, member_id: int) -> Optional[TeamMember]:
    """Recount assigned/completed topics for a member from live assignment rows.

    A full recount rather than an increment, so running it twice is harmless and a
    missed trigger is repaired by the next one.
    """
    member = db.get(TeamMember, member_id)
    if member is None:
        return None

    # Pending assignment writes must be visible to the counts below.
    db.flush()

    base = (
        select(func.count(Assignment.id))
        .where(Assignment.assignee_id == member_id)
        .where(Assignment.is_deleted.is_(False))
    )
    assigned = db.scalar(base) or 0
    completed = db.scalar(base.where(Assignment.status == AssignmentStatus.COMPLETED)) or 0

    member.assigned_topics = assigned
    member.completed_topics = completed
    db.flush()
    logger.debug(
        "member_counts_recomputed assigned=%s completed=%s",
        assigned,
        completed,
        extra={"member_id": member_id},
    )
    return member


def recompute_many(db: Session, member_ids: Iterable[Optional[int]]) -> None:
    for member_id in sorted({mid for mid in member_ids if mid is not None}):
        recompute_member_counts(db, member_id)
