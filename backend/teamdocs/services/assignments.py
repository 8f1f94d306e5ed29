from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from teamdocs.db.base import ensure_aware, utcnow
from teamdocs.models.assignment import Assignment, AssignmentNote
from teamdocs.models.enums import ActivityType, AssignmentStatus
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.assignment import AssignmentCreate, AssignmentUpdate
from teamdocs.services.activity import log_activity
from teamdocs.services.counters import recompute_many, recompute_member_counts

logger = logging.getLogger(__name__)


def ensure_member(db: Session, member_id: int, *, message: str = "Team member not found") -> TeamMember:
    member = db.get(TeamMember, member_id)
    if member is None:
        raise ValueError(message)
    return member


def ensure_reviewers(db: Session, reviewer_ids: Iterable[int]) -> list[int]:
    reviewer_ids = list(dict.fromkeys(reviewer_ids))
    if not reviewer_ids:
        return []
    found = set(db.scalars(select(TeamMember.id).where(TeamMember.id.in_(reviewer_ids))))
    missing = [rid for rid in reviewer_ids if rid not in found]
    if missing:
        raise ValueError(f"Reviewer not found: {', '.join(str(rid) for rid in missing)}")
    return reviewer_ids


def get_assignment(db: Session, assignment_id: int) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if assignment is None or assignment.is_deleted:
        raise LookupError("Assignment not found")
    return assignment


def apply_status_transition(assignment: Assignment, new_status: AssignmentStatus, now: Optional[datetime] = None) -> None:
    """Set the status and the lifecycle fields that follow from it.

    startDate and completionDate are only stamped the first time; completed always
    forces progress to 100.
    """
    now = ensure_aware(now or utcnow())
    assignment.status = new_status
    if new_status == AssignmentStatus.IN_PROGRESS and assignment.start_date is None:
        assignment.start_date = now
    if new_status == AssignmentStatus.COMPLETED:
        assignment.progress = 100
        if assignment.completion_date is None:
            assignment.completion_date = now


def _log_status_change(db: Session, assignment: Assignment, previous: AssignmentStatus) -> None:
    log_activity(
        db,
        activity_type=ActivityType.STATUS_CHANGED,
        actor=assignment.assignee_member,
        target=assignment.topic,
        from_value=str(previous),
        to_value=str(assignment.status),
        description=f"Status changed from {previous} to {assignment.status}",
        assignment_id=assignment.id,
    )


def create_assignment(db: Session, payload: AssignmentCreate, *, now: Optional[datetime] = None) -> Assignment:
    assignee = ensure_member(db, payload.assignee_id, message="Assignee not found")
    reviewers = ensure_reviewers(db, payload.reviewers)

    data = payload.model_dump(exclude={"status", "reviewers"})
    data["due_date"] = ensure_aware(data["due_date"])
    assignment = Assignment(**data, assignee=assignee.name, reviewers=reviewers, assignee_member=assignee)
    apply_status_transition(assignment, payload.status, now)
    db.add(assignment)
    db.flush()

    recompute_member_counts(db, assignee.id)
    log_activity(
        db,
        activity_type=ActivityType.ASSIGNMENT_CREATED,
        actor=assignee,
        target=assignment.topic,
        description=f"New assignment created in {assignment.category}",
        assignment_id=assignment.id,
    )
    logger.info("assignment_created category=%s", assignment.category, extra={"assignment_id": assignment.id})
    return assignment


def update_assignment(
    db: Session,
    assignment: Assignment,
    payload: AssignmentUpdate,
    *,
    now: Optional[datetime] = None,
) -> Assignment:
    update_data: Dict[str, Any] = payload.model_dump(exclude_unset=True)
    previous_status = assignment.status
    previous_assignee_id = assignment.assignee_id

    new_assignee_id = update_data.pop("assignee_id", None)
    if new_assignee_id is not None and new_assignee_id != previous_assignee_id:
        new_assignee = ensure_member(db, new_assignee_id, message="New assignee not found")
        assignment.assignee_member = new_assignee
        assignment.assignee_id = new_assignee.id
        assignment.assignee = new_assignee.name

    if "reviewers" in update_data:
        update_data["reviewers"] = ensure_reviewers(db, update_data["reviewers"] or [])

    new_status = update_data.pop("status", None)
    for field, value in update_data.items():
        if field in {"due_date", "start_date", "completion_date"} and value is not None:
            value = ensure_aware(value)
        if field in {"topic", "category", "priority", "due_date", "progress"} and value is None:
            continue
        setattr(assignment, field, value)

    if new_status is not None:
        apply_status_transition(assignment, new_status, now)
    elif assignment.status == AssignmentStatus.COMPLETED:
        assignment.progress = 100

    db.flush()
    recompute_many(db, [previous_assignee_id, assignment.assignee_id])

    if assignment.status != previous_status:
        _log_status_change(db, assignment, previous_status)
    else:
        log_activity(
            db,
            activity_type=ActivityType.ASSIGNMENT_UPDATED,
            actor=assignment.assignee_member,
            target=assignment.topic,
            description="Assignment details updated",
            assignment_id=assignment.id,
        )
    return assignment


def change_status(
    db: Session,
    assignment: Assignment,
    new_status: AssignmentStatus,
    *,
    progress: Optional[int] = None,
    now: Optional[datetime] = None,
) -> Assignment:
    previous_status = assignment.status
    if progress is not None:
        assignment.progress = progress
    apply_status_transition(assignment, new_status, now)
    db.flush()

    recompute_member_counts(db, assignment.assignee_id)
    if assignment.status != previous_status:
        _log_status_change(db, assignment, previous_status)
    logger.info(
        "assignment_status from=%s to=%s",
        previous_status,
        assignment.status,
        extra={"assignment_id": assignment.id},
    )
    return assignment


def soft_delete_assignment(db: Session, assignment: Assignment) -> None:
    assignment.is_deleted = True
    db.flush()
    recompute_member_counts(db, assignment.assignee_id)
    logger.info("assignment_deleted", extra={"assignment_id": assignment.id})


def add_note(db: Session, assignment: Assignment, *, author_id: int, content: str) -> AssignmentNote:
    author = ensure_member(db, author_id, message="Note author not found")
    note = AssignmentNote(assignment=assignment, author=author, content=content.strip())
    db.add(note)
    db.flush()
    return note
