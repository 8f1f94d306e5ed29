from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from teamdocs.models.assignment import Assignment
from teamdocs.models.enums import ActivityType
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.team_member import TeamMemberCreate, TeamMemberUpdate
from teamdocs.services.activity import log_activity

logger = logging.getLogger(__name__)


def get_member(db: Session, member_id: int) -> TeamMember:
    # Deactivated members are still returned by direct lookup.
    member = db.get(TeamMember, member_id)
    if member is None:
        raise LookupError("Team member not found")
    return member


def _ensure_email_available(db: Session, email: str, *, exclude_id: Optional[int] = None) -> str:
    normalized = email.strip().lower()
    stmt = select(TeamMember.id).where(func.lower(TeamMember.email) == normalized)
    if exclude_id is not None:
        stmt = stmt.where(TeamMember.id != exclude_id)
    if db.scalar(stmt) is not None:
        raise ValueError("Email already exists")
    return normalized


def create_member(db: Session, payload: TeamMemberCreate) -> TeamMember:
    email = _ensure_email_available(db, str(payload.email))
    member = TeamMember(**payload.model_dump(exclude={"email"}), email=email)
    db.add(member)
    db.flush()

    log_activity(
        db,
        activity_type=ActivityType.MEMBER_ADDED,
        actor=member,
        target=member.name,
        description=f"New {member.role} added to the team",
        team_member_id=member.id,
    )
    logger.info("member_added role=%s", member.role, extra={"member_id": member.id})
    return member


def update_member(db: Session, member: TeamMember, payload: TeamMemberUpdate) -> TeamMember:
    update_data = payload.model_dump(exclude_unset=True)
    if update_data.get("email") is not None:
        update_data["email"] = _ensure_email_available(db, str(update_data["email"]), exclude_id=member.id)

    previous_name = member.name
    for field, value in update_data.items():
        if field in {"name", "email", "role", "skills", "is_active"} and value is None:
            continue
        setattr(member, field, value)
    db.flush()

    if member.name != previous_name:
        db.execute(
            update(Assignment)
            .where(Assignment.assignee_id == member.id)
            .values(assignee=member.name)
            .execution_options(synchronize_session="fetch")
        )

    log_activity(
        db,
        activity_type=ActivityType.MEMBER_UPDATED,
        actor=member,
        target=member.name,
        description="Profile updated",
        team_member_id=member.id,
    )
    return member


def deactivate_member(db: Session, member: TeamMember) -> TeamMember:
    member.is_active = False
    db.flush()
    logger.info("member_deactivated", extra={"member_id": member.id})
    return member
