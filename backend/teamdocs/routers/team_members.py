from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from teamdocs.core.settings import settings
from teamdocs.db.session import get_db
from teamdocs.models.enums import MemberRole
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.base import MessageResponse, Page
from teamdocs.schemas.team_member import TeamMemberCreate, TeamMemberRead, TeamMemberStats, TeamMemberUpdate
from teamdocs.services import analytics
from teamdocs.services import team_members as member_service
from teamdocs.utils.pagination import MAX_PAGE_SIZE, paginate
from teamdocs.utils.search import contains_pattern

router = APIRouter(prefix="/api/team-members", tags=["team-members"])


ActiveFilter = Literal["true", "false", "all"]


def _get_member_or_404(db: Session, member_id: int) -> TeamMember:
    try:
        return member_service.get_member(db, member_id)
    except LookupError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.get("", response_model=Page[TeamMemberRead])
def list_team_members(
    role: Optional[MemberRole] = Query(None),
    is_active: ActiveFilter = Query("true", alias="isActive"),
    search: Optional[str] = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Page[TeamMemberRead]:
    query = db.query(TeamMember)

    if is_active != "all":
        query = query.filter(TeamMember.is_active.is_(is_active == "true"))
    if role:
        query = query.filter(TeamMember.role == role)
    if search and search.strip():
        pattern = contains_pattern(search.strip())
        query = query.filter(
            or_(
                TeamMember.name.ilike(pattern, escape="\\"),
                TeamMember.email.ilike(pattern, escape="\\"),
            )
        )

    query = query.order_by(TeamMember.name.asc(), TeamMember.id.asc())
    result = paginate(query, page=page, limit=limit)
    result["items"] = [TeamMemberRead.model_validate(m) for m in result["items"]]
    return Page[TeamMemberRead](**result)


@router.post("", response_model=TeamMemberRead, status_code=status.HTTP_201_CREATED)
def create_team_member(member_in: TeamMemberCreate, db: Session = Depends(get_db)) -> TeamMemberRead:
    try:
        member = member_service.create_member(db, member_in)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    db.refresh(member)
    return TeamMemberRead.model_validate(member)


@router.get("/{member_id}", response_model=TeamMemberRead)
def get_team_member(member_id: int, db: Session = Depends(get_db)) -> TeamMemberRead:
    return TeamMemberRead.model_validate(_get_member_or_404(db, member_id))


@router.put("/{member_id}", response_model=TeamMemberRead)
def update_team_member(
    member_id: int,
    member_update: TeamMemberUpdate,
    db: Session = Depends(get_db),
) -> TeamMemberRead:
    member = _get_member_or_404(db, member_id)
    try:
        member_service.update_member(db, member, member_update)
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    db.commit()
    db.refresh(member)
    return TeamMemberRead.model_validate(member)


@router.delete("/{member_id}", response_model=MessageResponse)
def deactivate_team_member(member_id: int, db: Session = Depends(get_db)) -> MessageResponse:
    member = _get_member_or_404(db, member_id)
    member_service.deactivate_member(db, member)
    db.commit()
    return MessageResponse(message="Team member deactivated successfully")


@router.get("/{member_id}/stats", response_model=TeamMemberStats)
def get_team_member_stats(member_id: int, db: Session = Depends(get_db)) -> TeamMemberStats:
    member = _get_member_or_404(db, member_id)
    return analytics.member_stats(db, member)
