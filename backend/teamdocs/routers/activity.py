from __future__ import annotations

from datetime import datetime, timedelta
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from teamdocs.core.settings import settings
from teamdocs.db.base import ensure_aware, utcnow
from teamdocs.db.session import get_db
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import ActivityType
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.audit import ActivityCreate, ActivityRead, ActivityStats, CleanupResult
from teamdocs.schemas.base import Page
from teamdocs.services import analytics
from teamdocs.services.activity import cleanup_activity, log_activity
from teamdocs.utils.pagination import MAX_PAGE_SIZE, paginate
from teamdocs.utils.search import contains_pattern

router = APIRouter(prefix="/api/activity", tags=["activity"])

DEFAULT_ACTIVITY_PAGE_SIZE = 20
RECENT_WINDOW = timedelta(hours=24)
RECENT_LIMIT = 50


def _newest_first(query):
    return query.order_by(ActivityLog.created_at.desc(), ActivityLog.id.desc())


def _page(query, page: int, limit: int) -> Page[ActivityRead]:
    result = paginate(_newest_first(query), page=page, limit=limit)
    result["items"] = [ActivityRead.model_validate(a) for a in result["items"]]
    return Page[ActivityRead](**result)


@router.get("", response_model=Page[ActivityRead])
def list_activity(
    activity_type: Optional[ActivityType] = Query(None, alias="type"),
    actor: Optional[int] = Query(None),
    target: Optional[str] = Query(None, max_length=255),
    date_from: Optional[datetime] = Query(None, alias="dateFrom"),
    date_to: Optional[datetime] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_ACTIVITY_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Page[ActivityRead]:
    query = db.query(ActivityLog)
    if activity_type:
        query = query.filter(ActivityLog.type == activity_type)
    if actor:
        query = query.filter(ActivityLog.actor_id == actor)
    if target and target.strip():
        query = query.filter(ActivityLog.target.ilike(contains_pattern(target.strip()), escape="\\"))
    if date_from:
        query = query.filter(ActivityLog.created_at >= ensure_aware(date_from))
    if date_to:
        query = query.filter(ActivityLog.created_at <= ensure_aware(date_to))
    return _page(query, page, limit)


@router.post("", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
def create_activity(activity_in: ActivityCreate, db: Session = Depends(get_db)) -> ActivityRead:
    actor = db.get(TeamMember, activity_in.actor)
    if actor is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Actor not found")

    details = activity_in.details
    activity = log_activity(
        db,
        activity_type=activity_in.type,
        actor=actor,
        actor_name=activity_in.actor_name,
        target=activity_in.target,
        description=details.description if details else None,
        from_value=details.from_ if details else None,
        to_value=details.to if details else None,
        assignment_id=activity_in.assignment_id,
        team_member_id=activity_in.team_member_id,
    )
    db.commit()
    db.refresh(activity)
    return ActivityRead.model_validate(activity)


@router.get("/recent", response_model=List[ActivityRead])
def recent_activity(db: Session = Depends(get_db)) -> List[ActivityRead]:
    since = utcnow() - RECENT_WINDOW
    entries = _newest_first(db.query(ActivityLog).filter(ActivityLog.created_at >= since)).limit(RECENT_LIMIT).all()
    return [ActivityRead.model_validate(a) for a in entries]


@router.get("/stats", response_model=ActivityStats)
def activity_stats(db: Session = Depends(get_db)) -> ActivityStats:
    return analytics.activity_stats(db, tz=settings.tzinfo)


@router.delete("/cleanup", response_model=CleanupResult)
def cleanup(
    days_old: int = Query(settings.activity_retention_days, ge=0, alias="daysOld"),
    db: Session = Depends(get_db),
) -> CleanupResult:
    deleted = cleanup_activity(db, days_old=days_old)
    db.commit()
    return CleanupResult(
        message=f"Deleted {deleted} activity entries older than {days_old} days",
        deleted_count=deleted,
        days_old=days_old,
    )


@router.get("/member/{member_id}", response_model=Page[ActivityRead])
def member_activity(
    member_id: int,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_ACTIVITY_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
) -> Page[ActivityRead]:
    return _page(db.query(ActivityLog).filter(ActivityLog.actor_id == member_id), page, limit)


@router.get("/timeline/{target}", response_model=List[ActivityRead])
def activity_timeline(target: str, db: Session = Depends(get_db)) -> List[ActivityRead]:
    query = db.query(ActivityLog).filter(ActivityLog.target.ilike(contains_pattern(target), escape="\\"))
    return [ActivityRead.model_validate(a) for a in _newest_first(query).all()]


@router.get("/{activity_id}", response_model=ActivityRead)
def get_activity(activity_id: int, db: Session = Depends(get_db)) -> ActivityRead:
    activity = db.get(ActivityLog, activity_id)
    if activity is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Activity not found")
    return ActivityRead.model_validate(activity)
