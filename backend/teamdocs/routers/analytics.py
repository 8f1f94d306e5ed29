from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from teamdocs.core.observability import update_assignment_gauges
from teamdocs.core.settings import settings
from teamdocs.db.session import get_db
from teamdocs.models.enums import AssignmentStatus
from teamdocs.schemas.analytics import (
    AnalyticsOverview,
    CategoryProgress,
    DailyStatusCounts,
    MemberPerformance,
    PriorityStats,
    Productivity,
)
from teamdocs.services import analytics

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/overview", response_model=AnalyticsOverview)
def overview(db: Session = Depends(get_db)) -> AnalyticsOverview:
    result = analytics.overview(db, tz=settings.tzinfo)
    completed = sum(s.count for s in result.status_distribution if s.status == AssignmentStatus.COMPLETED)
    update_assignment_gauges(result.overview.total_assignments - completed, result.overview.overdue)
    return result


@router.get("/team-performance", response_model=List[MemberPerformance])
def team_performance(db: Session = Depends(get_db)) -> List[MemberPerformance]:
    return analytics.team_performance(db)


@router.get("/weekly-progress", response_model=List[DailyStatusCounts])
def weekly_progress(db: Session = Depends(get_db)) -> List[DailyStatusCounts]:
    return analytics.weekly_progress(db, tz=settings.tzinfo)


@router.get("/category-progress", response_model=List[CategoryProgress])
def category_progress(db: Session = Depends(get_db)) -> List[CategoryProgress]:
    return analytics.category_progress(db)


@router.get("/productivity", response_model=Productivity)
def productivity(db: Session = Depends(get_db)) -> Productivity:
    return analytics.productivity(db, tz=settings.tzinfo)


@router.get("/priority-distribution", response_model=List[PriorityStats])
def priority_distribution(db: Session = Depends(get_db)) -> List[PriorityStats]:
    return analytics.priority_distribution(db)
