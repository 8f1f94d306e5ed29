"""Read-only rollups over assignments and the activity log.

Counting by a single column is pushed to SQL; anything bucketed by calendar day
is done in Python so day boundaries follow the configured timezone on every
database backend. Every function tolerates empty tables.
"""
from __future__ import annotations

from collections import Counter, defaultdict
from datetime import datetime, timezone, tzinfo
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from teamdocs.db.base import ensure_aware, utcnow
from teamdocs.models.assignment import Assignment
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import AssignmentCategory, AssignmentPriority, AssignmentStatus
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.analytics import (
    AnalyticsOverview,
    CategoryCount,
    CategoryProgress,
    CompletionStats,
    DailyStatusCounts,
    MemberPerformance,
    OverviewNumbers,
    PriorityStats,
    Productivity,
    StatusCount,
)
from teamdocs.schemas.audit import ActiveMember, ActivityStats, DayCount, TypeCount
from teamdocs.schemas.team_member import MemberRecentAssignment, MemberStatusStat, TeamMemberRead, TeamMemberStats
from teamdocs.utils import timeframe
from teamdocs.utils.rates import percentage

WEEK_DAYS = 7
MONTH_DAYS = 30


def _live_assignments(db: Session):
    return db.query(Assignment).filter(Assignment.is_deleted.is_(False))


def _open_assignments(db: Session):
    return _live_assignments(db).filter(Assignment.status != AssignmentStatus.COMPLETED)


def _now(now: Optional[datetime]) -> datetime:
    return ensure_aware(now or utcnow())


def overdue_query(db: Session, now: Optional[datetime] = None):
    return _open_assignments(db).filter(Assignment.due_date < _now(now))


def due_today_query(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc):
    start, end = timeframe.today_bounds(_now(now), tz)
    return _open_assignments(db).filter(Assignment.due_date >= start, Assignment.due_date < end)


def overdue_count(db: Session, now: Optional[datetime] = None) -> int:
    return overdue_query(db, now).count()


def due_today_count(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> int:
    return due_today_query(db, now, tz).count()


def status_distribution(db: Session) -> List[StatusCount]:
    rows = (
        db.query(Assignment.status, func.count(Assignment.id))
        .filter(Assignment.is_deleted.is_(False))
        .group_by(Assignment.status)
        .all()
    )
    return [StatusCount(status=status, count=count) for status, count in sorted(rows, key=lambda r: str(r[0]))]


def category_distribution(db: Session) -> List[CategoryCount]:
    rows = (
        db.query(Assignment.category, func.count(Assignment.id))
        .filter(Assignment.is_deleted.is_(False))
        .group_by(Assignment.category)
        .all()
    )
    return [CategoryCount(category=category, count=count) for category, count in sorted(rows, key=lambda r: str(r[0]))]


def completion_rate(db: Session) -> float:
    total = _live_assignments(db).count()
    completed = _live_assignments(db).filter(Assignment.status == AssignmentStatus.COMPLETED).count()
    return percentage(completed, total)


def overview(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> AnalyticsOverview:
    now = _now(now)
    numbers = OverviewNumbers(
        total_members=db.query(TeamMember).filter(TeamMember.is_active.is_(True)).count(),
        total_assignments=_live_assignments(db).count(),
        completion_rate=completion_rate(db),
        overdue=overdue_count(db, now),
        due_today=due_today_count(db, now, tz),
    )
    return AnalyticsOverview(
        overview=numbers,
        status_distribution=status_distribution(db),
        category_distribution=category_distribution(db),
    )


def team_performance(db: Session, now: Optional[datetime] = None) -> List[MemberPerformance]:
    now = _now(now)
    members = db.query(TeamMember).filter(TeamMember.is_active.is_(True)).all()
    assignments = _live_assignments(db).all()

    by_member: Dict[int, List[Assignment]] = defaultdict(list)
    for assignment in assignments:
        by_member[assignment.assignee_id].append(assignment)

    performance: List[MemberPerformance] = []
    for member in members:
        owned = by_member.get(member.id, [])
        completed = sum(1 for a in owned if a.status == AssignmentStatus.COMPLETED)
        performance.append(
            MemberPerformance(
                member_id=member.id,
                name=member.name,
                role=member.role,
                total_assignments=len(owned),
                completed_assignments=completed,
                in_progress_assignments=sum(1 for a in owned if a.status == AssignmentStatus.IN_PROGRESS),
                overdue_assignments=sum(
                    1
                    for a in owned
                    if a.status != AssignmentStatus.COMPLETED and ensure_aware(a.due_date) < now
                ),
                completion_rate=percentage(completed, len(owned)),
            )
        )

    performance.sort(key=lambda p: (-p.completion_rate, p.name.lower()))
    return performance


def category_progress(db: Session) -> List[CategoryProgress]:
    counts: Dict[AssignmentCategory, Counter] = defaultdict(Counter)
    rows = (
        db.query(Assignment.category, Assignment.status, func.count(Assignment.id))
        .filter(Assignment.is_deleted.is_(False))
        .group_by(Assignment.category, Assignment.status)
        .all()
    )
    for category, status, count in rows:
        counts[category][status] += count

    progress = []
    for category, by_status in counts.items():
        total = sum(by_status.values())
        completed = by_status[AssignmentStatus.COMPLETED]
        progress.append(
            CategoryProgress(
                category=category,
                total=total,
                completed=completed,
                in_progress=by_status[AssignmentStatus.IN_PROGRESS],
                review=by_status[AssignmentStatus.REVIEW],
                pending=by_status[AssignmentStatus.PENDING],
                completion_rate=percentage(completed, total),
            )
        )
    progress.sort(key=lambda p: (-p.completion_rate, str(p.category)))
    return progress


def priority_distribution(db: Session) -> List[PriorityStats]:
    counts: Dict[AssignmentPriority, Counter] = defaultdict(Counter)
    rows = (
        db.query(Assignment.priority, Assignment.status, func.count(Assignment.id))
        .filter(Assignment.is_deleted.is_(False))
        .group_by(Assignment.priority, Assignment.status)
        .all()
    )
    for priority, status, count in rows:
        counts[priority][status] += count

    stats = []
    for priority in AssignmentPriority:
        if priority not in counts:
            continue
        total = sum(counts[priority].values())
        completed = counts[priority][AssignmentStatus.COMPLETED]
        stats.append(
            PriorityStats(
                priority=priority,
                count=total,
                completed=completed,
                completion_rate=percentage(completed, total),
            )
        )
    return stats


def weekly_progress(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> List[DailyStatusCounts]:
    since = timeframe.days_ago(WEEK_DAYS, _now(now))
    rows = (
        db.query(Assignment.updated_at, Assignment.status)
        .filter(Assignment.is_deleted.is_(False), Assignment.updated_at >= since)
        .all()
    )
    buckets: Dict[str, Counter] = defaultdict(Counter)
    for updated_at, status in rows:
        buckets[timeframe.day_key(updated_at, tz)][status] += 1

    return [
        DailyStatusCounts(
            date=day,
            status_counts=[StatusCount(status=s, count=c) for s, c in sorted(buckets[day].items(), key=lambda i: str(i[0]))],
        )
        for day in sorted(buckets)
    ]


def _day_counts(values, tz: tzinfo) -> List[DayCount]:
    counter = Counter(timeframe.day_key(value, tz) for value in values)
    return [DayCount(date=day, count=counter[day]) for day in sorted(counter)]


def daily_activity(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc, days: int = WEEK_DAYS) -> List[DayCount]:
    since = timeframe.days_ago(days, _now(now))
    rows = db.query(ActivityLog.created_at).filter(ActivityLog.created_at >= since).all()
    return _day_counts((row[0] for row in rows), tz)


def _recent_completions_query(db: Session, now: Optional[datetime], days: int):
    since = timeframe.days_ago(days, _now(now))
    return _live_assignments(db).filter(
        Assignment.status == AssignmentStatus.COMPLETED,
        Assignment.completion_date.is_not(None),
        Assignment.completion_date >= since,
    )


def daily_completions(
    db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc, days: int = MONTH_DAYS
) -> List[DayCount]:
    return _day_counts((a.completion_date for a in _recent_completions_query(db, now, days).all()), tz)


def completion_duration_stats(db: Session) -> CompletionStats:
    rows = (
        db.query(Assignment.created_at, Assignment.completion_date)
        .filter(
            Assignment.is_deleted.is_(False),
            Assignment.status == AssignmentStatus.COMPLETED,
            Assignment.completion_date.is_not(None),
        )
        .all()
    )
    durations = [timeframe.elapsed_days(created, completed) for created, completed in rows if created is not None]
    if not durations:
        return CompletionStats(avg_completion_days=0.0, min_completion_days=0.0, max_completion_days=0.0, sample_size=0)
    return CompletionStats(
        avg_completion_days=round(sum(durations) / len(durations), 1),
        min_completion_days=round(min(durations), 1),
        max_completion_days=round(max(durations), 1),
        sample_size=len(durations),
    )


def most_active_members(
    db: Session, now: Optional[datetime] = None, *, days: int = MONTH_DAYS, limit: int = 10
) -> List[ActiveMember]:
    since = timeframe.days_ago(days, _now(now))
    activity_count = func.count(ActivityLog.id)
    rows = (
        db.query(ActivityLog.actor_id, func.max(ActivityLog.actor_name), activity_count)
        .filter(ActivityLog.created_at >= since)
        .group_by(ActivityLog.actor_id)
        .order_by(activity_count.desc(), ActivityLog.actor_id.asc())
        .limit(limit)
        .all()
    )
    return [ActiveMember(actor=actor_id, actor_name=name, count=count) for actor_id, name, count in rows]


def activity_type_distribution(db: Session) -> List[TypeCount]:
    activity_count = func.count(ActivityLog.id)
    rows = (
        db.query(ActivityLog.type, activity_count)
        .group_by(ActivityLog.type)
        .order_by(activity_count.desc())
        .all()
    )
    return [TypeCount(type=activity_type, count=count) for activity_type, count in rows]


def activity_stats(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> ActivityStats:
    return ActivityStats(
        type_distribution=activity_type_distribution(db),
        daily_activity=daily_activity(db, now, tz),
        most_active_members=most_active_members(db, now, limit=10),
    )


def productivity(db: Session, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> Productivity:
    return Productivity(
        recent_completions=_recent_completions_query(db, now, MONTH_DAYS).count(),
        daily_completions=daily_completions(db, now, tz),
        completion_stats=completion_duration_stats(db),
        most_active_members=most_active_members(db, now, limit=5),
    )


def member_stats(db: Session, member: TeamMember) -> TeamMemberStats:
    rows = (
        db.query(Assignment.status, func.count(Assignment.id), func.coalesce(func.sum(Assignment.actual_hours), 0))
        .filter(Assignment.is_deleted.is_(False), Assignment.assignee_id == member.id)
        .group_by(Assignment.status)
        .all()
    )
    stats = [
        MemberStatusStat(status=status, count=count, total_hours=float(hours or 0))
        for status, count, hours in sorted(rows, key=lambda r: str(r[0]))
    ]
    recent = (
        _live_assignments(db)
        .filter(Assignment.assignee_id == member.id)
        .order_by(Assignment.updated_at.desc(), Assignment.id.desc())
        .limit(5)
        .all()
    )
    return TeamMemberStats(
        member=TeamMemberRead.model_validate(member),
        stats=stats,
        recent_assignments=[MemberRecentAssignment.model_validate(a) for a in recent],
    )
