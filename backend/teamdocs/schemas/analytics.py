from __future__ import annotations

from typing import List

from teamdocs.models.enums import AssignmentCategory, AssignmentPriority, AssignmentStatus, MemberRole
from teamdocs.schemas.audit import ActiveMember, DayCount
from teamdocs.schemas.base import ORMModel


class StatusCount(ORMModel):
    status: AssignmentStatus
    count: int


class CategoryCount(ORMModel):
    category: AssignmentCategory
    count: int


class OverviewNumbers(ORMModel):
    total_members: int
    total_assignments: int
    completion_rate: float
    overdue: int
    due_today: int


class AnalyticsOverview(ORMModel):
    overview: OverviewNumbers
    status_distribution: List[StatusCount]
    category_distribution: List[CategoryCount]


class MemberPerformance(ORMModel):
    member_id: int
    name: str
    role: MemberRole
    total_assignments: int
    completed_assignments: int
    in_progress_assignments: int
    overdue_assignments: int
    completion_rate: float


class DailyStatusCounts(ORMModel):
    date: str
    status_counts: List[StatusCount]


class CategoryProgress(ORMModel):
    category: AssignmentCategory
    total: int
    completed: int
    in_progress: int
    review: int
    pending: int
    completion_rate: float


class CompletionStats(ORMModel):
    avg_completion_days: float
    min_completion_days: float
    max_completion_days: float
    sample_size: int


class Productivity(ORMModel):
    recent_completions: int
    daily_completions: List[DayCount]
    completion_stats: CompletionStats
    most_active_members: List[ActiveMember]


class PriorityStats(ORMModel):
    priority: AssignmentPriority
    count: int
    completed: int
    completion_rate: float
