"""Plain-text renderers for the client snapshot.

Each function takes the state it needs and returns a string; nothing here
performs I/O.
"""
from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Any, Dict, List, Optional

from teamdocs.client.models import Activity, Assignment
from teamdocs.client.state import DocumentationTree, Snapshot
from teamdocs.models.enums import ActivityType, AssignmentStatus
from teamdocs.utils.rates import percentage

UPCOMING_WINDOW = timedelta(days=7)
BAR_WIDTH = 20

_ACTIVITY_VERBS = {
    ActivityType.ASSIGNMENT_CREATED: "was assigned",
    ActivityType.ASSIGNMENT_UPDATED: "updated",
    ActivityType.STATUS_CHANGED: "moved",
    ActivityType.MEMBER_ADDED: "joined as",
    ActivityType.MEMBER_UPDATED: "updated profile",
}


def _now(now: Optional[datetime]) -> datetime:
    value = now or datetime.now(timezone.utc)
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def format_date(value: datetime, *, with_year: bool = True) -> str:
    """"Jul 25, 2025" (or "Jul 25" without the year)."""
    text = f"{value:%b} {value.day}"
    return f"{text}, {value.year}" if with_year else text


def humanize_status(status: str) -> str:
    return str(status).replace("-", " ")


def progress_bar(percent: float, width: int = BAR_WIDTH) -> str:
    filled = int(round(width * max(0.0, min(percent, 100.0)) / 100))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def filter_assignments(
    assignments: List[Assignment],
    *,
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Assignment]:
    needle = (search or "").strip().lower()
    return [
        a
        for a in assignments
        if (not category or a.category == category)
        and (not status or a.status == status)
        and (not needle or needle in a.topic.lower() or needle in a.assignee.lower())
    ]


def due_today(snapshot: Snapshot, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> List[Assignment]:
    today = _now(now).astimezone(tz).date()
    return [a for a in snapshot.assignments if _aware(a.due_date).astimezone(tz).date() == today]


def upcoming_deadlines(snapshot: Snapshot, now: Optional[datetime] = None) -> List[Assignment]:
    now = _now(now)
    horizon = now + UPCOMING_WINDOW
    upcoming = [
        a
        for a in snapshot.assignments
        if now < _aware(a.due_date) <= horizon and a.status != AssignmentStatus.COMPLETED
    ]
    return sorted(upcoming, key=lambda a: _aware(a.due_date))


def render_progress(snapshot: Snapshot) -> str:
    statuses = [a.status for a in snapshot.assignments]
    completed = statuses.count(AssignmentStatus.COMPLETED)
    percent = percentage(completed, len(statuses))
    return "\n".join(
        [
            f"Completed: {completed}   In progress: {statuses.count(AssignmentStatus.IN_PROGRESS)}   "
            f"Pending: {statuses.count(AssignmentStatus.PENDING)}",
            f"Overall {progress_bar(percent)} {percent}%",
        ]
    )


def _describe_activity(activity: Activity) -> str:
    details = activity.details or {}
    if activity.type == ActivityType.STATUS_CHANGED and details.get("to"):
        return f'{activity.actor_name} moved "{activity.target}" to {humanize_status(details["to"])}'
    verb = _ACTIVITY_VERBS.get(activity.type, str(activity.type))
    return f'{activity.actor_name} {verb} "{activity.target}"'


def _ago(value: datetime, now: datetime) -> str:
    seconds = max((now - _aware(value)).total_seconds(), 0)
    if seconds < 3600:
        minutes = int(seconds // 60)
        return f"{minutes} minute{'s' if minutes != 1 else ''} ago"
    if seconds < 86400:
        hours = int(seconds // 3600)
        return f"{hours} hour{'s' if hours != 1 else ''} ago"
    days = int(seconds // 86400)
    return f"{days} day{'s' if days != 1 else ''} ago"


def render_dashboard(snapshot: Snapshot, now: Optional[datetime] = None, tz: tzinfo = timezone.utc) -> str:
    now = _now(now)
    lines = [f"Team documentation dashboard ({snapshot.source} data)", "", render_progress(snapshot), ""]

    lines.append("Today's schedule")
    today = due_today(snapshot, now, tz)
    if not today:
        lines.append("  No assignments due today")
    for a in today:
        lines.append(f"  [{a.priority}] {a.topic} - {a.assignee} ({humanize_status(a.status)})")

    lines.extend(["", "Upcoming deadlines"])
    upcoming = upcoming_deadlines(snapshot, now)
    if not upcoming:
        lines.append("  No upcoming deadlines")
    for a in upcoming:
        days_left = math.ceil((_aware(a.due_date) - now).total_seconds() / 86400)
        lines.append(f"  {a.topic} - {days_left} day{'s' if days_left != 1 else ''} left - {a.assignee}")

    lines.extend(["", "Recent activity"])
    if not snapshot.activity:
        lines.append("  No recent activity")
    for activity in snapshot.activity[:10]:
        lines.append(f"  {_describe_activity(activity)} ({_ago(activity.created_at, now)})")
    return "\n".join(lines)


def render_assignments(
    snapshot: Snapshot,
    *,
    category: Optional[str] = None,
    status: Optional[str] = None,
    search: Optional[str] = None,
) -> str:
    assignments = filter_assignments(snapshot.assignments, category=category, status=status, search=search)
    if not assignments:
        return "No assignments found matching your criteria"

    blocks = []
    for a in assignments:
        block = [
            f"#{a.id} {a.topic} [{humanize_status(a.category)}]",
            f"    Assignee: {a.assignee}   Due: {format_date(a.due_date)}   "
            f"Priority: {a.priority}   Status: {humanize_status(a.status)}",
        ]
        if a.description:
            block.append(f"    {a.description}")
        block.append(f"    Progress {progress_bar(a.progress)} {a.progress}%")
        blocks.append("\n".join(block))
    return "\n\n".join(blocks)


def render_team(snapshot: Snapshot) -> str:
    if not snapshot.members:
        return "No team members"
    blocks = []
    for member in snapshot.members:
        skills = ", ".join(member.skills[:3])
        blocks.append(
            "\n".join(
                [
                    f"({member.initials}) {member.name} - {member.role}",
                    f"    Skills: {skills or '-'}",
                    f"    Assigned: {member.assigned_topics}   Completed: {member.completed_topics}   "
                    f"Success: {member.completion_rate}%",
                ]
            )
        )
    return "\n\n".join(blocks)


def render_documentation(tree: DocumentationTree) -> str:
    lines: List[str] = []
    for category, docs in tree.categories.items():
        lines.append(humanize_status(category).title())
        for title, entry in docs.items():
            lines.append(f"  - {title} [{humanize_status(entry.status)}] {entry.path} ({entry.author})")
    return "\n".join(lines) if lines else "No documentation yet"


def render_analytics(overview: Dict[str, Any]) -> str:
    """Render the ``/analytics/overview`` payload."""
    numbers = overview.get("overview", {})
    lines = [
        "Team analytics",
        "",
        f"  Members: {numbers.get('totalMembers', 0)}   Assignments: {numbers.get('totalAssignments', 0)}",
        f"  Completion rate: {numbers.get('completionRate', 0)}%   "
        f"Overdue: {numbers.get('overdue', 0)}   Due today: {numbers.get('dueToday', 0)}",
        "",
        "By status",
    ]
    for row in overview.get("statusDistribution", []):
        lines.append(f"  {humanize_status(row['status'])}: {row['count']}")
    lines.extend(["", "By category"])
    for row in overview.get("categoryDistribution", []):
        lines.append(f"  {humanize_status(row['category'])}: {row['count']}")
    return "\n".join(lines)
