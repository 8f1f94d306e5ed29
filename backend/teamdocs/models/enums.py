from __future__ import annotations

from enum import StrEnum


class MemberRole(StrEnum):
    DEVELOPER = "developer"
    TRAINEE = "trainee"
    LEAD = "lead"


class AssignmentCategory(StrEnum):
    CORE_JAVA = "core-java"
    BACKEND = "backend"
    FRONTEND = "frontend"


class AssignmentStatus(StrEnum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    REVIEW = "review"
    COMPLETED = "completed"


class AssignmentPriority(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ActivityType(StrEnum):
    ASSIGNMENT_CREATED = "assignment_created"
    ASSIGNMENT_UPDATED = "assignment_updated"
    STATUS_CHANGED = "status_changed"
    MEMBER_ADDED = "member_added"
    MEMBER_UPDATED = "member_updated"


# Ordering used when sorting by priority; the string values do not sort naturally.
PRIORITY_RANK = {
    AssignmentPriority.LOW: 0,
    AssignmentPriority.MEDIUM: 1,
    AssignmentPriority.HIGH: 2,
}


def enum_values(enum_cls) -> list[str]:
    """Persist enum values ("in-progress") rather than member names."""
    return [member.value for member in enum_cls]
