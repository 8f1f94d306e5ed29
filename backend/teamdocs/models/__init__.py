"""Import all models so SQLAlchemy metadata is fully registered."""

from teamdocs.db.base import Base

from teamdocs.models.assignment import Assignment, AssignmentNote
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import (
    ActivityType,
    AssignmentCategory,
    AssignmentPriority,
    AssignmentStatus,
    MemberRole,
)
from teamdocs.models.team_member import TeamMember

__all__ = [
    "Base",
    "ActivityLog",
    "ActivityType",
    "Assignment",
    "AssignmentCategory",
    "AssignmentNote",
    "AssignmentPriority",
    "AssignmentStatus",
    "MemberRole",
    "TeamMember",
]
