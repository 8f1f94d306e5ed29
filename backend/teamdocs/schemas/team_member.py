from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import EmailStr, Field, field_validator

from teamdocs.models.enums import AssignmentStatus, MemberRole
from teamdocs.schemas.base import ORMModel


def _clean_skills(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    return [skill.strip() for skill in value if skill and skill.strip()]


class TeamMemberCreate(ORMModel):
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    role: MemberRole = MemberRole.DEVELOPER
    skills: List[str] = Field(default_factory=list)
    github_username: Optional[str] = Field(default=None, max_length=100)
    profile_image: Optional[str] = Field(default=None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value

    @field_validator("skills")
    @classmethod
    def strip_skills(cls, value: List[str]) -> List[str]:
        return _clean_skills(value) or []


class TeamMemberUpdate(ORMModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    role: Optional[MemberRole] = None
    skills: Optional[List[str]] = None
    github_username: Optional[str] = Field(default=None, max_length=100)
    profile_image: Optional[str] = Field(default=None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("skills")
    @classmethod
    def strip_skills(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_skills(value)


class TeamMemberSummary(ORMModel):
    id: int
    name: str
    email: str
    role: MemberRole


class TeamMemberRead(TeamMemberSummary):
    skills: List[str] = Field(default_factory=list)
    assigned_topics: int
    completed_topics: int
    completion_rate: float
    join_date: datetime
    is_active: bool
    profile_image: Optional[str] = None
    github_username: Optional[str] = None
    last_login_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MemberStatusStat(ORMModel):
    status: AssignmentStatus
    count: int
    total_hours: float


class MemberRecentAssignment(ORMModel):
    id: int
    topic: str
    status: AssignmentStatus
    due_date: datetime
    progress: int


class TeamMemberStats(ORMModel):
    member: TeamMemberRead
    stats: List[MemberStatusStat]
    recent_assignments: List[MemberRecentAssignment]
