from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from teamdocs.models.enums import AssignmentCategory, AssignmentPriority, AssignmentStatus
from teamdocs.schemas.base import ORMModel
from teamdocs.schemas.team_member import TeamMemberSummary


def _clean_tags(value: Optional[List[str]]) -> Optional[List[str]]:
    if value is None:
        return None
    return [tag.strip() for tag in value if tag and tag.strip()]


def _clean_topic(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("topic must not be blank")
    return value


class AssignmentCreate(ORMModel):
    topic: str = Field(..., min_length=1, max_length=255)
    category: AssignmentCategory
    assignee_id: int
    due_date: datetime
    status: AssignmentStatus = AssignmentStatus.PENDING
    priority: AssignmentPriority = AssignmentPriority.MEDIUM
    description: Optional[str] = None
    progress: int = Field(default=0, ge=0, le=100)
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    tags: List[str] = Field(default_factory=list)
    reviewers: List[int] = Field(default_factory=list)
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    github_pr_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, value: str) -> str:
        return _clean_topic(value)

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: List[str]) -> List[str]:
        return _clean_tags(value) or []


class AssignmentUpdate(ORMModel):
    topic: Optional[str] = Field(default=None, min_length=1, max_length=255)
    category: Optional[AssignmentCategory] = None
    assignee_id: Optional[int] = None
    status: Optional[AssignmentStatus] = None
    priority: Optional[AssignmentPriority] = None
    due_date: Optional[datetime] = None
    description: Optional[str] = None
    progress: Optional[int] = Field(default=None, ge=0, le=100)
    estimated_hours: Optional[float] = Field(default=None, ge=0)
    actual_hours: Optional[float] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    tags: Optional[List[str]] = None
    reviewers: Optional[List[int]] = None
    documentation_url: Optional[str] = Field(default=None, max_length=500)
    github_pr_url: Optional[str] = Field(default=None, max_length=500)

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return _clean_topic(value)

    @field_validator("tags")
    @classmethod
    def strip_tags(cls, value: Optional[List[str]]) -> Optional[List[str]]:
        return _clean_tags(value)


class AssignmentStatusUpdate(ORMModel):
    status: AssignmentStatus
    progress: Optional[int] = Field(default=None, ge=0, le=100)


class NoteCreate(ORMModel):
    content: str = Field(..., min_length=1)
    author_id: int


class NoteRead(ORMModel):
    id: int
    author_id: Optional[int] = None
    author_name: Optional[str] = None
    content: str
    created_at: datetime


class AssignmentRead(ORMModel):
    id: int
    topic: str
    category: AssignmentCategory
    assignee: str
    assignee_id: int
    assignee_details: Optional[TeamMemberSummary] = Field(default=None, validation_alias="assignee_member")
    status: AssignmentStatus
    priority: AssignmentPriority
    due_date: datetime
    description: Optional[str] = None
    progress: int
    estimated_hours: Optional[float] = None
    actual_hours: Optional[float] = None
    start_date: Optional[datetime] = None
    completion_date: Optional[datetime] = None
    reviewers: List[int] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    documentation_url: Optional[str] = None
    github_pr_url: Optional[str] = None
    notes: List[NoteRead] = Field(default_factory=list)
    days_remaining: int
    is_overdue: bool
    created_at: datetime
    updated_at: datetime
