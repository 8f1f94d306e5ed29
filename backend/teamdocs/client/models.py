from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from teamdocs.models.enums import (
    ActivityType,
    AssignmentCategory,
    AssignmentPriority,
    AssignmentStatus,
    MemberRole,
)
from teamdocs.utils.rates import percentage


class WireModel(BaseModel):
    # Mirrors the API's camelCase payloads; fields the client does not use are dropped.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class Member(WireModel):
    id: int
    name: str
    email: str
    role: MemberRole = MemberRole.DEVELOPER
    skills: List[str] = Field(default_factory=list)
    assigned_topics: int = 0
    completed_topics: int = 0
    join_date: Optional[datetime] = None
    is_active: bool = True

    @property
    def completion_rate(self) -> float:
        return percentage(self.completed_topics, self.assigned_topics)

    @property
    def initials(self) -> str:
        return "".join(part[0] for part in self.name.split() if part).upper()


class Assignment(WireModel):
    id: int
    topic: str
    category: AssignmentCategory
    assignee: str
    assignee_id: int
    status: AssignmentStatus = AssignmentStatus.PENDING
    priority: AssignmentPriority = AssignmentPriority.MEDIUM
    due_date: datetime
    description: Optional[str] = None
    progress: int = 0
    completion_date: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Activity(WireModel):
    id: Optional[int] = None
    type: ActivityType
    actor: Optional[int] = None
    actor_name: str
    target: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class DocEntry(WireModel):
    path: str
    status: AssignmentStatus = AssignmentStatus.PENDING
    author: str = ""
