from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from teamdocs.models.enums import ActivityType
from teamdocs.schemas.base import ORMModel


class ActivityDetails(ORMModel):
    # "from" is a keyword; the wire name is kept via an explicit alias.
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    description: Optional[str] = None


class ActivityCreate(ORMModel):
    type: ActivityType
    actor: int
    actor_name: Optional[str] = Field(default=None, max_length=255)
    target: str = Field(..., min_length=1, max_length=255)
    details: Optional[ActivityDetails] = None
    assignment_id: Optional[int] = None
    team_member_id: Optional[int] = None


class ActivityRead(ORMModel):
    id: int
    type: ActivityType
    actor: int = Field(validation_alias="actor_id")
    actor_name: str
    target: str
    details: Optional[ActivityDetails] = None
    assignment_id: Optional[int] = None
    team_member_id: Optional[int] = None
    created_at: datetime


class TypeCount(ORMModel):
    type: ActivityType
    count: int


class DayCount(ORMModel):
    date: str
    count: int


class ActiveMember(ORMModel):
    actor: int
    actor_name: str
    count: int


class ActivityStats(ORMModel):
    type_distribution: List[TypeCount]
    daily_activity: List[DayCount]
    most_active_members: List[ActiveMember]


class CleanupResult(ORMModel):
    message: str
    deleted_count: int
    days_old: int
