from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamdocs.db.base import Base, IDMixin, TimestampMixin, utcnow
from teamdocs.models.enums import MemberRole, enum_values
from teamdocs.utils.rates import percentage


class TeamMember(IDMixin, TimestampMixin, Base):
    __tablename__ = "team_members"

    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    # Stored lower-cased so the unique index is effectively case-insensitive.
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[MemberRole] = mapped_column(
        Enum(MemberRole, name="member_role", values_callable=enum_values),
        default=MemberRole.DEVELOPER,
        nullable=False,
        index=True,
    )
    skills: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        default=list,
        nullable=False,
    )

    # Derived from assignments by services.counters; never written from request bodies.
    assigned_topics: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    completed_topics: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    join_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False, index=True)

    profile_image: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    github_username: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    last_login_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    assignments: Mapped[List["Assignment"]] = relationship(
        back_populates="assignee_member",
        foreign_keys="Assignment.assignee_id",
    )
    activities: Mapped[List["ActivityLog"]] = relationship(
        back_populates="actor",
        foreign_keys="ActivityLog.actor_id",
    )

    @property
    def completion_rate(self) -> float:
        return percentage(self.completed_topics or 0, self.assigned_topics or 0)
