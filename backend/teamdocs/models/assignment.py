from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Boolean, DateTime, Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamdocs.db.base import Base, CreatedAtMixin, IDMixin, TimestampMixin
from teamdocs.models.enums import (
    AssignmentCategory,
    AssignmentPriority,
    AssignmentStatus,
    enum_values,
)
from teamdocs.utils import timeframe


class Assignment(IDMixin, TimestampMixin, Base):
    __tablename__ = "assignments"
    __table_args__ = (
        Index("ix_assignments_assignee_status", "assignee_id", "status"),
        Index("ix_assignments_category_status", "category", "status"),
        Index("ix_assignments_due_status", "due_date", "status"),
    )

    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    category: Mapped[AssignmentCategory] = mapped_column(
        Enum(AssignmentCategory, name="assignment_category", values_callable=enum_values),
        nullable=False,
    )

    # Denormalised member name kept alongside the reference for list rendering.
    assignee: Mapped[str] = mapped_column(String(255), nullable=False)
    assignee_id: Mapped[int] = mapped_column(ForeignKey("team_members.id"), nullable=False)

    status: Mapped[AssignmentStatus] = mapped_column(
        Enum(AssignmentStatus, name="assignment_status", values_callable=enum_values),
        default=AssignmentStatus.PENDING,
        nullable=False,
        index=True,
    )
    priority: Mapped[AssignmentPriority] = mapped_column(
        Enum(AssignmentPriority, name="assignment_priority", values_callable=enum_values),
        default=AssignmentPriority.MEDIUM,
        nullable=False,
    )
    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    progress: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    estimated_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    actual_hours: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    start_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    completion_date: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    reviewers: Mapped[list[int]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        default=list,
        nullable=False,
    )
    tags: Mapped[list[str]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        default=list,
        nullable=False,
    )
    documentation_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    github_pr_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # Soft delete keeps the activity trail intact.
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)

    assignee_member: Mapped["TeamMember"] = relationship(
        back_populates="assignments",
        foreign_keys=[assignee_id],
    )
    notes: Mapped[List["AssignmentNote"]] = relationship(
        back_populates="assignment",
        cascade="all, delete-orphan",
        order_by="AssignmentNote.created_at",
    )
    activities: Mapped[List["ActivityLog"]] = relationship(back_populates="assignment")

    @property
    def days_remaining(self) -> int:
        if self.status == AssignmentStatus.COMPLETED:
            return 0
        return timeframe.days_remaining(self.due_date)

    @property
    def is_overdue(self) -> bool:
        if self.status == AssignmentStatus.COMPLETED:
            return False
        return self.days_remaining < 0


class AssignmentNote(IDMixin, CreatedAtMixin, Base):
    __tablename__ = "assignment_notes"

    assignment_id: Mapped[int] = mapped_column(
        ForeignKey("assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_id: Mapped[Optional[int]] = mapped_column(ForeignKey("team_members.id"), nullable=True, index=True)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    assignment: Mapped["Assignment"] = relationship(back_populates="notes")
    author: Mapped[Optional["TeamMember"]] = relationship()

    @property
    def author_name(self) -> Optional[str]:
        return self.author.name if self.author else None
