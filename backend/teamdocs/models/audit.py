from __future__ import annotations

from typing import Optional

from sqlalchemy import JSON, Enum, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from teamdocs.db.base import Base, CreatedAtMixin, IDMixin
from teamdocs.models.enums import ActivityType, enum_values


class ActivityLog(IDMixin, CreatedAtMixin, Base):
    """Append-only audit entry. Rows are never updated; cleanup deletes by age."""

    __tablename__ = "activity_logs"
    __table_args__ = (
        Index("ix_activity_logs_actor_created", "actor_id", "created_at"),
        Index("ix_activity_logs_created", "created_at"),
    )

    type: Mapped[ActivityType] = mapped_column(
        Enum(ActivityType, name="activity_type", values_callable=enum_values),
        nullable=False,
        index=True,
    )
    actor_id: Mapped[int] = mapped_column(ForeignKey("team_members.id"), nullable=False)
    actor_name: Mapped[str] = mapped_column(String(255), nullable=False)
    target: Mapped[str] = mapped_column(String(255), nullable=False)
    details: Mapped[Optional[dict]] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"),
        nullable=True,
    )

    # Metadata references; SET NULL keeps the entry if the referenced row is purged.
    assignment_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("assignments.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    team_member_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("team_members.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    actor: Mapped["TeamMember"] = relationship(back_populates="activities", foreign_keys=[actor_id])
    assignment: Mapped[Optional["Assignment"]] = relationship(back_populates="activities")
