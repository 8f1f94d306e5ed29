from __future__ import annotations

import argparse
import logging
from datetime import date, datetime, time, timedelta, timezone

from sqlalchemy.orm import Session

from teamdocs.client.seed_data import DEMO_ASSIGNMENTS, DEMO_MEMBERS
from teamdocs.core.logging import configure_logging
from teamdocs.core.settings import settings
from teamdocs.db.base import Base
from teamdocs.db.session import engine, session_scope
from teamdocs.models.enums import AssignmentCategory, AssignmentPriority, AssignmentStatus, MemberRole
from teamdocs.models.team_member import TeamMember
from teamdocs.schemas.assignment import AssignmentCreate
from teamdocs.schemas.team_member import TeamMemberCreate
from teamdocs.services.assignments import change_status, create_assignment
from teamdocs.services.team_members import create_member

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Seed the team docs database with demo data")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate all tables before seeding")
    return parser.parse_args()


def reset_db() -> None:
    if settings.environment == "production":
        raise RuntimeError("Refusing to reset the database in production.")
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def seed_demo_data(db: Session, *, today: date | None = None) -> dict[str, int]:
    """Create the demo team and assignments through the regular services.

    Going through the services keeps counters and the activity log consistent with
    what the API would have produced.
    """
    today = today or datetime.now(timezone.utc).date()
    members: dict[int, TeamMember] = {}
    for demo in DEMO_MEMBERS:
        member = create_member(
            db,
            TeamMemberCreate(name=demo["name"], email=demo["email"], role=MemberRole(demo["role"]), skills=demo["skills"]),
        )
        member.join_date = datetime.combine(today + timedelta(days=demo["join_offset_days"]), time.min, tzinfo=timezone.utc)
        members[demo["id"]] = member

    for demo in DEMO_ASSIGNMENTS:
        due = datetime.combine(today + timedelta(days=demo["due_offset_days"]), time(17, 0), tzinfo=timezone.utc)
        assignment = create_assignment(
            db,
            AssignmentCreate(
                topic=demo["topic"],
                category=AssignmentCategory(demo["category"]),
                assignee_id=members[demo["assignee_id"]].id,
                due_date=due,
                priority=AssignmentPriority(demo["priority"]),
                description=demo["description"],
                progress=demo["progress"] if demo["status"] != "completed" else 0,
            ),
        )
        status = AssignmentStatus(demo["status"])
        if status != AssignmentStatus.PENDING:
            change_status(db, assignment, status, progress=demo["progress"])

    db.flush()
    return {"members": len(members), "assignments": len(DEMO_ASSIGNMENTS)}


def main() -> None:
    configure_logging(level=settings.log_level, fmt=settings.log_format)
    args = parse_args()
    if args.reset:
        reset_db()
    else:
        Base.metadata.create_all(bind=engine)

    with session_scope() as db:
        first_email = DEMO_MEMBERS[0]["email"]
        if db.query(TeamMember).filter(TeamMember.email == first_email).first() and not args.reset:
            print("Seed appears to have already run. Use --reset to reseed.")
            return

        counts = seed_demo_data(db)
        logger.info("seed_complete members=%s assignments=%s", counts["members"], counts["assignments"])
        print("Seed complete.")


if __name__ == "__main__":
    main()
