"""Client-side state: the snapshot, where it came from, and the mutations on it.

Every mutating action is a sequential call-then-update chain: the API is called
first, and only a successful response changes the local snapshot. Failures
become notifications instead of exceptions so callers can keep rendering.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import ValidationError

from teamdocs.client import seed_data
from teamdocs.client.api import ApiError, TrackerAPI
from teamdocs.client.cache import SnapshotCache
from teamdocs.client.models import Activity, Assignment, DocEntry, Member
from teamdocs.models.enums import AssignmentStatus

logger = logging.getLogger(__name__)


class DataSource(StrEnum):
    REMOTE = "remote"
    CACHED_FALLBACK = "cached-fallback"
    SEED = "seed"


class NotificationLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class View(StrEnum):
    DASHBOARD = "dashboard"
    ASSIGNMENTS = "assignments"
    TEAM = "team"
    DOCUMENTATION = "documentation"


@dataclass
class Notification:
    level: NotificationLevel
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class Snapshot:
    assignments: List[Assignment]
    members: List[Member]
    source: DataSource
    activity: List[Activity] = field(default_factory=list)
    loaded_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def assignment(self, assignment_id: int) -> Optional[Assignment]:
        return next((a for a in self.assignments if a.id == assignment_id), None)

    def member(self, member_id: int) -> Optional[Member]:
        return next((m for m in self.members if m.id == member_id), None)

    def to_cache(self) -> Dict[str, Any]:
        return {
            "assignments": [a.to_wire() for a in self.assignments],
            "members": [m.to_wire() for m in self.members],
            "activity": [a.to_wire() for a in self.activity],
            "savedAt": self.loaded_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], source: DataSource) -> "Snapshot":
        return cls(
            assignments=[Assignment.model_validate(item) for item in payload.get("assignments", [])],
            members=[Member.model_validate(item) for item in payload.get("members", [])],
            activity=[Activity.model_validate(item) for item in payload.get("activity", [])],
            source=source,
        )

    @classmethod
    def seed(cls) -> "Snapshot":
        return cls.from_payload(
            {"assignments": seed_data.assignment_records(), "members": seed_data.member_records()},
            DataSource.SEED,
        )


class DocumentationTree:
    """Local-only documentation index: category -> title -> entry."""

    def __init__(self, categories: Dict[str, Dict[str, DocEntry]]) -> None:
        self.categories = categories

    @classmethod
    def from_dict(cls, payload: Dict[str, Dict[str, Dict[str, Any]]]) -> "DocumentationTree":
        return cls(
            {
                category: {title: DocEntry.model_validate(entry) for title, entry in docs.items()}
                for category, docs in payload.items()
            }
        )

    def to_dict(self) -> Dict[str, Dict[str, Dict[str, Any]]]:
        return {
            category: {title: entry.to_wire() for title, entry in docs.items()}
            for category, docs in self.categories.items()
        }

    def entry(self, category: str, title: str) -> Optional[DocEntry]:
        return self.categories.get(category, {}).get(title)

    def upsert(self, category: str, title: str, entry: DocEntry) -> None:
        self.categories.setdefault(category, {})[title] = entry


Listener = Callable[[Snapshot], None]

ASSIGNMENT_VIEWS = (View.DASHBOARD, View.ASSIGNMENTS, View.TEAM)
MEMBER_VIEWS = (View.TEAM, View.ASSIGNMENTS)


class TrackerController:
    def __init__(self, api: TrackerAPI, cache: SnapshotCache) -> None:
        self.api = api
        self.cache = cache
        self.snapshot = Snapshot.seed()
        self.documentation = self._load_documentation()
        self.notifications: List[Notification] = []
        # README auto-sync reports from its timer thread.
        self._notifications_lock = threading.Lock()
        self._listeners: Dict[View, List[Listener]] = defaultdict(list)
        self._mutation_hooks: List[Callable[[], None]] = []

    # Wiring

    def subscribe(self, view: View, listener: Listener) -> None:
        self._listeners[view].append(listener)

    def add_mutation_hook(self, hook: Callable[[], None]) -> None:
        """Called after assignment saves and status changes (used for README auto-sync)."""
        self._mutation_hooks.append(hook)

    def notify(self, level: NotificationLevel, message: str) -> Notification:
        notification = Notification(level=level, message=message)
        with self._notifications_lock:
            self.notifications.append(notification)
        return notification

    def drain_notifications(self) -> List[Notification]:
        with self._notifications_lock:
            pending, self.notifications = self.notifications, []
        return pending

    def _render(self, views: Iterable[View]) -> None:
        for view in dict.fromkeys(views):
            for listener in self._listeners.get(view, []):
                listener(self.snapshot)

    def _after_tracked_mutation(self) -> None:
        for hook in self._mutation_hooks:
            hook()

    # Loading

    def load(self) -> Snapshot:
        try:
            members = self.api.list_members()
            assignments = self.api.list_assignments()
        except ApiError as exc:
            logger.warning("snapshot_load_failed status=%s error=%s", exc.status_code, exc.message)
            self.notify(NotificationLevel.ERROR, "Failed to load data from server. Please check your connection.")
            self.snapshot = self._fallback_snapshot()
        else:
            activity = self._load_activity()
            self.snapshot = Snapshot(assignments=assignments, members=members, activity=activity, source=DataSource.REMOTE)
            self._persist()

        self._render(View)
        return self.snapshot

    def _load_activity(self) -> List[Activity]:
        try:
            return self.api.recent_activity()
        except ApiError as exc:
            logger.info("recent_activity_unavailable status=%s", exc.status_code)
            return []

    def _fallback_snapshot(self) -> Snapshot:
        cached = self.cache.load_snapshot()
        if cached:
            try:
                snapshot = Snapshot.from_payload(cached, DataSource.CACHED_FALLBACK)
            except ValidationError as exc:
                logger.warning("cached_snapshot_invalid error=%s", exc)
            else:
                if snapshot.assignments or snapshot.members:
                    return snapshot
        return Snapshot.seed()

    def _load_documentation(self) -> DocumentationTree:
        stored = self.cache.load_documentation()
        if stored:
            try:
                return DocumentationTree.from_dict(stored)
            except ValidationError as exc:
                logger.warning("cached_documentation_invalid error=%s", exc)
        return DocumentationTree.from_dict(seed_data.DEMO_DOCUMENTATION)

    def _persist(self) -> None:
        try:
            self.cache.save_snapshot(self.snapshot.to_cache())
        except OSError as exc:
            logger.warning("snapshot_cache_write_failed error=%s", exc)

    def save_documentation(self, category: str, title: str, entry: DocEntry) -> None:
        self.documentation.upsert(category, title, entry)
        self.cache.save_documentation(self.documentation.to_dict())
        self._render([View.DOCUMENTATION])

    # Local bookkeeping

    def _replace_assignment(self, assignment: Assignment) -> None:
        for index, existing in enumerate(self.snapshot.assignments):
            if existing.id == assignment.id:
                self.snapshot.assignments[index] = assignment
                return
        self.snapshot.assignments.append(assignment)

    def _replace_member(self, member: Member) -> None:
        for index, existing in enumerate(self.snapshot.members):
            if existing.id == member.id:
                self.snapshot.members[index] = member
                return
        self.snapshot.members.append(member)

    def _recount_members(self, member_ids: Iterable[Optional[int]]) -> None:
        # Same full recount the server performs, so the team view is right without a refetch.
        for member_id in {mid for mid in member_ids if mid is not None}:
            member = self.snapshot.member(member_id)
            if member is None:
                continue
            owned = [a for a in self.snapshot.assignments if a.assignee_id == member_id]
            member.assigned_topics = len(owned)
            member.completed_topics = sum(1 for a in owned if a.status == AssignmentStatus.COMPLETED)

    def _failed(self, action: str, exc: ApiError) -> None:
        logger.warning("client_action_failed action=%s status=%s error=%s", action, exc.status_code, exc.message)
        self.notify(NotificationLevel.ERROR, f"Failed to {action}: {exc.message}")

    # Mutations

    def save_assignment(self, payload: Dict[str, Any], assignment_id: Optional[int] = None) -> Optional[Assignment]:
        previous = self.snapshot.assignment(assignment_id) if assignment_id is not None else None
        try:
            if assignment_id is None:
                saved = self.api.create_assignment(payload)
            else:
                saved = self.api.update_assignment(assignment_id, payload)
        except ApiError as exc:
            self._failed("save assignment", exc)
            return None

        self._replace_assignment(saved)
        self._recount_members([saved.assignee_id, previous.assignee_id if previous else None])
        self._persist()
        self.notify(
            NotificationLevel.SUCCESS,
            "Assignment created successfully!" if assignment_id is None else "Assignment updated successfully!",
        )
        self._render(ASSIGNMENT_VIEWS)
        self._after_tracked_mutation()
        return saved

    def update_status(self, assignment_id: int, status: AssignmentStatus | str) -> Optional[Assignment]:
        status = AssignmentStatus(status)
        progress = 100 if status == AssignmentStatus.COMPLETED else None
        try:
            saved = self.api.update_status(assignment_id, status.value, progress)
        except ApiError as exc:
            self._failed("update assignment status", exc)
            return None

        self._replace_assignment(saved)
        self._recount_members([saved.assignee_id])
        self._persist()
        self.notify(NotificationLevel.SUCCESS, "Assignment status updated!")
        self._render(ASSIGNMENT_VIEWS)
        self._after_tracked_mutation()
        return saved

    def delete_assignment(self, assignment_id: int) -> bool:
        existing = self.snapshot.assignment(assignment_id)
        try:
            self.api.delete_assignment(assignment_id)
        except ApiError as exc:
            self._failed("delete assignment", exc)
            return False

        self.snapshot.assignments = [a for a in self.snapshot.assignments if a.id != assignment_id]
        self._recount_members([existing.assignee_id if existing else None])
        self._persist()
        self.notify(NotificationLevel.SUCCESS, "Assignment deleted successfully!")
        self._render(ASSIGNMENT_VIEWS)
        return True

    def add_note(self, assignment_id: int, *, author_id: int, content: str) -> Optional[Assignment]:
        try:
            saved = self.api.add_note(assignment_id, author_id=author_id, content=content)
        except ApiError as exc:
            self._failed("add note", exc)
            return None

        self._replace_assignment(saved)
        self._persist()
        self.notify(NotificationLevel.SUCCESS, "Note added!")
        self._render([View.ASSIGNMENTS])
        return saved

    def save_member(self, payload: Dict[str, Any], member_id: Optional[int] = None) -> Optional[Member]:
        try:
            if member_id is None:
                saved = self.api.create_member(payload)
            else:
                saved = self.api.update_member(member_id, payload)
        except ApiError as exc:
            self._failed("save team member", exc)
            return None

        self._replace_member(saved)
        if member_id is not None:
            for assignment in self.snapshot.assignments:
                if assignment.assignee_id == saved.id:
                    assignment.assignee = saved.name
        self._persist()
        self.notify(
            NotificationLevel.SUCCESS,
            "Team member added successfully!" if member_id is None else "Team member updated successfully!",
        )
        self._render(MEMBER_VIEWS)
        return saved

    def delete_member(self, member_id: int) -> bool:
        try:
            self.api.delete_member(member_id)
        except ApiError as exc:
            self._failed("delete team member", exc)
            return False

        self.snapshot.members = [m for m in self.snapshot.members if m.id != member_id]
        self._persist()
        self.notify(NotificationLevel.SUCCESS, "Team member deleted successfully!")
        self._render(MEMBER_VIEWS)
        return True
