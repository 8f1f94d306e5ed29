from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence

import httpx

from teamdocs.client import views
from teamdocs.client.api import ApiError, TrackerAPI
from teamdocs.client.cache import SnapshotCache
from teamdocs.client.models import DocEntry
from teamdocs.client.readme_sync import ReadmeSync
from teamdocs.client.settings import ClientSettings, get_client_settings
from teamdocs.client.state import DataSource, NotificationLevel, TrackerController
from teamdocs.core.logging import configure_logging
from teamdocs.models.enums import AssignmentCategory, AssignmentPriority, AssignmentStatus, MemberRole

# argparse dest -> API field
ASSIGNMENT_FIELDS = {
    "topic": "topic",
    "category": "category",
    "assignee_id": "assigneeId",
    "due": "dueDate",
    "priority": "priority",
    "status": "status",
    "description": "description",
    "progress": "progress",
}
MEMBER_FIELDS = {
    "name": "name",
    "email": "email",
    "role": "role",
    "skills": "skills",
    "github_username": "githubUsername",
}


def _due_date(value: str) -> str:
    """Accept ``YYYY-MM-DD`` or a full ISO timestamp; naive values are UTC."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.isoformat()


def _skills(value: str) -> list[str]:
    return [skill.strip() for skill in value.split(",") if skill.strip()]


def _add_assignment_fields(parser: argparse.ArgumentParser, *, creating: bool) -> None:
    if creating:
        parser.add_argument("topic")
    else:
        parser.add_argument("--topic")
    parser.add_argument("--category", required=creating, choices=[c.value for c in AssignmentCategory])
    parser.add_argument("--assignee-id", type=int, required=creating)
    parser.add_argument("--due", type=_due_date, required=creating, help="YYYY-MM-DD or ISO timestamp")
    parser.add_argument("--priority", choices=[p.value for p in AssignmentPriority])
    parser.add_argument("--status", choices=[s.value for s in AssignmentStatus])
    parser.add_argument("--description")
    if not creating:
        parser.add_argument("--progress", type=int)


def _add_member_fields(parser: argparse.ArgumentParser, *, creating: bool) -> None:
    if creating:
        parser.add_argument("name")
    else:
        parser.add_argument("--name")
    parser.add_argument("--email", required=creating)
    parser.add_argument("--role", choices=[r.value for r in MemberRole])
    parser.add_argument("--skills", type=_skills, help="Comma-separated")
    parser.add_argument("--github-username")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="teamdocs", description="Team documentation tracker client")
    parser.add_argument("--api-url", help="Override TEAMDOCS_API_BASE_URL")
    parser.add_argument("--log-level", default="WARNING")
    parser.add_argument("--log-format", choices=["text", "json"], default="text")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Progress, today's schedule, deadlines and recent activity")
    sub.add_parser("analytics", help="Server-side overview numbers and distributions")

    assignments = sub.add_parser("assignments", help="List assignments")
    assignments.add_argument("--category", choices=[c.value for c in AssignmentCategory])
    assignments.add_argument("--status", choices=[s.value for s in AssignmentStatus])
    assignments.add_argument("--search")

    assignment = sub.add_parser("assignment", help="Create, edit or delete an assignment")
    assignment_actions = assignment.add_subparsers(dest="action", required=True)
    _add_assignment_fields(assignment_actions.add_parser("add"), creating=True)
    edit_assignment = assignment_actions.add_parser("edit")
    edit_assignment.add_argument("assignment_id", type=int)
    _add_assignment_fields(edit_assignment, creating=False)
    assignment_actions.add_parser("delete").add_argument("assignment_id", type=int)

    note = sub.add_parser("note", help="Attach a note to an assignment")
    note_actions = note.add_subparsers(dest="action", required=True)
    add_note = note_actions.add_parser("add")
    add_note.add_argument("assignment_id", type=int)
    add_note.add_argument("content")
    add_note.add_argument("--author-id", type=int, required=True)

    sub.add_parser("team", help="List team members")

    member = sub.add_parser("member", help="Add, edit or deactivate a team member")
    member_actions = member.add_subparsers(dest="action", required=True)
    _add_member_fields(member_actions.add_parser("add"), creating=True)
    edit_member = member_actions.add_parser("edit")
    edit_member.add_argument("member_id", type=int)
    _add_member_fields(edit_member, creating=False)
    member_actions.add_parser("delete").add_argument("member_id", type=int)

    docs = sub.add_parser("docs", help="Show or edit the documentation tree")
    docs_actions = docs.add_subparsers(dest="action")
    set_doc = docs_actions.add_parser("set", help="Add or replace a documentation entry")
    set_doc.add_argument("category")
    set_doc.add_argument("title")
    set_doc.add_argument("--path", required=True)
    set_doc.add_argument("--status", choices=[s.value for s in AssignmentStatus], default=AssignmentStatus.PENDING.value)
    set_doc.add_argument("--author", default="")

    status = sub.add_parser("status", help="Change an assignment's status")
    status.add_argument("assignment_id", type=int)
    status.add_argument("status", choices=[s.value for s in AssignmentStatus])

    sub.add_parser("sync-readme", help="Push the assignment tables to the GitHub README")

    token = sub.add_parser("save-token", help="Store the GitHub token in the local cache")
    token.add_argument("token")

    export = sub.add_parser("export", help="Write assignments, members and documentation as JSON")
    export.add_argument("--output", type=Path, help="Defaults to documentation-data-<date>.json")
    return parser.parse_args(argv)


def build_controller(
    client_settings: ClientSettings,
    transport: Optional[httpx.BaseTransport] = None,
) -> TrackerController:
    api = TrackerAPI(client_settings, transport=transport)
    return TrackerController(api, SnapshotCache(client_settings.cache_dir))


def _payload(args: argparse.Namespace, fields: Dict[str, str]) -> Dict[str, Any]:
    return {key: getattr(args, dest) for dest, key in fields.items() if getattr(args, dest, None) is not None}


def _print_notifications(controller: TrackerController, out) -> bool:
    failed = False
    for notification in controller.drain_notifications():
        stream = sys.stderr if notification.level == NotificationLevel.ERROR else out
        print(f"[{notification.level}] {notification.message}", file=stream)
        failed = failed or notification.level == NotificationLevel.ERROR
    return failed


def _export(controller: TrackerController, output: Optional[Path]) -> Path:
    now = datetime.now(timezone.utc)
    path = output or Path(f"documentation-data-{now:%Y-%m-%d}.json")
    payload = {
        **controller.snapshot.to_cache(),
        "documentation": controller.documentation.to_dict(),
        "exportDate": now.isoformat(),
    }
    path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    return path


def _analytics(controller: TrackerController, out) -> int:
    try:
        overview = controller.api.analytics_overview()
    except ApiError as exc:
        print(f"[error] Failed to load analytics: {exc.message}", file=sys.stderr)
        return 1
    print(views.render_analytics(overview), file=out)
    return 0


def _mutate(controller: TrackerController, args: argparse.Namespace) -> Any:
    if args.command == "status":
        return controller.update_status(args.assignment_id, args.status)
    if args.command == "assignment":
        if args.action == "add":
            return controller.save_assignment(_payload(args, ASSIGNMENT_FIELDS))
        if args.action == "edit":
            return controller.save_assignment(_payload(args, ASSIGNMENT_FIELDS), args.assignment_id)
        return controller.delete_assignment(args.assignment_id)
    if args.command == "note":
        return controller.add_note(args.assignment_id, author_id=args.author_id, content=args.content)
    if args.action == "add":
        return controller.save_member(_payload(args, MEMBER_FIELDS))
    if args.action == "edit":
        return controller.save_member(_payload(args, MEMBER_FIELDS), args.member_id)
    return controller.delete_member(args.member_id)


def main(
    argv: Optional[Sequence[str]] = None,
    *,
    out=None,
    transport: Optional[httpx.BaseTransport] = None,
) -> int:
    out = out or sys.stdout
    args = parse_args(argv)
    configure_logging(level=args.log_level.upper(), stream=sys.stderr, fmt=args.log_format)

    client_settings = get_client_settings()
    if args.api_url:
        client_settings = client_settings.model_copy(update={"api_base_url": args.api_url.rstrip("/")})
    controller = build_controller(client_settings, transport)
    sync = ReadmeSync(controller, client_settings, transport=transport)

    if args.command == "save-token":
        sync.save_token(args.token)
        _print_notifications(controller, out)
        return 0
    if args.command == "docs":
        if args.action == "set":
            entry = DocEntry(path=args.path, status=args.status, author=args.author)
            controller.save_documentation(args.category, args.title, entry)
        print(views.render_documentation(controller.documentation), file=out)
        return 0
    if args.command == "analytics":
        return _analytics(controller, out)

    snapshot = controller.load()
    _print_notifications(controller, out)
    if snapshot.source != DataSource.REMOTE:
        print(f"[info] Showing {snapshot.source} data", file=sys.stderr)

    renderers: dict[str, Callable[[], str]] = {
        "dashboard": lambda: views.render_dashboard(controller.snapshot),
        "assignments": lambda: views.render_assignments(
            controller.snapshot,
            category=getattr(args, "category", None),
            status=getattr(args, "status", None),
            search=getattr(args, "search", None),
        ),
        "team": lambda: views.render_team(controller.snapshot),
    }
    if args.command in renderers:
        print(renderers[args.command](), file=out)
        return 0

    if args.command == "export":
        path = _export(controller, args.output)
        print(f"Exported to {path}", file=out)
        return 0

    if args.command in ("status", "assignment", "note", "member"):
        # Assignment saves and status changes schedule a README sync.
        if sync.token:
            sync.attach()
        result = _mutate(controller, args)
        if result and sync.token:
            sync.wait()
        return 1 if _print_notifications(controller, out) else 0

    if args.command == "sync-readme":
        ok = sync.sync()
        _print_notifications(controller, out)
        return 0 if ok else 1

    return 2


if __name__ == "__main__":
    raise SystemExit(main())
