"""Push a markdown summary of the current assignments into a GitHub README.

The README is fetched with its blob ``sha`` and written back with that sha, so
a concurrent edit makes GitHub reject the write (409). Rejections are reported,
never retried.
"""
from __future__ import annotations

import base64
import logging
import re
import threading
from typing import Iterable, Optional

import httpx

from teamdocs.client.cache import SnapshotCache
from teamdocs.client.models import Assignment
from teamdocs.client.settings import ClientSettings, get_client_settings
from teamdocs.client.state import NotificationLevel, TrackerController
from teamdocs.models.enums import AssignmentCategory, AssignmentStatus

logger = logging.getLogger(__name__)

SECTION_TITLES = {
    AssignmentCategory.CORE_JAVA: "Core Java Topics",
    AssignmentCategory.BACKEND: "Backend Technologies",
    AssignmentCategory.FRONTEND: "Frontend Technologies",
}

STATUS_EMOJI = {
    AssignmentStatus.PENDING: "⏳",
    AssignmentStatus.IN_PROGRESS: "🔄",
    AssignmentStatus.REVIEW: "👀",
    AssignmentStatus.COMPLETED: "✅",
}

COMMIT_MESSAGE = "🔄 Auto-update assignments from team docs tracker"


class SyncError(RuntimeError):
    def __init__(self, message: str, status_code: int = 0) -> None:
        super().__init__(message)
        self.status_code = status_code


def build_table(title: str, assignments: Iterable[Assignment]) -> str:
    lines = [
        f"### {title}",
        "",
        "| Topic | Assigned To | Status | Due Date |",
        "| ----- | ----------- | ------ | -------- |",
    ]
    for a in assignments:
        emoji = STATUS_EMOJI.get(a.status, STATUS_EMOJI[AssignmentStatus.PENDING])
        due = f"{a.due_date:%b} {a.due_date.day}"
        lines.append(f"| {a.topic} | {a.assignee} | {emoji} {str(a.status).replace('-', ' ')} | {due} |")
    return "\n".join(lines) + "\n"


def replace_section(content: str, title: str, table: str) -> str:
    """Replace ``### <title>`` up to the next ``###`` heading (or end of file).

    Content without the heading is returned unchanged.
    """
    pattern = re.compile(rf"### {re.escape(title)}[\s\S]*?(?=###|\Z)")
    return pattern.sub(lambda _match: table + "\n", content)


def render_readme(content: str, assignments: Iterable[Assignment]) -> str:
    grouped: dict[AssignmentCategory, list[Assignment]] = {category: [] for category in SECTION_TITLES}
    for a in assignments:
        if a.category in grouped:
            grouped[a.category].append(a)
    for category, title in SECTION_TITLES.items():
        content = replace_section(content, title, build_table(title, grouped[category]))
    return content


class ReadmeSync:
    def __init__(
        self,
        controller: TrackerController,
        client_settings: Optional[ClientSettings] = None,
        *,
        cache: Optional[SnapshotCache] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.controller = controller
        self.settings = client_settings or get_client_settings()
        self.cache = cache or controller.cache
        self._transport = transport
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def token(self) -> Optional[str]:
        return self.settings.github_token or self.cache.load_token()

    @property
    def contents_url(self) -> str:
        return (
            f"{self.settings.github_api_url}/repos/{self.settings.github_owner}/"
            f"{self.settings.github_repo}/contents/{self.settings.github_readme_path}"
        )

    def save_token(self, token: str) -> None:
        self.cache.save_token(token)
        self.controller.notify(NotificationLevel.SUCCESS, "GitHub token saved successfully!")

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"token {self.token}",
            "Accept": "application/vnd.github.v3+json",
        }

    def _request(self, method: str, *, body: Optional[dict] = None) -> dict:
        try:
            with httpx.Client(timeout=self.settings.http_timeout_seconds, transport=self._transport) as client:
                response = client.request(method, self.contents_url, headers=self._headers(), json=body)
        except httpx.HTTPError as exc:
            raise SyncError(f"GitHub unreachable: {exc}") from exc
        if response.status_code >= 400:
            logger.warning(
                "readme_sync_request_failed status=%s method=%s path=%s",
                response.status_code,
                method,
                self.settings.github_readme_path,
            )
            action = "get" if method == "GET" else "update"
            raise SyncError(
                f"Failed to {action} file: {response.reason_phrase or response.status_code}",
                status_code=response.status_code,
            )
        return response.json()

    def fetch_readme(self) -> tuple[str, str]:
        payload = self._request("GET")
        content = base64.b64decode(payload.get("content", "")).decode("utf-8")
        return content, payload["sha"]

    def push_readme(self, content: str, sha: str) -> dict:
        body = {
            "message": COMMIT_MESSAGE,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "sha": sha,
        }
        return self._request("PUT", body=body)

    def sync(self, *, auto: bool = False) -> bool:
        if not self.token:
            self.controller.notify(NotificationLevel.ERROR, "Please set your GitHub token first")
            return False
        if not auto:
            self.controller.notify(NotificationLevel.INFO, "Syncing with GitHub...")
        try:
            current, sha = self.fetch_readme()
            updated = render_readme(current, self.controller.snapshot.assignments)
            self.push_readme(updated, sha)
        except SyncError as exc:
            logger.warning("readme_sync_failed status=%s error=%s", exc.status_code, exc)
            self.controller.notify(NotificationLevel.ERROR, f"Sync failed: {exc}")
            return False
        logger.info("readme_sync_complete assignments=%s", len(self.controller.snapshot.assignments))
        self.controller.notify(NotificationLevel.SUCCESS, "Successfully synced with GitHub!")
        return True

    def schedule_auto_sync(self) -> None:
        """Restart the debounce timer; the sync runs once the changes settle."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.settings.auto_sync_delay_seconds, self._auto_sync)
            self._timer.daemon = True
            self._timer.start()

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until a scheduled sync has run (the CLI exits otherwise)."""
        timer = self._timer
        if timer is not None:
            timer.join(timeout)

    def _auto_sync(self) -> None:
        with self._lock:
            self._timer = None
        if self.token:
            self.sync(auto=True)

    def attach(self) -> "ReadmeSync":
        self.controller.add_mutation_hook(self.schedule_auto_sync)
        return self
