from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from teamdocs.client.models import Activity, Assignment, Member
from teamdocs.client.settings import ClientSettings, get_client_settings

logger = logging.getLogger(__name__)

FETCH_PAGE_SIZE = 500


class ApiError(RuntimeError):
    """A failed API call; ``status_code`` is 0 when the server was never reached."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    detail = payload.get("detail") if isinstance(payload, dict) else None
    if isinstance(detail, str):
        return detail
    if detail is not None:
        return json.dumps(detail, default=str)
    return f"HTTP {response.status_code}"


class TrackerAPI:
    """Thin synchronous wrapper over the tracker REST API."""

    def __init__(
        self,
        client_settings: Optional[ClientSettings] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.settings = client_settings or get_client_settings()
        self.base_url = self.settings.api_base_url
        self.timeout_seconds = self.settings.http_timeout_seconds
        self._transport = transport

    def _request(
        self,
        method: str,
        path: str,
        *,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{path}"
        try:
            with httpx.Client(timeout=self.timeout_seconds, transport=self._transport) as client:
                response = client.request(method=method, url=url, json=body, params=params)
        except httpx.HTTPError as exc:
            logger.warning("tracker_api_unreachable method=%s path=%s error=%s", method, path, exc)
            raise ApiError(0, f"Cannot reach {self.base_url}: {exc}") from exc

        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning(
                "tracker_api_request_failed status=%s method=%s path=%s detail=%s",
                response.status_code,
                method,
                path,
                message,
            )
            raise ApiError(response.status_code, message)
        if not response.content:
            return {}
        return response.json()

    def _fetch_all(self, path: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        items: List[Dict[str, Any]] = []
        page = 1
        while True:
            payload = self._request("GET", path, params={**(params or {}), "page": page, "limit": FETCH_PAGE_SIZE})
            items.extend(payload.get("items", []))
            if page >= int(payload.get("totalPages") or 0):
                return items
            page += 1

    # Assignments

    def list_assignments(self, **filters: Any) -> List[Assignment]:
        params = {key: value for key, value in filters.items() if value is not None}
        return [Assignment.model_validate(item) for item in self._fetch_all("/assignments", params)]

    def create_assignment(self, payload: Dict[str, Any]) -> Assignment:
        return Assignment.model_validate(self._request("POST", "/assignments", body=payload))

    def update_assignment(self, assignment_id: int, payload: Dict[str, Any]) -> Assignment:
        return Assignment.model_validate(self._request("PUT", f"/assignments/{assignment_id}", body=payload))

    def update_status(self, assignment_id: int, status: str, progress: Optional[int] = None) -> Assignment:
        body: Dict[str, Any] = {"status": status}
        if progress is not None:
            body["progress"] = progress
        return Assignment.model_validate(self._request("PATCH", f"/assignments/{assignment_id}/status", body=body))

    def delete_assignment(self, assignment_id: int) -> None:
        self._request("DELETE", f"/assignments/{assignment_id}")

    def add_note(self, assignment_id: int, *, author_id: int, content: str) -> Assignment:
        body = {"authorId": author_id, "content": content}
        return Assignment.model_validate(self._request("POST", f"/assignments/{assignment_id}/notes", body=body))

    # Team members

    def list_members(self, *, is_active: str = "true") -> List[Member]:
        return [Member.model_validate(item) for item in self._fetch_all("/team-members", {"isActive": is_active})]

    def create_member(self, payload: Dict[str, Any]) -> Member:
        return Member.model_validate(self._request("POST", "/team-members", body=payload))

    def update_member(self, member_id: int, payload: Dict[str, Any]) -> Member:
        return Member.model_validate(self._request("PUT", f"/team-members/{member_id}", body=payload))

    def delete_member(self, member_id: int) -> None:
        self._request("DELETE", f"/team-members/{member_id}")

    # Activity and analytics

    def recent_activity(self) -> List[Activity]:
        return [Activity.model_validate(item) for item in self._request("GET", "/activity/recent")]

    def analytics_overview(self) -> Dict[str, Any]:
        return self._request("GET", "/analytics/overview")
