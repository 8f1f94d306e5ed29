from __future__ import annotations

import json
import threading
from datetime import date, datetime, timezone

import httpx
import pytest

from teamdocs.client import seed_data, views
from teamdocs.client.api import ApiError, TrackerAPI
from teamdocs.client.cache import SnapshotCache
from teamdocs.client.models import DocEntry
from teamdocs.client.settings import ClientSettings
from teamdocs.client.state import DataSource, NotificationLevel, Snapshot, TrackerController, View

TODAY = date(2030, 6, 1)


class FakeTracker:
    """In-memory stand-in for the REST API behind an httpx.MockTransport."""

    def __init__(self) -> None:
        self.assignments = seed_data.assignment_records(TODAY)
        self.members = seed_data.member_records(TODAY)
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with:
            return httpx.Response(self.fail_with, json={'detail': 'boom'})
        path = request.url.path.removeprefix('/api')
        body = json.loads(request.content) if request.content else {}

        if request.method == 'GET' and path == '/assignments':
            return httpx.Response(200, json=self._page(self.assignments))
        if request.method == 'GET' and path == '/team-members':
            return httpx.Response(200, json=self._page(self.members))
        if request.method == 'GET' and path == '/activity/recent':
            return httpx.Response(200, json=[])
        if request.method == 'POST' and path == '/assignments':
            if body['assigneeId'] not in {m['id'] for m in self.members}:
                return httpx.Response(400, json={'detail': 'Assignee not found'})
            owner = next(m for m in self.members if m['id'] == body['assigneeId'])
            created = {**body, 'id': 99, 'assignee': owner['name'], 'status': body.get('status', 'pending')}
            self.assignments.append(created)
            return httpx.Response(201, json=created)
        if request.method == 'PATCH' and path.endswith('/status'):
            assignment_id = int(path.split('/')[2])
            row = next(a for a in self.assignments if a['id'] == assignment_id)
            row.update(body)
            return httpx.Response(200, json=row)
        if request.method == 'DELETE' and path.startswith('/team-members/'):
            return httpx.Response(200, json={'message': 'Team member deactivated successfully'})
        return httpx.Response(404, json={'detail': 'Not found'})

    @staticmethod
    def _page(items):
        return {'items': items, 'totalPages': 1, 'currentPage': 1, 'total': len(items)}


def _controller(tmp_path, handler) -> TrackerController:
    client_settings = ClientSettings(api_base_url='http://tracker.test/api', cache_dir=tmp_path, github_token=None)
    api = TrackerAPI(client_settings, transport=httpx.MockTransport(handler))
    return TrackerController(api, SnapshotCache(tmp_path))


def _unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError('connection refused', request=request)


def test_load_remote_persists_snapshot_and_renders_views(tmp_path):
    fake = FakeTracker()
    controller = _controller(tmp_path, fake)
    rendered = []
    for view in View:
        controller.subscribe(view, lambda snapshot, view=view: rendered.append(view))

    snapshot = controller.load()

    assert snapshot.source == DataSource.REMOTE
    assert len(snapshot.assignments) == 4
    assert set(rendered) == set(View)
    assert SnapshotCache(tmp_path).load_snapshot()['assignments'][0]['topic'] == 'Abstract Classes in Java'
    assert controller.drain_notifications() == []


def test_load_failure_falls_back_to_cache_then_seed(tmp_path):
    controller = _controller(tmp_path, _unreachable)
    snapshot = controller.load()
    assert snapshot.source == DataSource.SEED
    [notification] = controller.drain_notifications()
    assert notification.level == NotificationLevel.ERROR
    assert notification.message == 'Failed to load data from server. Please check your connection.'

    cached = Snapshot.seed()
    cached.assignments = cached.assignments[:1]
    SnapshotCache(tmp_path).save_snapshot(cached.to_cache())

    snapshot = _controller(tmp_path, _unreachable).load()
    assert snapshot.source == DataSource.CACHED_FALLBACK
    assert [a.topic for a in snapshot.assignments] == ['Abstract Classes in Java']


def test_corrupt_cache_is_ignored(tmp_path):
    (tmp_path / 'snapshot.json').write_text('{not json', encoding='utf-8')
    assert _controller(tmp_path, _unreachable).load().source == DataSource.SEED


def test_update_status_completed_sends_full_progress(tmp_path):
    fake = FakeTracker()
    controller = _controller(tmp_path, fake)
    controller.load()
    hooks = []
    controller.add_mutation_hook(lambda: hooks.append('synced'))

    saved = controller.update_status(2, 'completed')

    assert saved is not None
    assert json.loads(fake.requests[-1].content) == {'status': 'completed', 'progress': 100}
    assert controller.snapshot.assignment(2).status == 'completed'
    assert controller.snapshot.member(2).completed_topics == 1
    assert hooks == ['synced']
    assert controller.drain_notifications()[-1].message == 'Assignment status updated!'


def test_failed_save_leaves_snapshot_untouched(tmp_path):
    fake = FakeTracker()
    controller = _controller(tmp_path, fake)
    controller.load()
    hooks = []
    controller.add_mutation_hook(lambda: hooks.append('synced'))

    result = controller.save_assignment(
        {'topic': 'Ghost', 'category': 'backend', 'assigneeId': 42, 'dueDate': '2030-06-05T00:00:00+00:00'}
    )

    assert result is None
    assert len(controller.snapshot.assignments) == 4
    assert hooks == []
    [notification] = controller.drain_notifications()
    assert notification.message == 'Failed to save assignment: Assignee not found'


def test_save_assignment_recounts_assignee(tmp_path):
    controller = _controller(tmp_path, FakeTracker())
    controller.load()

    saved = controller.save_assignment(
        {'topic': 'Records', 'category': 'core-java', 'assigneeId': 1, 'dueDate': '2030-06-05T00:00:00+00:00'}
    )

    assert saved.id == 99
    assert saved.assignee == 'John Smith'
    assert controller.snapshot.member(1).assigned_topics == 2


def test_delete_member_removes_locally(tmp_path):
    controller = _controller(tmp_path, FakeTracker())
    controller.load()
    assert controller.delete_member(4) is True
    assert controller.snapshot.member(4) is None


def test_api_error_carries_status_and_detail(tmp_path):
    fake = FakeTracker()
    fake.fail_with = 500
    api = TrackerAPI(
        ClientSettings(api_base_url='http://tracker.test/api', cache_dir=tmp_path),
        transport=httpx.MockTransport(fake),
    )
    with pytest.raises(ApiError) as excinfo:
        api.list_members()
    assert excinfo.value.status_code == 500
    assert excinfo.value.message == 'boom'


def test_documentation_is_local_only(tmp_path):
    controller = _controller(tmp_path, _unreachable)
    assert controller.documentation.entry('backend', 'Spring Boot Fundamentals').author == 'Mike Johnson'

    controller.save_documentation('backend', 'JPA', DocEntry(path='docs/backend/jpa.md', author='Jane Doe'))

    reloaded = _controller(tmp_path, _unreachable)
    assert reloaded.documentation.entry('backend', 'JPA').path == 'docs/backend/jpa.md'
    assert 'JPA' in views.render_documentation(reloaded.documentation)


def test_dashboard_sections():
    now = datetime(2030, 6, 1, 9, 0, tzinfo=timezone.utc)
    snapshot = Snapshot.from_payload(
        {
            'assignments': seed_data.assignment_records(TODAY),
            'members': seed_data.member_records(TODAY),
        },
        DataSource.SEED,
    )

    text = views.render_dashboard(snapshot, now)

    assert 'Overall' in text and '25.0%' in text
    assert 'Spring Boot Fundamentals - Mike Johnson (review)' in text
    assert 'Abstract Classes in Java - 3 days left - John Smith' in text
    assert 'React.js Fundamentals - ' not in text.split('Upcoming deadlines')[1]
    assert 'No recent activity' in text


def test_filter_assignments_search_is_case_insensitive():
    snapshot = Snapshot.seed()
    found = views.filter_assignments(snapshot.assignments, category='core-java', search='jane')
    assert [a.topic for a in found] == ['Object-Oriented Programming']
    assert views.render_assignments(snapshot, status='completed').startswith('#4 React.js Fundamentals')
    assert views.render_assignments(snapshot, search='nothing matches') == 'No assignments found matching your criteria'


def test_notifications_from_other_threads_are_not_lost(tmp_path):
    controller = _controller(tmp_path, _unreachable)
    drained = []

    def report(worker: int) -> None:
        for n in range(200):
            controller.notify(NotificationLevel.INFO, f'{worker}-{n}')

    workers = [threading.Thread(target=report, args=(worker,)) for worker in range(4)]
    for thread in workers:
        thread.start()
    while any(thread.is_alive() for thread in workers):
        drained.extend(controller.drain_notifications())
    for thread in workers:
        thread.join()
    drained.extend(controller.drain_notifications())

    assert len(drained) == 800
    assert len({n.message for n in drained}) == 800
