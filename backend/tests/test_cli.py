from __future__ import annotations

import base64
import io
import json
from datetime import date

import httpx
import pytest

from teamdocs.client import cli, seed_data
from teamdocs.client.settings import get_client_settings

OFFLINE_API = 'http://127.0.0.1:9/api'
API = 'http://tracker.test/api'
TODAY = date(2030, 6, 1)


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setenv('TEAMDOCS_CACHE_DIR', str(tmp_path / 'cache'))
    monkeypatch.delenv('TEAMDOCS_GITHUB_TOKEN', raising=False)
    get_client_settings.cache_clear()
    yield
    get_client_settings.cache_clear()


def test_team_command_falls_back_to_seed(capsys):
    out = io.StringIO()
    assert cli.main(['--api-url', OFFLINE_API, 'team'], out=out) == 0

    assert '(MJ) Mike Johnson - lead' in out.getvalue()
    err = capsys.readouterr().err
    assert 'Failed to load data from server' in err
    assert 'Showing seed data' in err


def test_docs_command_needs_no_server():
    out = io.StringIO()
    assert cli.main(['docs'], out=out) == 0
    assert 'docs/core-java/oop.md' in out.getvalue()


def test_export_writes_json(tmp_path):
    target = tmp_path / 'export.json'
    out = io.StringIO()
    assert cli.main(['--api-url', OFFLINE_API, 'export', '--output', str(target)], out=out) == 0

    payload = json.loads(target.read_text(encoding='utf-8'))
    assert len(payload['assignments']) == 4
    assert 'core-java' in payload['documentation']
    assert 'exportDate' in payload


def test_status_command_reports_failure_offline():
    assert cli.main(['--api-url', OFFLINE_API, 'status', '1', 'completed'], out=io.StringIO()) == 1


def test_sync_without_token_fails():
    assert cli.main(['--api-url', OFFLINE_API, 'sync-readme'], out=io.StringIO()) == 1


class FakeBackend:
    """Tracker API plus the GitHub contents endpoint, served through one MockTransport."""

    README = '# Docs\n\n### Core Java Topics\n\nold\n\n### Backend Technologies\n\nold\n'

    def __init__(self) -> None:
        self.assignments = seed_data.assignment_records(TODAY)
        self.members = seed_data.member_records(TODAY)
        self.requests: list[tuple[str, str, dict]] = []
        self.readme_puts: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else {}
        if request.url.host == 'api.github.com':
            return self._github(request, body)

        path = request.url.path.removeprefix('/api')
        self.requests.append((request.method, path, body))
        parts = path.strip('/').split('/')

        if request.method == 'GET' and path == '/assignments':
            return httpx.Response(200, json=self._page(self.assignments))
        if request.method == 'GET' and path == '/team-members':
            return httpx.Response(200, json=self._page(self.members))
        if request.method == 'GET' and path == '/activity/recent':
            return httpx.Response(200, json=[])
        if request.method == 'GET' and path == '/analytics/overview':
            return httpx.Response(200, json=self._overview())

        if parts[0] == 'assignments':
            return self._assignments(request.method, parts, body)
        if parts[0] == 'team-members':
            return self._members(request.method, parts, body)
        return httpx.Response(404, json={'detail': 'Not found'})

    def _assignments(self, method, parts, body):
        if method == 'POST' and len(parts) == 1:
            owner = next((m for m in self.members if m['id'] == body['assigneeId']), None)
            if owner is None:
                return httpx.Response(400, json={'detail': 'Assignee not found'})
            created = {'status': 'pending', **body, 'id': 99, 'assignee': owner['name']}
            self.assignments.append(created)
            return httpx.Response(201, json=created)
        row = next((a for a in self.assignments if a['id'] == int(parts[1])), None)
        if row is None:
            return httpx.Response(404, json={'detail': 'Assignment not found'})
        if method == 'PUT':
            row.update(body)
            return httpx.Response(200, json=row)
        if method == 'DELETE':
            self.assignments.remove(row)
            return httpx.Response(200, json={'message': 'Assignment deleted successfully'})
        if method == 'POST' and parts[2:] == ['notes']:
            return httpx.Response(201, json=row)
        return httpx.Response(405, json={'detail': 'Method not allowed'})

    def _members(self, method, parts, body):
        if method == 'POST':
            created = {'role': 'developer', 'skills': [], **body, 'id': 50, 'assignedTopics': 0, 'completedTopics': 0}
            self.members.append(created)
            return httpx.Response(201, json=created)
        row = next(m for m in self.members if m['id'] == int(parts[1]))
        if method == 'PUT':
            row.update(body)
            return httpx.Response(200, json=row)
        self.members.remove(row)
        return httpx.Response(200, json={'message': 'Team member deactivated successfully'})

    def _github(self, request, body):
        if request.method == 'GET':
            encoded = base64.b64encode(self.README.encode('utf-8')).decode('ascii')
            return httpx.Response(200, json={'content': encoded, 'sha': 'sha-1'})
        self.readme_puts.append(base64.b64decode(body['content']).decode('utf-8'))
        return httpx.Response(200, json={'content': {'sha': 'sha-2'}})

    def _overview(self):
        return {
            'overview': {'totalMembers': 4, 'totalAssignments': 4, 'completionRate': 25.0, 'overdue': 1, 'dueToday': 0},
            'statusDistribution': [{'status': 'in-progress', 'count': 2}, {'status': 'completed', 'count': 1}],
            'categoryDistribution': [{'category': 'core-java', 'count': 2}],
        }

    @staticmethod
    def _page(items):
        return {'items': items, 'totalPages': 1, 'currentPage': 1, 'total': len(items)}

    def writes(self):
        return [(method, path, body) for method, path, body in self.requests if method != 'GET']


def _run(backend: FakeBackend, *argv: str) -> tuple[int, str]:
    out = io.StringIO()
    code = cli.main(['--api-url', API, *argv], out=out, transport=httpx.MockTransport(backend))
    return code, out.getvalue()


def test_assignment_add_posts_payload_and_syncs_readme(monkeypatch):
    monkeypatch.setenv('TEAMDOCS_GITHUB_TOKEN', 'ghp_test')
    monkeypatch.setenv('TEAMDOCS_AUTO_SYNC_DELAY_SECONDS', '0.01')
    backend = FakeBackend()

    code, output = _run(
        backend,
        'assignment', 'add', 'Records and Sealed Types',
        '--category', 'core-java', '--assignee-id', '1', '--due', '2030-06-10', '--priority', 'high',
    )

    assert code == 0
    assert backend.writes() == [
        (
            'POST',
            '/assignments',
            {
                'topic': 'Records and Sealed Types',
                'category': 'core-java',
                'assigneeId': 1,
                'dueDate': '2030-06-10T00:00:00+00:00',
                'priority': 'high',
            },
        )
    ]
    assert '[success] Assignment created successfully!' in output
    assert '[success] Successfully synced with GitHub!' in output
    [readme] = backend.readme_puts
    assert '| Records and Sealed Types | John Smith |' in readme


def test_assignment_edit_sends_only_given_fields():
    backend = FakeBackend()
    code, output = _run(backend, 'assignment', 'edit', '2', '--progress', '60', '--status', 'review')

    assert code == 0
    assert backend.writes() == [('PUT', '/assignments/2', {'status': 'review', 'progress': 60})]
    assert '[success] Assignment updated successfully!' in output


def test_assignment_add_unknown_assignee_fails():
    backend = FakeBackend()
    code, _ = _run(
        backend,
        'assignment', 'add', 'Ghost', '--category', 'backend', '--assignee-id', '42', '--due', '2030-06-10',
    )
    assert code == 1
    assert backend.assignments[-1]['topic'] != 'Ghost'


def test_assignment_delete_and_note_add():
    backend = FakeBackend()
    assert _run(backend, 'assignment', 'delete', '3')[0] == 0
    assert _run(backend, 'note', 'add', '1', 'Covered abstract methods', '--author-id', '3')[0] == 0

    assert backend.writes() == [
        ('DELETE', '/assignments/3', {}),
        ('POST', '/assignments/1/notes', {'authorId': 3, 'content': 'Covered abstract methods'}),
    ]


def test_member_add_edit_delete():
    backend = FakeBackend()
    code, output = _run(
        backend,
        'member', 'add', 'Priya Patel', '--email', 'priya@company.com', '--role', 'trainee',
        '--skills', 'Java, SQL,',
    )
    assert code == 0
    assert '[success] Team member added successfully!' in output

    assert _run(backend, 'member', 'edit', '50', '--name', 'Priya P.')[0] == 0
    assert _run(backend, 'member', 'delete', '50')[0] == 0

    assert backend.writes() == [
        (
            'POST',
            '/team-members',
            {'name': 'Priya Patel', 'email': 'priya@company.com', 'role': 'trainee', 'skills': ['Java', 'SQL']},
        ),
        ('PUT', '/team-members/50', {'name': 'Priya P.'}),
        ('DELETE', '/team-members/50', {}),
    ]


def test_docs_set_persists_locally(tmp_path):
    out = io.StringIO()
    assert cli.main(
        ['docs', 'set', 'backend', 'JPA Basics', '--path', 'docs/backend/jpa.md', '--author', 'Jane Doe'],
        out=out,
    ) == 0
    assert 'JPA Basics [pending] docs/backend/jpa.md (Jane Doe)' in out.getvalue()

    shown = io.StringIO()
    assert cli.main(['docs'], out=shown) == 0
    assert 'JPA Basics' in shown.getvalue()


def test_analytics_view():
    code, output = _run(FakeBackend(), 'analytics')

    assert code == 0
    assert 'Completion rate: 25.0%' in output
    assert 'in progress: 2' in output
    assert 'core java: 2' in output


def test_analytics_offline_fails():
    assert cli.main(['--api-url', OFFLINE_API, 'analytics'], out=io.StringIO()) == 1
