from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from teamdocs.main import app
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import ActivityType


def _iso(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def _member(client, member_id):
    return client.get(f'/api/team-members/{member_id}').json()


def test_create_assignment_denormalises_assignee_and_counts(client, make_member, make_assignment):
    member = make_member('John Smith')
    created = make_assignment(member['id'], 'Abstract Classes', priority='high', progress=10)

    assert created['assignee'] == 'John Smith'
    assert created['assigneeId'] == member['id']
    assert created['status'] == 'pending'
    assert created['assigneeDetails']['name'] == 'John Smith'
    assert created['notes'] == []
    assert _member(client, member['id'])['assignedTopics'] == 1


def test_create_assignment_unknown_assignee_is_rejected(client):
    response = client.post(
        '/api/assignments',
        json={'topic': 'Orphan', 'category': 'backend', 'assigneeId': 999, 'dueDate': _iso(1)},
    )
    assert response.status_code == 400
    assert response.json()['detail'] == 'Assignee not found'


def test_create_assignment_invalid_enum_is_400(client, make_member):
    member = make_member()
    response = client.post(
        '/api/assignments',
        json={'topic': 'X', 'category': 'devops', 'assigneeId': member['id'], 'dueDate': _iso(1)},
    )
    assert response.status_code == 400


def test_create_completed_assignment_sets_progress_and_completion(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], status='completed', progress=20)

    assert created['progress'] == 100
    assert created['completionDate'] is not None
    stored = _member(client, member['id'])
    assert stored['completedTopics'] == 1
    assert stored['completionRate'] == 100.0


def test_status_patch_stamps_lifecycle_and_logs(client, db, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], 'Streams')

    started = client.patch(f'/api/assignments/{created["id"]}/status', json={'status': 'in-progress'})
    assert started.status_code == 200
    start_date = started.json()['startDate']
    assert start_date is not None

    done = client.patch(f'/api/assignments/{created["id"]}', json={'status': 'completed'})
    body = done.json()
    assert body['progress'] == 100
    assert body['completionDate'] is not None
    assert body['startDate'] == start_date

    entries = (
        db.query(ActivityLog)
        .filter(ActivityLog.type == ActivityType.STATUS_CHANGED)
        .order_by(ActivityLog.id)
        .all()
    )
    assert [(e.details['from'], e.details['to']) for e in entries] == [
        ('pending', 'in-progress'),
        ('in-progress', 'completed'),
    ]
    assert _member(client, member['id'])['completedTopics'] == 1


def test_same_status_patch_does_not_log_change(client, db, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'])
    client.patch(f'/api/assignments/{created["id"]}/status', json={'status': 'pending'})

    assert db.query(ActivityLog).filter(ActivityLog.type == ActivityType.STATUS_CHANGED).count() == 0


def test_put_reassigns_and_recounts_both_members(client, db, make_member, make_assignment):
    first = make_member('First')
    second = make_member('Second')
    created = make_assignment(first['id'])

    response = client.put(f'/api/assignments/{created["id"]}', json={'assigneeId': second['id'], 'topic': 'Renamed'})
    assert response.status_code == 200
    body = response.json()
    assert body['assignee'] == 'Second'
    assert body['topic'] == 'Renamed'

    assert _member(client, first['id'])['assignedTopics'] == 0
    assert _member(client, second['id'])['assignedTopics'] == 1
    updated = db.query(ActivityLog).filter(ActivityLog.type == ActivityType.ASSIGNMENT_UPDATED).one()
    assert updated.target == 'Renamed'


def test_put_unknown_new_assignee_rolls_back(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], 'Keep me')

    response = client.put(f'/api/assignments/{created["id"]}', json={'assigneeId': 424242, 'topic': 'Changed'})
    assert response.status_code == 400
    assert response.json()['detail'] == 'New assignee not found'
    assert client.get(f'/api/assignments/{created["id"]}').json()['topic'] == 'Keep me'


def test_put_with_status_change_logs_status_changed(client, db, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'])
    client.put(f'/api/assignments/{created["id"]}', json={'status': 'review', 'progress': 80})

    entry = db.query(ActivityLog).filter(ActivityLog.type == ActivityType.STATUS_CHANGED).one()
    assert entry.details == {
        'from': 'pending',
        'to': 'review',
        'description': 'Status changed from pending to review',
    }


def test_delete_is_soft_and_hides_assignment(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'])

    response = client.delete(f'/api/assignments/{created["id"]}')
    assert response.status_code == 200
    assert response.json() == {'message': 'Assignment deleted successfully'}

    assert client.get(f'/api/assignments/{created["id"]}').status_code == 404
    assert client.get('/api/assignments').json()['total'] == 0
    assert _member(client, member['id'])['assignedTopics'] == 0
    assert client.delete(f'/api/assignments/{created["id"]}').status_code == 404


def test_missing_assignment_is_404(client):
    response = client.get('/api/assignments/12345')
    assert response.status_code == 404
    assert response.json()['detail'] == 'Assignment not found'


def test_list_filters_search_and_sort(client, make_member, make_assignment):
    john = make_member('John Smith')
    jane = make_member('Jane Doe')
    make_assignment(john['id'], 'Spring Boot', category='backend', priority='low')
    make_assignment(jane['id'], 'React Hooks', category='frontend', priority='high')
    make_assignment(jane['id'], '100% Coverage', category='backend', priority='medium')

    backend = client.get('/api/assignments', params={'category': 'backend'}).json()
    assert {a['topic'] for a in backend['items']} == {'Spring Boot', '100% Coverage'}

    by_assignee = client.get('/api/assignments', params={'assigneeId': jane['id']}).json()
    assert by_assignee['total'] == 2

    by_name = client.get('/api/assignments', params={'search': 'john'}).json()
    assert [a['topic'] for a in by_name['items']] == ['Spring Boot']

    literal = client.get('/api/assignments', params={'search': '0%'}).json()
    assert [a['topic'] for a in literal['items']] == ['100% Coverage']

    by_priority = client.get('/api/assignments', params={'sortBy': 'priority', 'sortOrder': 'desc'}).json()
    assert [a['priority'] for a in by_priority['items']] == ['high', 'medium', 'low']


def test_list_pagination_shape(client, make_member, make_assignment):
    member = make_member()
    for index in range(5):
        make_assignment(member['id'], f'Topic {index}')

    page = client.get('/api/assignments', params={'page': 2, 'limit': 2}).json()
    assert page['total'] == 5
    assert page['totalPages'] == 3
    assert page['currentPage'] == 2
    assert len(page['items']) == 2

    past_end = client.get('/api/assignments', params={'page': 9, 'limit': 2}).json()
    assert past_end['items'] == []
    assert past_end['total'] == 5


def test_due_today_and_overdue(client, make_member, make_assignment):
    member = make_member()
    now = datetime.now(timezone.utc)
    today_noon = now.replace(hour=12, minute=0, second=0, microsecond=0)
    make_assignment(member['id'], 'Today', dueDate=today_noon.isoformat())
    make_assignment(member['id'], 'Late', dueDate=_iso(-2))
    make_assignment(member['id'], 'Late but done', dueDate=_iso(-3), status='completed')
    make_assignment(member['id'], 'Later', dueDate=_iso(5))

    due_today = [a['topic'] for a in client.get('/api/assignments/due/today').json()]
    assert due_today == ['Today']

    overdue = client.get('/api/assignments/overdue').json()
    assert 'Late' in [a['topic'] for a in overdue]
    assert 'Late but done' not in [a['topic'] for a in overdue]
    assert all(a['isOverdue'] for a in overdue if a['topic'] == 'Late')


def test_add_note(client, make_member, make_assignment):
    member = make_member('Reviewer')
    created = make_assignment(member['id'])

    response = client.post(
        f'/api/assignments/{created["id"]}/notes',
        json={'authorId': member['id'], 'content': '  Looks good  '},
    )
    assert response.status_code == 201
    notes = response.json()['notes']
    assert notes[0]['content'] == 'Looks good'
    assert notes[0]['authorName'] == 'Reviewer'

    missing_author = client.post(
        f'/api/assignments/{created["id"]}/notes',
        json={'authorId': 999, 'content': 'hi'},
    )
    assert missing_author.status_code == 400


def test_recently_missed_deadline_is_not_flagged_overdue(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], 'Just missed', dueDate=_iso(-2 / 24))

    body = client.get(f'/api/assignments/{created["id"]}').json()
    assert body['daysRemaining'] == 0
    assert body['isOverdue'] is False

    # The overdue listing counts anything past its due date.
    overdue = client.get('/api/assignments/overdue').json()
    assert [a['topic'] for a in overdue] == ['Just missed']


def test_assignment_a_day_late_is_overdue(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], 'Late', dueDate=_iso(-1.5))

    body = client.get(f'/api/assignments/{created["id"]}').json()
    assert body['daysRemaining'] == -1
    assert body['isOverdue'] is True


def test_put_blank_topic_is_rejected_and_topic_is_stripped(client, make_member, make_assignment):
    member = make_member()
    created = make_assignment(member['id'], 'Streams')

    blank = client.put(f'/api/assignments/{created["id"]}', json={'topic': '   '})
    assert blank.status_code == 400
    assert client.get(f'/api/assignments/{created["id"]}').json()['topic'] == 'Streams'

    renamed = client.put(f'/api/assignments/{created["id"]}', json={'topic': '  Collectors  '})
    assert renamed.status_code == 200
    assert renamed.json()['topic'] == 'Collectors'


def test_unexpected_error_returns_500_with_message(client, make_member, make_assignment, monkeypatch):
    member = make_member()
    created = make_assignment(member['id'])

    def storage_down(*args, **kwargs):
        raise RuntimeError('storage unavailable')

    monkeypatch.setattr('teamdocs.services.assignments.change_status', storage_down)
    raw_client = TestClient(app, raise_server_exceptions=False)

    response = raw_client.patch(f'/api/assignments/{created["id"]}/status', json={'status': 'completed'})
    assert response.status_code == 500
    assert response.json() == {'detail': 'storage unavailable'}
