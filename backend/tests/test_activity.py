from __future__ import annotations

from datetime import timedelta

from teamdocs.db.base import utcnow
from teamdocs.models.audit import ActivityLog
from teamdocs.models.enums import ActivityType


def test_mutations_record_activity_newest_first(client, make_member, make_assignment):
    member = make_member('John Smith')
    make_assignment(member['id'], 'Interfaces')

    page = client.get('/api/activity').json()
    assert page['total'] == 2
    assert [a['type'] for a in page['items']] == ['assignment_created', 'member_added']
    first = page['items'][0]
    assert first['actor'] == member['id']
    assert first['actorName'] == 'John Smith'
    assert first['target'] == 'Interfaces'
    assert first['details']['description'] == 'New assignment created in core-java'


def test_list_activity_filters(client, make_member, make_assignment):
    john = make_member('John')
    jane = make_member('Jane')
    make_assignment(john['id'], 'Lambdas')
    make_assignment(jane['id'], 'Generics')

    by_type = client.get('/api/activity', params={'type': 'assignment_created'}).json()
    assert by_type['total'] == 2

    by_actor = client.get('/api/activity', params={'actor': jane['id']}).json()
    assert {a['target'] for a in by_actor['items']} == {'Jane', 'Generics'}

    by_target = client.get('/api/activity', params={'target': 'lamb'}).json()
    assert [a['target'] for a in by_target['items']] == ['Lambdas']

    future = (utcnow() + timedelta(days=1)).isoformat()
    assert client.get('/api/activity', params={'dateFrom': future}).json()['total'] == 0


def test_create_activity_manually(client, make_member):
    member = make_member('Jane Doe')
    response = client.post(
        '/api/activity',
        json={
            'type': 'status_changed',
            'actor': member['id'],
            'target': 'OOP',
            'details': {'from': 'pending', 'to': 'review'},
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body['actorName'] == 'Jane Doe'
    assert body['details']['from'] == 'pending'
    assert body['details']['to'] == 'review'

    assert client.get(f'/api/activity/{body["id"]}').json()['target'] == 'OOP'


def test_create_activity_unknown_actor(client):
    response = client.post('/api/activity', json={'type': 'member_added', 'actor': 77, 'target': 'x'})
    assert response.status_code == 400
    assert response.json()['detail'] == 'Actor not found'


def test_recent_member_and_timeline(client, db, make_member, make_assignment):
    member = make_member('Mike')
    make_assignment(member['id'], 'Spring Security')
    old = ActivityLog(
        type=ActivityType.ASSIGNMENT_UPDATED,
        actor_id=member['id'],
        actor_name='Mike',
        target='Spring Security',
        details={'description': 'Assignment details updated'},
        created_at=utcnow() - timedelta(days=3),
    )
    db.add(old)
    db.commit()

    recent = client.get('/api/activity/recent').json()
    assert len(recent) == 2

    mine = client.get(f'/api/activity/member/{member["id"]}').json()
    assert mine['total'] == 3

    timeline = client.get('/api/activity/timeline/Spring Security').json()
    assert [a['type'] for a in timeline] == ['assignment_created', 'assignment_updated']


def test_cleanup_deletes_old_entries(client, db, make_member):
    member = make_member()
    db.add(
        ActivityLog(
            type=ActivityType.MEMBER_UPDATED,
            actor_id=member['id'],
            actor_name=member['name'],
            target=member['name'],
            created_at=utcnow() - timedelta(days=120),
        )
    )
    db.commit()

    response = client.delete('/api/activity/cleanup', params={'daysOld': 90})
    assert response.status_code == 200
    assert response.json()['deletedCount'] == 1
    assert response.json()['daysOld'] == 90
    assert db.query(ActivityLog).count() == 1


def test_activity_stats(client, make_member, make_assignment):
    john = make_member('John')
    make_assignment(john['id'], 'A')
    make_assignment(john['id'], 'B')

    stats = client.get('/api/activity/stats').json()
    types = {t['type']: t['count'] for t in stats['typeDistribution']}
    assert types == {'assignment_created': 2, 'member_added': 1}
    assert sum(d['count'] for d in stats['dailyActivity']) == 3
    assert stats['mostActiveMembers'][0] == {'actor': john['id'], 'actorName': 'John', 'count': 3}


def test_missing_activity_is_404(client):
    assert client.get('/api/activity/404').status_code == 404
