from __future__ import annotations

from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from teamdocs.db.base import utcnow
from teamdocs.models.assignment import Assignment
from teamdocs.services import analytics


def _iso(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


def test_empty_database_yields_zeroes(client):
    body = client.get('/api/analytics/overview').json()
    assert body['overview'] == {
        'totalMembers': 0,
        'totalAssignments': 0,
        'completionRate': 0.0,
        'overdue': 0,
        'dueToday': 0,
    }
    assert body['statusDistribution'] == []

    productivity = client.get('/api/analytics/productivity').json()
    assert productivity['recentCompletions'] == 0
    assert productivity['completionStats'] == {
        'avgCompletionDays': 0.0,
        'minCompletionDays': 0.0,
        'maxCompletionDays': 0.0,
        'sampleSize': 0,
    }
    assert client.get('/api/analytics/team-performance').json() == []
    assert client.get('/api/analytics/weekly-progress').json() == []


def test_overview_counts(client, make_member, make_assignment):
    john = make_member('John')
    jane = make_member('Jane')
    make_assignment(john['id'], 'Done', status='completed')
    make_assignment(john['id'], 'Late', dueDate=_iso(-1), category='backend')
    make_assignment(jane['id'], 'Soon', dueDate=_iso(3), status='in-progress')

    body = client.get('/api/analytics/overview').json()
    assert body['overview']['totalMembers'] == 2
    assert body['overview']['totalAssignments'] == 3
    assert body['overview']['completionRate'] == 33.3
    assert body['overview']['overdue'] == 1

    statuses = {s['status']: s['count'] for s in body['statusDistribution']}
    assert statuses == {'completed': 1, 'pending': 1, 'in-progress': 1}
    categories = {c['category']: c['count'] for c in body['categoryDistribution']}
    assert categories == {'core-java': 2, 'backend': 1}


def test_team_performance_sorted_by_rate(client, make_member, make_assignment):
    john = make_member('John')
    jane = make_member('Jane')
    idle = make_member('Idle')
    make_assignment(john['id'], 'A')
    make_assignment(jane['id'], 'B', status='completed')
    make_assignment(jane['id'], 'C', dueDate=_iso(-2))
    client.delete(f'/api/team-members/{idle["id"]}')

    rows = client.get('/api/analytics/team-performance').json()
    assert [r['name'] for r in rows] == ['Jane', 'John']
    jane_row = rows[0]
    assert jane_row['totalAssignments'] == 2
    assert jane_row['completedAssignments'] == 1
    assert jane_row['overdueAssignments'] == 1
    assert jane_row['completionRate'] == 50.0
    assert rows[1]['completionRate'] == 0.0


def test_category_and_priority_progress(client, make_member, make_assignment):
    member = make_member()
    make_assignment(member['id'], 'A', category='backend', status='completed', priority='high')
    make_assignment(member['id'], 'B', category='backend', status='review', priority='high')
    make_assignment(member['id'], 'C', category='frontend', priority='low')

    categories = client.get('/api/analytics/category-progress').json()
    assert categories[0]['category'] == 'backend'
    assert categories[0] == {
        'category': 'backend',
        'total': 2,
        'completed': 1,
        'inProgress': 0,
        'review': 1,
        'pending': 0,
        'completionRate': 50.0,
    }

    priorities = client.get('/api/analytics/priority-distribution').json()
    assert [p['priority'] for p in priorities] == ['low', 'high']
    assert priorities[1]['completionRate'] == 50.0


def test_weekly_progress_buckets_by_day(client, make_member, make_assignment):
    member = make_member()
    make_assignment(member['id'], 'A')
    make_assignment(member['id'], 'B', status='review')

    days = client.get('/api/analytics/weekly-progress').json()
    assert len(days) == 1
    assert days[0]['date'] == utcnow().strftime('%Y-%m-%d')
    assert {s['status']: s['count'] for s in days[0]['statusCounts']} == {'pending': 1, 'review': 1}


def test_completion_duration_stats(db, client, make_member, make_assignment):
    member = make_member()
    first = make_assignment(member['id'], 'Fast', status='completed')
    second = make_assignment(member['id'], 'Slow', status='completed')

    now = utcnow()
    for assignment_id, created_days_ago in ((first['id'], 2), (second['id'], 5)):
        row = db.get(Assignment, assignment_id)
        row.created_at = now - timedelta(days=created_days_ago)
        row.completion_date = now
    db.commit()

    stats = analytics.completion_duration_stats(db)
    assert stats.sample_size == 2
    assert stats.min_completion_days == 2.0
    assert stats.max_completion_days == 5.0
    assert stats.avg_completion_days == 3.5

    productivity = client.get('/api/analytics/productivity').json()
    assert productivity['recentCompletions'] == 2
    assert sum(d['count'] for d in productivity['dailyCompletions']) == 2


def test_due_today_respects_timezone(db, make_member, make_assignment):
    member = make_member()
    # 23:30 UTC on the 1st is already the 2nd in Tokyo.
    now = datetime(2030, 1, 2, 1, 0, tzinfo=timezone.utc)
    make_assignment(member['id'], 'Edge', dueDate=datetime(2030, 1, 1, 23, 30, tzinfo=timezone.utc).isoformat())

    assert analytics.due_today_count(db, now, timezone.utc) == 0
    assert analytics.due_today_count(db, now, ZoneInfo('Asia/Tokyo')) == 1


def test_due_today_midnight_boundaries(db, make_member, make_assignment):
    member = make_member()
    now = datetime(2030, 5, 10, 15, 0, tzinfo=timezone.utc)
    make_assignment(member['id'], 'Starts today', dueDate='2030-05-10T00:00:00+00:00')
    make_assignment(member['id'], 'Starts tomorrow', dueDate='2030-05-11T00:00:00+00:00')

    topics = [a.topic for a in analytics.due_today_query(db, now, timezone.utc).all()]
    assert topics == ['Starts today']
