from __future__ import annotations

from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import teamdocs.models  # noqa: F401
from teamdocs.db.base import Base
from teamdocs.db.session import get_db
from teamdocs.main import app


@pytest.fixture()
def db():
    engine = create_engine(
        'sqlite+pysqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def due_in(days: float) -> str:
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture()
def make_member(client):
    counter = {'n': 0}

    def _make(name: str = 'Member', role: str = 'developer', **extra):
        counter['n'] += 1
        payload = {
            'name': name,
            'email': extra.pop('email', f'member{counter["n"]}@company.com'),
            'role': role,
            'skills': extra.pop('skills', ['Java']),
            **extra,
        }
        response = client.post('/api/team-members', json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make


@pytest.fixture()
def make_assignment(client):
    def _make(assignee_id: int, topic: str = 'Topic', **extra):
        payload = {
            'topic': topic,
            'category': extra.pop('category', 'core-java'),
            'assigneeId': assignee_id,
            'dueDate': extra.pop('dueDate', due_in(3)),
            **extra,
        }
        response = client.post('/api/assignments', json=payload)
        assert response.status_code == 201, response.text
        return response.json()

    return _make
