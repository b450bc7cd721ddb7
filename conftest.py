"""
Shared fixtures: a fresh in-memory SQLite store per test, plus seed helpers
that set created_at explicitly so ordering is predictable.
"""
from datetime import datetime

import pytest

from apps.shared.database import build_engine
from apps.portfolio.models import ProjectRecord, SuccessStoryRecord, AdminRecord
from apps.portfolio.notices import NoticeBoard
from apps.portfolio.passwords import hash_password
from apps.portfolio.session_slot import MemorySessionSlot
from apps.portfolio.store import SqlDocumentStore


@pytest.fixture
def store():
    engine = build_engine("sqlite://")
    store = SqlDocumentStore(engine)
    store.create_tables()
    yield store
    engine.dispose()


@pytest.fixture
def notices():
    return NoticeBoard()


@pytest.fixture
def session_slot():
    return MemorySessionSlot()


def _add(store, record):
    db = store.SessionLocal()
    try:
        db.add(record)
        db.commit()
        return record.to_dict()
    finally:
        db.close()


def seed_project(store, created_at="2024-01-01T00:00:00", **fields):
    values = {
        "student_name": "Asha",
        "project_title": "Untitled",
        "category": "Web Application",
        "tools_technologies": [],
    }
    values.update(fields)
    return _add(store, ProjectRecord(created_at=datetime.fromisoformat(created_at), **values))


def seed_story(store, created_at="2024-01-01T00:00:00", **fields):
    values = {
        "student_name": "Fathima Safhan",
        "title": "AWS Certification Success Story",
        "content": "Passed the Solutions Architect exam.",
        "achievement_type": "certification",
    }
    values.update(fields)
    return _add(store, SuccessStoryRecord(created_at=datetime.fromisoformat(created_at), **values))


def seed_admin(store, email="admin@techschool.com", password="admin@123", role="admin", hashed=True):
    return _add(store, AdminRecord(
        email=email,
        username=email.split("@")[0],
        password_hash=hash_password(password, iterations=1000) if hashed else password,
        role=role,
    ))
