"""
Pytest configuration and fixtures.
"""

from __future__ import annotations

import os
from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from tests.test_constants import (
    TEST_DATABASE_URL,
    TEST_EMPLOYEE_ID,
    TEST_INTERNAL_API_TOKEN,
    TEST_MANAGER_ID,
)

# Force test DB when pytest runs; don't inherit from .env
os.environ["DATABASE_URL"] = TEST_DATABASE_URL
os.environ["INTERNAL_API_TOKEN"] = TEST_INTERNAL_API_TOKEN


@pytest.fixture
def db() -> Session:
    """Session on a fresh in-memory database with all tables created."""
    from evidence_engine.db.session import Base, make_engine
    import evidence_engine.models  # noqa: F401

    engine = make_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(engine)
    session = Session(bind=engine)
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(engine)
        engine.dispose()


@pytest.fixture
def client() -> TestClient:
    """FastAPI test client without a database override."""
    from evidence_engine.main import app

    return TestClient(app)


@pytest.fixture
def api_client(db: Session):
    """TestClient with get_db overridden and the internal token pre-set."""
    from evidence_engine.db.session import get_db
    from evidence_engine.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    c = TestClient(app, headers={"X-Internal-Token": TEST_INTERNAL_API_TOKEN})
    yield c
    app.dependency_overrides.clear()


@pytest.fixture
def make_entry(db: Session):
    """Factory that inserts an EvidenceEntry directly and returns it.

    archived=True stores the entry already archived with reason "manual".
    """
    from evidence_engine.models import EvidenceEntry

    def _make(archived: bool = False, **overrides):
        values = dict(
            employee_id=TEST_EMPLOYEE_ID,
            manager_id=TEST_MANAGER_ID,
            dimension="responsibilities",
            star_rating=3,
            content="Delivered the quarterly roadmap on time",
            entry_date=date(2026, 9, 1),
            status="active",
            attachment_count=0,
            approval_status="none",
        )
        if archived:
            values.update(
                status="archived",
                archive_reason="manual",
                archived_at=datetime.now(timezone.utc),
            )
        values.update(overrides)
        entry = EvidenceEntry(**values)
        db.add(entry)
        db.commit()
        db.refresh(entry)
        return entry

    return _make


@pytest.fixture
def make_tag(db: Session):
    """Factory that inserts a Tag directly and returns it."""
    from evidence_engine.models import Tag

    def _make(name: str, **overrides):
        tag = Tag(name=name, color=overrides.pop("color", "#007bff"), **overrides)
        db.add(tag)
        db.commit()
        db.refresh(tag)
        return tag

    return _make
