"""
Pytest fixtures for testing
"""
from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from finledger.api.deps import get_db
from finledger.infrastructure.db.session import Base
from finledger.infrastructure.db.models import CategoryLabel, CategoryRecord
from finledger.infrastructure.store.sql import SqlRecordStore
from finledger.main import app


@pytest.fixture
def db_engine():
    """In-memory SQLite engine shared across threads (TestClient runs sync routes in a pool)."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def store(db_session) -> SqlRecordStore:
    return SqlRecordStore(db_session)


@pytest.fixture
def sample_owner_id():
    """Sample owner ID for tests"""
    return "owner-1"


@pytest.fixture
def other_owner_id():
    return "owner-2"


@pytest.fixture
def now():
    """Fixed reference moment: Sunday 15 March 2026, 12:00 UTC"""
    return datetime(2026, 3, 15, 12, 0)


def _add_category(db_session, owner_id, kind, labels, color=None, is_default=False):
    category = CategoryRecord(owner_id=owner_id, kind=kind, color=color, is_default=is_default)
    category.labels = [CategoryLabel(language=lang, text=text) for lang, text in labels.items()]
    db_session.add(category)
    db_session.flush()
    return category


@pytest.fixture
def food_category(db_session, sample_owner_id):
    return _add_category(db_session, sample_owner_id, "expense", {"en": "Food", "fr": "Alimentation"}, "#F59E0B")


@pytest.fixture
def transport_category(db_session, sample_owner_id):
    return _add_category(db_session, sample_owner_id, "expense", {"en": "Transport"}, "#3B82F6")


@pytest.fixture
def salary_category(db_session):
    """Shared default income category (no owner)"""
    return _add_category(db_session, None, "income", {"en": "Salary", "tn": "Chehriya"}, is_default=True)


@pytest.fixture
def foreign_category(db_session, other_owner_id):
    """Expense category belonging to another owner"""
    return _add_category(db_session, other_owner_id, "expense", {"en": "Hobbies"})


@pytest.fixture
def client(db_session):
    """Test client for the FastAPI app, bound to the test session"""
    def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def owner_headers(sample_owner_id):
    return {"X-Owner-Id": sample_owner_id}
