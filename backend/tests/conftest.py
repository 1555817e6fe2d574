# backend/tests/conftest.py
"""
Shared fixtures for the Tutorbook test suite.

Every test gets a fresh in-memory SQLite database (one shared connection
through StaticPool) and a clock pinned to Sunday 2026-03-01 09:00 in
Bahrain, so "next Monday" is always 2026-03-02.
"""

from fastapi.testclient import TestClient
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from tests.utils.seed import add_window, create_subject, create_tutor, create_user, fixed_clock
from tutorbook import models  # noqa: F401  registers tables
from tutorbook.api.dependencies import get_clock, get_db
from tutorbook.core.config import Settings, settings
from tutorbook.core.enums import RoleName
from tutorbook.database import Base
from tutorbook.main import app
from tutorbook.models.tutor import Subject, TutorProfile
from tutorbook.models.user import User


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Keep tests on process locks and the Bahrain zone regardless of the environment."""
    monkeypatch.setattr(settings, "redis_url", None)
    monkeypatch.setattr(settings, "platform_timezone", "Asia/Bahrain")
    monkeypatch.setattr(settings, "require_tutor_verification", True)
    monkeypatch.setattr(settings, "notifications_enabled", True)
    monkeypatch.setattr(settings, "booking_commit_attempts", 2)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        environment="test",
        platform_timezone="Asia/Bahrain",
        redis_url=None,
    )


@pytest.fixture
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine) -> Session:
    TestSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=engine, expire_on_commit=False
    )
    session = TestSessionLocal()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def client(db: Session):
    """Create a test client bound to the test database and the fixed clock."""

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: fixed_clock

    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
    test_client.close()


@pytest.fixture
def subject(db: Session) -> Subject:
    return create_subject(db)


@pytest.fixture
def student(db: Session) -> User:
    return create_user(db, RoleName.STUDENT)


@pytest.fixture
def tutor(db: Session, subject: Subject) -> TutorProfile:
    """Verified tutor teaching ``subject`` on Mondays 09:00-12:00 at 30.00/hour."""
    profile = create_tutor(db, subjects=[subject])
    add_window(db, profile, "09:00", "12:00", weekday=0)
    return profile
