# backend/tests/integration/test_persistence_gateway.py
"""Tests for the SQLAlchemy persistence gateway."""

from contextlib import contextmanager
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from tests.utils.seed import MONDAY, add_session, add_window, create_user, fixed_clock, utc
from tutorbook.core.enums import RoleName, SessionStatus
from tutorbook.core.exceptions import PersistenceException
from tutorbook.core.ulid_helper import is_valid_ulid
from tutorbook.domain.sessions import CONFLICT, BookedSession, SessionCandidate
from tutorbook.models.session import TutoringSession
from tutorbook.repositories.gateway import SqlAlchemyPersistenceGateway
from tutorbook.services.booking_service import BookingService


@contextmanager
def busy_lock(tutor_id, ttl_s=None, wait_s=None):
    yield False


@pytest.fixture
def gateway(db):
    return SqlAlchemyPersistenceGateway(db)


def candidate_for(tutor, student, subject, hour_utc, minutes=60):
    return SessionCandidate(
        student_id=student.id,
        tutor_id=tutor.id,
        subject_id=subject.id,
        scheduled_at=utc(2026, 3, 2, hour_utc),
        duration_minutes=minutes,
        price_cents=3000,
    )


class TestReads:
    def test_tutor_snapshot(self, gateway, tutor, subject):
        snapshot = gateway.get_tutor(tutor.id)
        assert snapshot.user_id == tutor.user_id
        assert snapshot.hourly_rate_cents == 3000
        assert snapshot.offers(subject.id)
        assert gateway.get_tutor("missing") is None

    def test_student_snapshot(self, db, gateway, student):
        snapshot = gateway.get_student(student.id)
        assert snapshot.role == RoleName.STUDENT.value
        assert snapshot.is_active
        assert gateway.get_student("missing") is None

    def test_subject_exists(self, gateway, subject):
        assert gateway.subject_exists(subject.id)
        assert not gateway.subject_exists("missing")

    def test_availability_model(self, db, gateway, tutor):
        add_window(db, tutor, "14:00", "16:00", on_date=MONDAY)
        model = gateway.get_availability(tutor.id)
        assert model.has_exception(MONDAY)
        assert [w.range_label for w in model.windows_for(MONDAY)] == ["14:00-16:00"]

    def test_sessions_on_date_include_previous_evening(self, db, gateway, tutor, student, subject):
        # Sunday 23:30 local runs into Monday
        add_session(db, tutor, student, subject, utc(2026, 3, 1, 20, 30))
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 7))
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 9), status=SessionStatus.CANCELLED)
        # Tuesday 01:00 local
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 22))

        sessions = gateway.get_sessions_on_date(tutor.id, MONDAY, "Asia/Bahrain")

        assert [s.scheduled_at for s in sessions] == [utc(2026, 3, 1, 20, 30), utc(2026, 3, 2, 7)]
        assert all(s.scheduled_at.tzinfo is not None for s in sessions)


class TestInsertSessionIfNoConflict:
    def test_inserts_pending_session(self, gateway, tutor, student, subject):
        outcome = gateway.insert_session_if_no_conflict(candidate_for(tutor, student, subject, 7))

        assert isinstance(outcome, BookedSession)
        assert outcome.status == SessionStatus.PENDING
        assert outcome.ends_at == utc(2026, 3, 2, 8)
        assert is_valid_ulid(outcome.id)

    def test_overlap_returns_conflict(self, db, gateway, tutor, student, subject):
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 7) + timedelta(minutes=30))
        other = create_user(db, RoleName.STUDENT)

        outcome = gateway.insert_session_if_no_conflict(candidate_for(tutor, other, subject, 7))

        assert outcome is CONFLICT

    def test_cancelled_and_completed_do_not_block(self, db, gateway, tutor, student, subject):
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 7), status=SessionStatus.CANCELLED)
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 7), status=SessionStatus.COMPLETED)

        outcome = gateway.insert_session_if_no_conflict(candidate_for(tutor, student, subject, 7))

        assert isinstance(outcome, BookedSession)

    def test_touching_sessions_allowed(self, db, gateway, tutor, student, subject):
        add_session(db, tutor, student, subject, utc(2026, 3, 2, 6))
        outcome = gateway.insert_session_if_no_conflict(candidate_for(tutor, student, subject, 7))
        assert isinstance(outcome, BookedSession)

    def test_lock_timeout_is_a_transient_failure(self, db, gateway, tutor, student, subject):
        with patch("tutorbook.repositories.gateway.tutor_booking_lock", busy_lock):
            with pytest.raises(PersistenceException) as exc_info:
                gateway.insert_session_if_no_conflict(candidate_for(tutor, student, subject, 7))
        assert exc_info.value.details["reason"] == "lock_timeout"
        assert db.query(TutoringSession).count() == 0

    def test_booking_reports_lock_timeout_as_persistence_error(
        self, db, gateway, tutor, student, subject
    ):
        service = BookingService(gateway, clock=fixed_clock)
        with patch("tutorbook.repositories.gateway.tutor_booking_lock", busy_lock):
            with pytest.raises(PersistenceException):
                service.book(student.id, tutor.id, subject.id, datetime(2026, 3, 2, 10, 0), 60)
        assert db.query(TutoringSession).count() == 0

    def test_storage_failure_raises_persistence_error(self, gateway, tutor, student, subject):
        failure = OperationalError("INSERT", {}, Exception("disk I/O error"))
        with patch.object(gateway.sessions, "get_overlapping", side_effect=failure):
            with pytest.raises(PersistenceException):
                gateway.insert_session_if_no_conflict(candidate_for(tutor, student, subject, 7))
