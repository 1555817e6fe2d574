# backend/tutorbook/repositories/gateway.py
"""
Persistence gateway for the booking core.

The services depend on the ``PersistenceGateway`` protocol only. The
SQLAlchemy implementation composes the repositories, normalizes rows into
the frozen records of ``tutorbook.domain.sessions``, and owns the atomic
re-check-and-insert step of a booking.
"""

from __future__ import annotations

from datetime import date
import logging
from typing import List, Optional, Protocol, Union

from sqlalchemy.exc import IntegrityError, OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.booking_lock import tutor_booking_lock
from ..core.enums import BLOCKING_STATUSES, SessionStatus
from ..core.exceptions import (
    PersistenceException,
    RepositoryException,
    RepositoryIntegrityException,
)
from ..core.timezone_service import TimezoneService
from ..domain.availability import AvailabilityModel, AvailabilityWindow
from ..domain.sessions import (
    CONFLICT,
    BookedSession,
    InsertOutcome,
    SessionCandidate,
    StudentSnapshot,
    TutorSnapshot,
)
from ..models.availability import AvailabilityWindowRecord
from ..models.session import TutoringSession
from ..models.tutor import TutorProfile
from ..models.user import User
from .factory import RepositoryFactory

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATEs for deadlock and serialization failure
_RETRYABLE_PGCODES = {"40P01", "40001"}


class PersistenceGateway(Protocol):
    """Storage operations the booking core relies on."""

    def get_tutor(self, tutor_id: str) -> Optional[TutorSnapshot]:
        ...

    def get_student(self, student_id: str) -> Optional[StudentSnapshot]:
        ...

    def subject_exists(self, subject_id: str) -> bool:
        ...

    def get_availability(self, tutor_id: str) -> AvailabilityModel:
        ...

    def get_sessions_on_date(
        self, tutor_id: str, local_date: date, timezone_str: Optional[str] = None
    ) -> List[BookedSession]:
        ...

    def insert_session_if_no_conflict(
        self, candidate: SessionCandidate
    ) -> Union[BookedSession, InsertOutcome]:
        ...


def to_tutor_snapshot(profile: TutorProfile) -> TutorSnapshot:
    return TutorSnapshot(
        id=profile.id,
        user_id=profile.user_id,
        hourly_rate_cents=profile.hourly_rate_cents,
        is_active=bool(profile.is_active),
        is_verified=bool(profile.is_verified),
        subject_ids=frozenset(subject.id for subject in profile.subjects),
    )


def to_availability_window(record: AvailabilityWindowRecord) -> AvailabilityWindow:
    return AvailabilityWindow(
        start_minute=record.start_minute,
        end_minute=record.end_minute,
        weekday=record.weekday,
        date=record.specific_date,
        is_available=bool(record.is_available),
    )


def to_booked_session(row: TutoringSession) -> BookedSession:
    return BookedSession(
        id=row.id,
        student_id=row.student_id,
        tutor_id=row.tutor_id,
        subject_id=row.subject_id,
        scheduled_at=TimezoneService.ensure_utc(row.scheduled_at),
        duration_minutes=row.duration_minutes,
        status=SessionStatus(row.status),
        price_cents=row.price_cents,
        notes=row.notes,
        meeting_link=row.meeting_link,
        created_at=TimezoneService.ensure_utc(row.created_at) if row.created_at else None,
    )


def _is_lock_contention(exc: OperationalError) -> bool:
    return getattr(exc.orig, "pgcode", None) in _RETRYABLE_PGCODES


class SqlAlchemyPersistenceGateway:
    """``PersistenceGateway`` backed by one request-scoped SQLAlchemy session."""

    def __init__(self, db: Session):
        self.db = db
        self.users = RepositoryFactory.create_user_repository(db)
        self.tutors = RepositoryFactory.create_tutor_repository(db)
        self.subjects = RepositoryFactory.create_subject_repository(db)
        self.availability = RepositoryFactory.create_availability_repository(db)
        self.sessions = RepositoryFactory.create_session_repository(db)

    def get_tutor(self, tutor_id: str) -> Optional[TutorSnapshot]:
        profile = self._call(self.tutors.get_by_id, tutor_id)
        if profile is None:
            return None
        return to_tutor_snapshot(profile)

    def get_student(self, student_id: str) -> Optional[StudentSnapshot]:
        user: Optional[User] = self._call(self.users.get_by_id, student_id, False)
        if user is None:
            return None
        return StudentSnapshot(id=user.id, role=user.role, is_active=bool(user.is_active))

    def subject_exists(self, subject_id: str) -> bool:
        return bool(self._call(self.subjects.exists, id=subject_id))

    def get_availability(self, tutor_id: str) -> AvailabilityModel:
        records = self._call(self.availability.get_for_tutor, tutor_id)
        return AvailabilityModel(tutor_id, (to_availability_window(r) for r in records))

    def get_sessions_on_date(
        self, tutor_id: str, local_date: date, timezone_str: Optional[str] = None
    ) -> List[BookedSession]:
        """Non-cancelled sessions overlapping the local day, sessions from the previous evening included."""
        day_start, day_end = TimezoneService.day_bounds_utc(local_date, timezone_str)
        rows = self._call(self.sessions.get_non_cancelled, tutor_id, day_start, day_end)
        return [to_booked_session(row) for row in rows]

    def insert_session_if_no_conflict(
        self, candidate: SessionCandidate
    ) -> Union[BookedSession, InsertOutcome]:
        """
        Insert the session unless a blocking session overlaps it.

        The overlap re-check and the insert run under the tutor's booking
        lock and inside one database transaction. Returns ``CONFLICT`` when
        another booking won; raises ``PersistenceException`` on storage
        failure or when the lock could not be taken in time. Either way
        nothing is left half-written.
        """
        with tutor_booking_lock(candidate.tutor_id) as held:
            if not held:
                raise PersistenceException(
                    "The tutor's calendar is busy, please try again",
                    details={"tutor_id": candidate.tutor_id, "reason": "lock_timeout"},
                )
            try:
                self.tutors.lock_for_booking(candidate.tutor_id)
                taken = self.sessions.get_overlapping(
                    candidate.tutor_id,
                    candidate.scheduled_at,
                    candidate.ends_at,
                    BLOCKING_STATUSES,
                )
                if taken:
                    self.db.rollback()
                    logger.info(
                        "booking_insert_conflict",
                        extra={
                            "tutor_id": candidate.tutor_id,
                            "conflicting_session_ids": [row.id for row in taken],
                        },
                    )
                    return CONFLICT

                row = self.sessions.create(
                    student_id=candidate.student_id,
                    tutor_id=candidate.tutor_id,
                    subject_id=candidate.subject_id,
                    scheduled_at=candidate.scheduled_at,
                    ends_at=candidate.ends_at,
                    duration_minutes=candidate.duration_minutes,
                    status=candidate.status.value,
                    price_cents=candidate.price_cents,
                    notes=candidate.notes,
                )
                self.db.commit()
                self.db.refresh(row)
                return to_booked_session(row)
            except RepositoryIntegrityException:
                # Exclusion constraint on PostgreSQL; the row was rolled back
                return CONFLICT
            except IntegrityError:
                self.db.rollback()
                return CONFLICT
            except OperationalError as exc:
                self.db.rollback()
                if _is_lock_contention(exc):
                    logger.warning(
                        "booking_insert_lock_contention", extra={"tutor_id": candidate.tutor_id}
                    )
                    return CONFLICT
                raise PersistenceException(
                    "Could not save the session, please try again",
                    details={"error_type": type(exc).__name__},
                ) from exc
            except (RepositoryException, SQLAlchemyError) as exc:
                self.db.rollback()
                raise PersistenceException(
                    "Could not save the session, please try again",
                    details={"error_type": type(exc).__name__},
                ) from exc

    def _call(self, fn, *args, **kwargs):
        """Run a repository read, turning storage failures into ``PersistenceException``."""
        try:
            return fn(*args, **kwargs)
        except RepositoryException as exc:
            raise PersistenceException(
                "Storage is temporarily unavailable",
                details={"error_type": type(exc).__name__},
            ) from exc
