# backend/tests/unit/services/test_booking_service_logic.py
"""Unit tests for BookingService.book with mocked collaborators."""

from datetime import date, datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from tutorbook.core.enums import SessionStatus
from tutorbook.core.exceptions import (
    NotFoundException,
    OutsideAvailabilityException,
    PersistenceException,
    PricingUnavailableException,
    SlotConflictException,
    ValidationException,
)
from tutorbook.domain.availability import AvailabilityModel, AvailabilityWindow
from tutorbook.domain.sessions import CONFLICT, BookedSession, StudentSnapshot, TutorSnapshot
from tutorbook.services.booking_service import BookingService, calculate_price_cents

NOW = datetime(2026, 3, 1, 6, 0, tzinfo=timezone.utc)
MONDAY_10_LOCAL = datetime(2026, 3, 2, 10, 0)  # naive: platform wall clock
MONDAY_10_UTC = datetime(2026, 3, 2, 7, 0, tzinfo=timezone.utc)


def booked_from(candidate, session_id="01JSESSION000000000000000"):
    return BookedSession(
        id=session_id,
        student_id=candidate.student_id,
        tutor_id=candidate.tutor_id,
        subject_id=candidate.subject_id,
        scheduled_at=candidate.scheduled_at,
        duration_minutes=candidate.duration_minutes,
        status=candidate.status,
        price_cents=candidate.price_cents,
        notes=candidate.notes,
    )


@pytest.fixture
def gateway():
    gw = Mock()
    gw.get_student.return_value = StudentSnapshot(id="student-1", role="student", is_active=True)
    gw.subject_exists.return_value = True
    gw.get_tutor.return_value = TutorSnapshot(
        id="tutor-1",
        user_id="user-1",
        hourly_rate_cents=3000,
        is_active=True,
        is_verified=True,
        subject_ids=frozenset({"math"}),
    )
    gw.get_availability.return_value = AvailabilityModel(
        "tutor-1", [AvailabilityWindow(540, 720, weekday=0)]
    )
    gw.get_sessions_on_date.return_value = []
    gw.insert_session_if_no_conflict.side_effect = lambda candidate: booked_from(candidate)
    return gw


@pytest.fixture
def notifier():
    return Mock()


@pytest.fixture
def service(gateway, notifier, test_settings):
    return BookingService(gateway, notifier=notifier, clock=lambda: NOW, config=test_settings)


def book(service, **overrides):
    kwargs = dict(
        student_id="student-1",
        tutor_id="tutor-1",
        subject_id="math",
        scheduled_at=MONDAY_10_LOCAL,
        duration_minutes=60,
    )
    kwargs.update(overrides)
    return service.book(**kwargs)


class TestPricing:
    @pytest.mark.parametrize(
        "rate, duration, expected",
        [(3000, 60, 3000), (3000, 90, 4500), (2500, 30, 1250), (1001, 30, 501), (999, 45, 749)],
    )
    def test_price_is_prorated_and_rounded_half_up(self, rate, duration, expected):
        assert calculate_price_cents(rate, duration) == expected

    def test_price_from_hourly_rate(self, service, gateway):
        booked = book(service, duration_minutes=90)
        assert booked.price_cents == 4500

    def test_trusted_price_overrides_rate(self, service):
        assert book(service, price_cents=100).price_cents == 100

    @pytest.mark.parametrize("rate", [None, 0])
    def test_missing_rate_rejected(self, service, gateway, rate):
        gateway.get_tutor.return_value = TutorSnapshot(
            id="tutor-1",
            user_id="user-1",
            hourly_rate_cents=rate,
            is_active=True,
            is_verified=True,
            subject_ids=frozenset({"math"}),
        )
        with pytest.raises(PricingUnavailableException):
            book(service)
        gateway.insert_session_if_no_conflict.assert_not_called()


class TestSuccessfulBooking:
    def test_naive_time_is_platform_wall_clock(self, service, gateway):
        booked = book(service)
        candidate = gateway.insert_session_if_no_conflict.call_args[0][0]
        assert candidate.scheduled_at == MONDAY_10_UTC
        assert candidate.status == SessionStatus.PENDING
        assert booked.status == SessionStatus.PENDING

    def test_aware_time_is_converted(self, service, gateway):
        book(service, scheduled_at=MONDAY_10_UTC)
        candidate = gateway.insert_session_if_no_conflict.call_args[0][0]
        assert candidate.scheduled_at == MONDAY_10_UTC

    def test_tutor_is_notified(self, service, notifier):
        booked = book(service)
        notifier.notify_tutor_of_booking_request.assert_called_once()
        tutor_id, summary = notifier.notify_tutor_of_booking_request.call_args[0]
        assert tutor_id == "tutor-1"
        assert summary["session_id"] == booked.id

    def test_notification_failure_does_not_fail_booking(self, service, notifier):
        notifier.notify_tutor_of_booking_request.side_effect = RuntimeError("smtp down")
        booked = book(service)
        assert booked.id

    def test_notifications_can_be_disabled(self, gateway, notifier, test_settings):
        config = test_settings.model_copy(update={"notifications_enabled": False})
        service = BookingService(gateway, notifier=notifier, clock=lambda: NOW, config=config)
        book(service)
        notifier.notify_tutor_of_booking_request.assert_not_called()

    def test_boundary_touching_existing_session_is_allowed(self, service, gateway):
        gateway.get_sessions_on_date.return_value = [
            BookedSession(
                id="other",
                student_id="s2",
                tutor_id="tutor-1",
                subject_id="math",
                scheduled_at=MONDAY_10_UTC - timedelta(hours=1),
                duration_minutes=60,
                status=SessionStatus.SCHEDULED,
                price_cents=3000,
            )
        ]
        assert book(service).scheduled_at == MONDAY_10_UTC


class TestPreconditions:
    @pytest.mark.parametrize("field", ["student_id", "tutor_id", "subject_id"])
    def test_blank_ids_rejected(self, service, field):
        with pytest.raises(ValidationException):
            book(service, **{field: " "})

    @pytest.mark.parametrize("duration", [0, 15, 181])
    def test_duration_bounds(self, service, duration):
        with pytest.raises(ValidationException):
            book(service, duration_minutes=duration)

    @pytest.mark.parametrize(
        "scheduled_at",
        [datetime(2026, 3, 2, 11, 0, 30), datetime(2026, 3, 2, 9, 0, 0, 500), MONDAY_10_UTC.replace(second=1)],
    )
    def test_start_must_be_whole_minute(self, service, gateway, scheduled_at):
        with pytest.raises(ValidationException):
            book(service, scheduled_at=scheduled_at)
        gateway.get_availability.assert_not_called()
        gateway.insert_session_if_no_conflict.assert_not_called()

    def test_past_start_rejected(self, service, gateway):
        with pytest.raises(ValidationException):
            book(service, scheduled_at=datetime(2026, 3, 1, 8, 0))
        gateway.get_student.assert_not_called()

    def test_student_must_exist(self, service, gateway):
        gateway.get_student.return_value = None
        with pytest.raises(NotFoundException):
            book(service)

    def test_tutor_account_cannot_book_as_student(self, service, gateway):
        gateway.get_student.return_value = StudentSnapshot(id="student-1", role="tutor", is_active=True)
        with pytest.raises(NotFoundException):
            book(service)

    def test_subject_must_exist(self, service, gateway):
        gateway.subject_exists.return_value = False
        with pytest.raises(NotFoundException):
            book(service)

    def test_subject_must_be_offered(self, service):
        with pytest.raises(ValidationException):
            book(service, subject_id="physics")

    def test_unknown_tutor(self, service, gateway):
        gateway.get_tutor.return_value = None
        with pytest.raises(NotFoundException):
            book(service)


class TestAvailabilityAndConflicts:
    def test_outside_window_has_nearest_hints(self, service, gateway):
        with pytest.raises(OutsideAvailabilityException) as exc_info:
            book(service, scheduled_at=datetime(2026, 3, 2, 8, 0))
        assert exc_info.value.nearest_windows == [{"start": "09:00", "end": "12:00"}]
        gateway.insert_session_if_no_conflict.assert_not_called()

    def test_interval_running_past_window_end(self, service):
        with pytest.raises(OutsideAvailabilityException):
            book(service, scheduled_at=datetime(2026, 3, 2, 11, 30))

    def test_interval_crossing_midnight_rejected(self, service, gateway):
        gateway.get_availability.return_value = AvailabilityModel(
            "tutor-1", [AvailabilityWindow(1320, 1440, weekday=0)]
        )
        with pytest.raises(OutsideAvailabilityException):
            book(service, scheduled_at=datetime(2026, 3, 2, 23, 30))

    def test_existing_session_conflicts(self, service, gateway):
        gateway.get_sessions_on_date.return_value = [
            BookedSession(
                id="other",
                student_id="s2",
                tutor_id="tutor-1",
                subject_id="math",
                scheduled_at=MONDAY_10_UTC + timedelta(minutes=30),
                duration_minutes=60,
                status=SessionStatus.PENDING,
                price_cents=3000,
            )
        ]
        with pytest.raises(SlotConflictException):
            book(service)
        gateway.insert_session_if_no_conflict.assert_not_called()


class TestAtomicInsertRetry:
    def test_lost_race_retries_then_succeeds(self, service, gateway):
        results = iter([CONFLICT, None])

        def insert(candidate):
            outcome = next(results)
            return outcome if outcome is CONFLICT else booked_from(candidate)

        gateway.insert_session_if_no_conflict.side_effect = insert
        assert book(service).id
        assert gateway.insert_session_if_no_conflict.call_count == 2
        # Availability was re-resolved for the second attempt
        assert gateway.get_availability.call_count == 2

    def test_two_lost_races_surface_conflict(self, service, gateway, notifier):
        gateway.insert_session_if_no_conflict.side_effect = None
        gateway.insert_session_if_no_conflict.return_value = CONFLICT
        with pytest.raises(SlotConflictException):
            book(service)
        assert gateway.insert_session_if_no_conflict.call_count == 2
        notifier.notify_tutor_of_booking_request.assert_not_called()

    def test_retry_sees_the_winning_session(self, service, gateway):
        winner = BookedSession(
            id="winner",
            student_id="s2",
            tutor_id="tutor-1",
            subject_id="math",
            scheduled_at=MONDAY_10_UTC,
            duration_minutes=60,
            status=SessionStatus.PENDING,
            price_cents=3000,
        )
        gateway.get_sessions_on_date.side_effect = [[], [winner]]
        gateway.insert_session_if_no_conflict.side_effect = None
        gateway.insert_session_if_no_conflict.return_value = CONFLICT
        with pytest.raises(SlotConflictException):
            book(service)
        assert gateway.insert_session_if_no_conflict.call_count == 1

    def test_transient_storage_error_is_retried(self, service, gateway):
        calls = {"count": 0}

        def insert(candidate):
            calls["count"] += 1
            if calls["count"] == 1:
                raise PersistenceException("connection reset")
            return booked_from(candidate)

        gateway.insert_session_if_no_conflict.side_effect = insert
        assert book(service).id
        assert calls["count"] == 2

    def test_persistent_storage_error_surfaces(self, service, gateway):
        gateway.insert_session_if_no_conflict.side_effect = PersistenceException("down")
        with pytest.raises(PersistenceException):
            book(service)
        assert gateway.insert_session_if_no_conflict.call_count == 2
