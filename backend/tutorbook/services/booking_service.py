# backend/tutorbook/services/booking_service.py
"""
Booking Service for Tutorbook

Validates a booking request against the tutor's current availability and
calendar, prices it, and commits it through the persistence gateway. The
insert step is atomic per tutor; if it loses a race (or storage fails
transiently) the whole validation runs once more before giving up.
"""

from datetime import date, datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.constants import MINUTES_PER_DAY, MAX_NOTES_LENGTH
from ..core.enums import RoleName
from ..core.exceptions import (
    NotFoundException,
    OutsideAvailabilityException,
    PersistenceException,
    PricingUnavailableException,
    SlotConflictException,
    ValidationException,
)
from ..core.timezone_service import Clock, TimezoneService, utc_now
from ..domain.availability import AvailabilityModel
from ..domain.conflicts import BookingConflictChecker, DayFrame
from ..domain.sessions import CONFLICT, BookedSession, SessionCandidate, TutorSnapshot
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.gateway import PersistenceGateway
from ..utils.time_utils import minutes_to_time_str
from .availability_query_service import require_bookable_tutor
from .base import BaseService
from .notification_service import NotificationDispatcher

logger = logging.getLogger(__name__)


def calculate_price_cents(hourly_rate_cents: int, duration_minutes: int) -> int:
    """Pro-rate an hourly rate, rounding half cents up."""
    amount = Decimal(hourly_rate_cents) * Decimal(duration_minutes) / Decimal(60)
    return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class BookingService(BaseService):
    """
    Service layer for creating tutoring sessions.

    All preconditions are checked in a fixed order and each failure is
    raised as exactly one domain exception; nothing is written unless
    every check passes.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        notifier: Optional[NotificationDispatcher] = None,
        clock: Clock = utc_now,
        config: Optional[Settings] = None,
        db: Optional[Session] = None,
    ):
        super().__init__(db)
        self.gateway = gateway
        self.notifier = notifier
        self.clock = clock
        self.config = config or settings

    @property
    def timezone(self) -> str:
        return self.config.platform_timezone

    @BaseService.measure_operation("book")
    def book(
        self,
        student_id: str,
        tutor_id: str,
        subject_id: str,
        scheduled_at: datetime,
        duration_minutes: int,
        notes: Optional[str] = None,
        *,
        price_cents: Optional[int] = None,
    ) -> BookedSession:
        """
        Create a pending session.

        A naive ``scheduled_at`` is wall clock in the platform zone; an aware
        one is converted to it.

        Raises:
            ValidationException: Bad input, sub-minute or past start, subject not offered, no rate
            NotFoundException: Unknown student, subject or tutor
            OutsideAvailabilityException: Interval not inside an open window
            SlotConflictException: Interval overlaps a non-cancelled session
            PersistenceException: Storage failed twice
        """
        self._validate_request(student_id, tutor_id, subject_id, duration_minutes, notes, price_cents)
        if scheduled_at.second or scheduled_at.microsecond:
            raise ValidationException(
                "Start time must be on a whole minute",
                details={"scheduled_at": scheduled_at.isoformat()},
            )
        local_date, start_minute, start_utc = self._resolve_start(scheduled_at)

        now = self.clock()
        if self._is_past(local_date, start_utc, now):
            raise ValidationException(
                "Cannot book a session in the past",
                details={"scheduled_at": scheduled_at.isoformat()},
            )

        self._require_student(student_id)
        if not self.gateway.subject_exists(subject_id):
            raise NotFoundException("Subject not found", details={"subject_id": subject_id})
        tutor = require_bookable_tutor(
            self.gateway, tutor_id, require_verification=self.config.require_tutor_verification
        )
        if not tutor.offers(subject_id):
            raise ValidationException(
                "This tutor does not teach the selected subject",
                details={"tutor_id": tutor_id, "subject_id": subject_id},
            )

        attempts = self.config.booking_commit_attempts
        booked: Optional[BookedSession] = None
        for attempt in range(1, attempts + 1):
            self._check_availability(tutor_id, local_date, start_minute, duration_minutes, start_utc)
            assert start_utc is not None
            self._check_conflicts(tutor_id, local_date, start_utc, duration_minutes)
            price = self._resolve_price(tutor, duration_minutes, price_cents)

            candidate = SessionCandidate(
                student_id=student_id,
                tutor_id=tutor_id,
                subject_id=subject_id,
                scheduled_at=start_utc,
                duration_minutes=duration_minutes,
                price_cents=price,
                notes=notes,
            )
            try:
                outcome = self.gateway.insert_session_if_no_conflict(candidate)
            except PersistenceException:
                if attempt >= attempts:
                    prometheus_metrics.record_booking_outcome("persistence_error")
                    raise
                prometheus_metrics.record_booking_outcome("retry")
                self.logger.warning(
                    "Booking insert failed, retrying",
                    extra={"tutor_id": tutor_id, "attempt": attempt},
                )
                continue

            if outcome is CONFLICT:
                if attempt >= attempts:
                    prometheus_metrics.record_booking_outcome("conflict")
                    raise SlotConflictException(
                        details={"tutor_id": tutor_id, "scheduled_at": start_utc.isoformat()}
                    )
                prometheus_metrics.record_booking_outcome("retry")
                self.logger.warning(
                    "Booking lost a race, re-validating",
                    extra={"tutor_id": tutor_id, "attempt": attempt},
                )
                continue

            booked = outcome
            break

        assert booked is not None
        prometheus_metrics.record_booking_outcome("created")
        self.log_operation(
            "book",
            session_id=booked.id,
            tutor_id=tutor_id,
            student_id=student_id,
            scheduled_at=booked.scheduled_at.isoformat(),
            duration_minutes=duration_minutes,
        )
        self._notify_tutor(booked)
        return booked

    def _validate_request(
        self,
        student_id: str,
        tutor_id: str,
        subject_id: str,
        duration_minutes: int,
        notes: Optional[str],
        price_cents: Optional[int],
    ) -> None:
        for field_name, value in (
            ("student_id", student_id),
            ("tutor_id", tutor_id),
            ("subject_id", subject_id),
        ):
            if not value or not str(value).strip():
                raise ValidationException(f"{field_name} is required", details={"field": field_name})

        cfg = self.config
        if not cfg.session_duration_min_minutes <= duration_minutes <= cfg.session_duration_max_minutes:
            raise ValidationException(
                f"Duration must be between {cfg.session_duration_min_minutes} and "
                f"{cfg.session_duration_max_minutes} minutes",
                details={"duration_minutes": duration_minutes},
            )
        if notes is not None and len(notes) > MAX_NOTES_LENGTH:
            raise ValidationException(
                f"Notes cannot exceed {MAX_NOTES_LENGTH} characters",
                details={"field": "notes"},
            )
        if price_cents is not None and price_cents < 0:
            raise ValidationException("Price cannot be negative", details={"price_cents": price_cents})

    def _resolve_start(self, scheduled_at: datetime) -> Tuple[date, int, Optional[datetime]]:
        """
        Map the requested start to (local date, start minute, UTC instant).

        The UTC instant is None when a naive wall-clock time was skipped by
        a DST change; such a start can never lie inside availability.
        """
        try:
            return TimezoneService.to_local_wall_clock(scheduled_at, self.timezone)
        except ValueError:
            return scheduled_at.date(), scheduled_at.hour * 60 + scheduled_at.minute, None

    def _is_past(self, local_date: date, start_utc: Optional[datetime], now: datetime) -> bool:
        if start_utc is None:
            return local_date < TimezoneService.today(now, self.timezone)
        return TimezoneService.is_past(start_utc, now)

    def _require_student(self, student_id: str) -> None:
        student = self.gateway.get_student(student_id)
        if student is None or not student.is_active or student.role != RoleName.STUDENT.value:
            raise NotFoundException("Student not found", details={"student_id": student_id})

    def _check_availability(
        self,
        tutor_id: str,
        local_date: date,
        start_minute: int,
        duration_minutes: int,
        start_utc: Optional[datetime],
    ) -> None:
        model: AvailabilityModel = self.gateway.get_availability(tutor_id)
        end_minute = start_minute + duration_minutes

        inside = (
            start_utc is not None
            and end_minute <= MINUTES_PER_DAY
            and DayFrame(local_date, self.timezone).interval(start_minute, end_minute) is not None
            and model.contains(local_date, start_minute, end_minute)
        )
        if inside:
            return

        prometheus_metrics.record_booking_outcome("outside_availability")
        hints = [w.to_hint() for w in model.nearest_windows(local_date, start_minute)]
        raise OutsideAvailabilityException(
            nearest_windows=hints,
            details={
                "date": local_date.isoformat(),
                "start": minutes_to_time_str(start_minute),
                "duration_minutes": duration_minutes,
            },
        )

    def _check_conflicts(
        self, tutor_id: str, local_date: date, start_utc: datetime, duration_minutes: int
    ) -> None:
        sessions = self.gateway.get_sessions_on_date(tutor_id, local_date, self.timezone)
        end_utc = start_utc + timedelta(minutes=duration_minutes)
        if BookingConflictChecker.conflicts_for(start_utc, end_utc, sessions):
            prometheus_metrics.record_booking_outcome("conflict")
            raise SlotConflictException(
                details={"tutor_id": tutor_id, "scheduled_at": start_utc.isoformat()}
            )

    @staticmethod
    def _resolve_price(
        tutor: TutorSnapshot, duration_minutes: int, price_cents: Optional[int]
    ) -> int:
        if price_cents is not None:
            return price_cents
        if tutor.hourly_rate_cents is None or tutor.hourly_rate_cents <= 0:
            raise PricingUnavailableException(tutor.id)
        return calculate_price_cents(tutor.hourly_rate_cents, duration_minutes)

    def _notify_tutor(self, booked: BookedSession) -> None:
        if self.notifier is None or not self.config.notifications_enabled:
            return
        try:
            self.notifier.notify_tutor_of_booking_request(booked.tutor_id, booked.summary())
        except Exception as exc:
            # The session is already committed; a missed notification is not a failed booking
            self.logger.error(
                "Failed to notify tutor of booking request",
                extra={
                    "session_id": booked.id,
                    "tutor_id": booked.tutor_id,
                    "error": str(exc),
                    "error_type": type(exc).__name__,
                },
                exc_info=True,
            )
