# backend/tutorbook/services/availability_query_service.py
"""
Availability query service.

Answers "which start times of this duration are free for this tutor on
this date" by composing the availability model, the slot generator and
the conflict checker. Read-only; results are advisory and are re-checked
by ``BookingService.book``.
"""

from datetime import date
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..core.exceptions import NotFoundException, ValidationException
from ..core.timezone_service import Clock, TimezoneService, utc_now
from ..domain.conflicts import BookingConflictChecker, DayFrame
from ..domain.sessions import TutorSnapshot
from ..domain.slots import CandidateSlot, SlotGenerator
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories.gateway import PersistenceGateway
from .base import BaseService

logger = logging.getLogger(__name__)


def require_bookable_tutor(
    gateway: PersistenceGateway, tutor_id: str, *, require_verification: bool
) -> TutorSnapshot:
    """Load a tutor that students may see and book, or raise NotFoundException."""
    tutor = gateway.get_tutor(tutor_id)
    if tutor is None or not tutor.is_bookable(require_verification=require_verification):
        # Inactive and unverified tutors are indistinguishable from missing ones
        raise NotFoundException("Tutor not found", details={"tutor_id": tutor_id})
    return tutor


class AvailabilityQueryService(BaseService):
    """Computes bookable slots for a tutor, date and duration."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        clock: Clock = utc_now,
        config: Optional[Settings] = None,
        db: Optional[Session] = None,
    ):
        super().__init__(db)
        self.gateway = gateway
        self.clock = clock
        self.config = config or settings

    @property
    def timezone(self) -> str:
        return self.config.platform_timezone

    def _validate(self, tutor_id: str, duration_minutes: int, step_minutes: int) -> None:
        if not tutor_id or not tutor_id.strip():
            raise ValidationException("tutor_id is required")
        cfg = self.config
        if not cfg.session_duration_min_minutes <= duration_minutes <= cfg.session_duration_max_minutes:
            raise ValidationException(
                f"Duration must be between {cfg.session_duration_min_minutes} and "
                f"{cfg.session_duration_max_minutes} minutes",
                details={"duration_minutes": duration_minutes},
            )
        if not cfg.slot_step_min_minutes <= step_minutes <= cfg.slot_step_max_minutes:
            raise ValidationException(
                f"Step must be between {cfg.slot_step_min_minutes} and "
                f"{cfg.slot_step_max_minutes} minutes",
                details={"step_minutes": step_minutes},
            )

    @BaseService.measure_operation("query")
    def query(
        self,
        tutor_id: str,
        target_date: date,
        duration_minutes: int,
        step_minutes: Optional[int] = None,
    ) -> List[CandidateSlot]:
        """
        Return every candidate slot of the date, each marked available or not.

        Raises:
            ValidationException: Past date, or duration/step outside the bounds
            NotFoundException: Unknown, inactive or unverified tutor
        """
        step = step_minutes if step_minutes is not None else self.config.slot_step_default_minutes
        self._validate(tutor_id, duration_minutes, step)

        now = self.clock()
        today = TimezoneService.today(now, self.timezone)
        if target_date < today:
            raise ValidationException(
                "Cannot query availability for a past date",
                details={"date": target_date.isoformat(), "today": today.isoformat()},
            )

        require_bookable_tutor(
            self.gateway, tutor_id, require_verification=self.config.require_tutor_verification
        )
        model = self.gateway.get_availability(tutor_id)
        windows = model.windows_for(target_date)
        candidates = SlotGenerator.generate(
            windows,
            duration_minutes,
            step,
            min_duration=self.config.session_duration_min_minutes,
            max_duration=self.config.session_duration_max_minutes,
        )
        if not candidates:
            prometheus_metrics.record_slot_query("empty")
            return []

        sessions = self.gateway.get_sessions_on_date(tutor_id, target_date, self.timezone)
        marked = BookingConflictChecker.mark(
            candidates, sessions, DayFrame(target_date, self.timezone), now=now
        )

        available = sum(1 for slot in marked if slot.available)
        prometheus_metrics.record_slot_query("available" if available else "fully_booked")
        self.logger.debug(
            "Computed slots",
            extra={
                "tutor_id": tutor_id,
                "date": target_date.isoformat(),
                "candidates": len(marked),
                "available": available,
            },
        )
        return marked
