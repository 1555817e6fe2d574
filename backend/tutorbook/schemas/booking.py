# backend/tutorbook/schemas/booking.py
"""Session booking request and response schemas."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from ..core.constants import MAX_NOTES_LENGTH
from ..core.enums import SessionStatus
from ..domain.sessions import BookedSession
from ._strict_base import StrictModel, StrictRequestModel


class SessionCreateRequest(StrictRequestModel):
    """
    Booking request.

    ``scheduledAt`` without an offset is read as wall clock in the platform
    time zone; with an offset it is converted.
    """

    student_id: str = Field(..., min_length=1)
    tutor_id: str = Field(..., min_length=1)
    subject_id: str = Field(..., min_length=1)
    scheduled_at: datetime
    duration_minutes: int = Field(default=60)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)


class SessionResponse(StrictModel):
    id: str
    status: SessionStatus
    price_cents: int
    scheduled_at: datetime
    duration_minutes: int
    tutor_id: str
    student_id: str
    subject_id: str
    notes: Optional[str] = None

    @classmethod
    def from_domain(cls, session: BookedSession) -> "SessionResponse":
        return cls(
            id=session.id,
            status=session.status,
            price_cents=session.price_cents,
            scheduled_at=session.scheduled_at,
            duration_minutes=session.duration_minutes,
            tutor_id=session.tutor_id,
            student_id=session.student_id,
            subject_id=session.subject_id,
            notes=session.notes,
        )
