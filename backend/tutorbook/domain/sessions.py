"""
Booking-side value objects.

Gateway adapters normalize ORM rows into these frozen records so the
domain layer never touches a database session.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import FrozenSet, Optional

from ..core.enums import BLOCKING_STATUSES, SessionStatus


@dataclass(frozen=True)
class TutorSnapshot:
    id: str
    user_id: str
    hourly_rate_cents: Optional[int]
    is_active: bool
    is_verified: bool
    subject_ids: FrozenSet[str] = field(default_factory=frozenset)

    def is_bookable(self, *, require_verification: bool) -> bool:
        return self.is_active and (self.is_verified or not require_verification)

    def offers(self, subject_id: str) -> bool:
        return subject_id in self.subject_ids


@dataclass(frozen=True)
class StudentSnapshot:
    id: str
    role: str
    is_active: bool


@dataclass(frozen=True)
class BookedSession:
    """A committed tutoring session; ``scheduled_at`` is always UTC-aware."""

    id: str
    student_id: str
    tutor_id: str
    subject_id: str
    scheduled_at: datetime
    duration_minutes: int
    status: SessionStatus
    price_cents: int
    notes: Optional[str] = None
    meeting_link: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)

    @property
    def is_blocking(self) -> bool:
        return self.status in BLOCKING_STATUSES

    def summary(self) -> dict:
        """Payload handed to the notification dispatcher."""
        return {
            "session_id": self.id,
            "student_id": self.student_id,
            "tutor_id": self.tutor_id,
            "subject_id": self.subject_id,
            "scheduled_at": self.scheduled_at.isoformat(),
            "duration_minutes": self.duration_minutes,
            "price_cents": self.price_cents,
            "status": self.status.value,
        }


@dataclass(frozen=True)
class SessionCandidate:
    """A validated booking request ready for the atomic insert."""

    student_id: str
    tutor_id: str
    subject_id: str
    scheduled_at: datetime
    duration_minutes: int
    price_cents: int
    notes: Optional[str] = None
    status: SessionStatus = SessionStatus.PENDING

    @property
    def ends_at(self) -> datetime:
        return self.scheduled_at + timedelta(minutes=self.duration_minutes)


class InsertOutcome(Enum):
    CONFLICT = "conflict"


# Returned by the gateway when the insert lost a race
CONFLICT = InsertOutcome.CONFLICT
