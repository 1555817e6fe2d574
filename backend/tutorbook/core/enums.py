# backend/tutorbook/core/enums.py
"""
Core enums for the Tutorbook platform.

Values match what is stored in the database and sent over the API.
"""

from enum import Enum
from typing import FrozenSet


class RoleName(str, Enum):
    """Account roles. Only students can book sessions."""

    ADMIN = "admin"
    TUTOR = "tutor"
    STUDENT = "student"


class SessionStatus(str, Enum):
    """Tutoring session lifecycle statuses."""

    PENDING = "pending"  # Default - awaiting tutor confirmation
    SCHEDULED = "scheduled"  # Confirmed by the tutor
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that occupy the tutor's calendar
BLOCKING_STATUSES: FrozenSet[SessionStatus] = frozenset(
    {SessionStatus.PENDING, SessionStatus.SCHEDULED, SessionStatus.IN_PROGRESS}
)


class NotificationType(str, Enum):
    SESSION_REQUEST = "session_request"
    SESSION_CONFIRMED = "session_confirmed"
    SESSION_CANCELLED = "session_cancelled"
