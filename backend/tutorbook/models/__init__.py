# backend/tutorbook/models/__init__.py
"""
SQLAlchemy models for the Tutorbook booking core.

Importing this package registers every table on ``Base.metadata``.
"""

from .availability import AvailabilityWindowRecord
from .notification import Notification
from .session import TutoringSession
from .tutor import Subject, TutorProfile, tutor_subjects
from .user import User

__all__ = [
    "AvailabilityWindowRecord",
    "Notification",
    "Subject",
    "TutorProfile",
    "TutoringSession",
    "User",
    "tutor_subjects",
]
