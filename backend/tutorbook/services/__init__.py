# backend/tutorbook/services/__init__.py
"""Service layer for the Tutorbook booking core."""

from .availability_query_service import AvailabilityQueryService
from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .notification_service import DatabaseNotificationDispatcher, NotificationDispatcher

__all__ = [
    "AvailabilityQueryService",
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "DatabaseNotificationDispatcher",
    "NotificationDispatcher",
]
