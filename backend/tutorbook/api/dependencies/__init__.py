# backend/tutorbook/api/dependencies/__init__.py
from .database import get_db
from .services import (
    get_availability_query_service,
    get_availability_service,
    get_booking_service,
    get_clock,
    get_notification_dispatcher,
    get_persistence_gateway,
)

__all__ = [
    "get_availability_query_service",
    "get_availability_service",
    "get_booking_service",
    "get_clock",
    "get_db",
    "get_notification_dispatcher",
    "get_persistence_gateway",
]
