# backend/tutorbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. Every request gets
its own gateway bound to the request's database session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.timezone_service import Clock, utc_now
from ...repositories.gateway import SqlAlchemyPersistenceGateway
from ...services.availability_query_service import AvailabilityQueryService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.notification_service import DatabaseNotificationDispatcher
from .database import get_db

logger = logging.getLogger(__name__)


def get_clock() -> Clock:
    """Overridden in tests to pin "now"."""
    return utc_now


def get_persistence_gateway(db: Session = Depends(get_db)) -> SqlAlchemyPersistenceGateway:
    return SqlAlchemyPersistenceGateway(db)


def get_notification_dispatcher(
    db: Session = Depends(get_db),
) -> DatabaseNotificationDispatcher:
    return DatabaseNotificationDispatcher(db, settings.platform_timezone)


def get_availability_query_service(
    gateway: SqlAlchemyPersistenceGateway = Depends(get_persistence_gateway),
    clock: Clock = Depends(get_clock),
) -> AvailabilityQueryService:
    return AvailabilityQueryService(gateway, clock=clock)


def get_booking_service(
    gateway: SqlAlchemyPersistenceGateway = Depends(get_persistence_gateway),
    notifier: DatabaseNotificationDispatcher = Depends(get_notification_dispatcher),
    clock: Clock = Depends(get_clock),
) -> BookingService:
    return BookingService(gateway, notifier=notifier, clock=clock)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)
