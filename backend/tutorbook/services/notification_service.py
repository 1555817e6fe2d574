# backend/tutorbook/services/notification_service.py
"""
Booking notifications.

``NotificationDispatcher`` is the outbound interface the booking service
calls after a session is committed. The default implementation stores an
in-app notification for the tutor; push and email delivery are handled
by other systems that read those rows.
"""

from datetime import datetime
import logging
from typing import Any, Dict, Mapping, Optional, Protocol

from sqlalchemy.orm import Session

from ..core.enums import NotificationType
from ..core.exceptions import NotFoundException
from ..core.timezone_service import TimezoneService
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class NotificationDispatcher(Protocol):
    """Interface for telling a tutor about a new booking request."""

    def notify_tutor_of_booking_request(
        self, tutor_id: str, session_summary: Mapping[str, Any]
    ) -> None:
        ...


class DatabaseNotificationDispatcher(BaseService):
    """Records a ``session_request`` notification for the tutor's user account."""

    def __init__(self, db: Session, timezone_str: Optional[str] = None):
        super().__init__(db)
        self.timezone_str = timezone_str
        self.tutor_repository = RepositoryFactory.create_tutor_repository(db)
        self.notification_repository = RepositoryFactory.create_notification_repository(db)

    def _build_message(self, session_summary: Mapping[str, Any]) -> str:
        scheduled_at = datetime.fromisoformat(str(session_summary["scheduled_at"]))
        when = TimezoneService.format_for_display(scheduled_at, self.timezone_str)
        return (
            f"A student requested a {session_summary['duration_minutes']}-minute session "
            f"on {when}."
        )

    @BaseService.measure_operation("notify_tutor_of_booking_request")
    def notify_tutor_of_booking_request(
        self, tutor_id: str, session_summary: Mapping[str, Any]
    ) -> None:
        profile = self.tutor_repository.get_by_id(tutor_id, load_relationships=False)
        if profile is None:
            raise NotFoundException("Tutor not found", details={"tutor_id": tutor_id})

        payload: Dict[str, Any] = dict(session_summary)
        with self.transaction():
            self.notification_repository.create(
                user_id=profile.user_id,
                type=NotificationType.SESSION_REQUEST.value,
                title="New session request",
                message=self._build_message(session_summary),
                session_id=payload.get("session_id"),
                data=payload,
            )
        self.log_operation(
            "notify_tutor_of_booking_request",
            tutor_id=tutor_id,
            session_id=payload.get("session_id"),
        )
