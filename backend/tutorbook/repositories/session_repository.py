# backend/tutorbook/repositories/session_repository.py
"""
Tutoring session repository.

Interval queries use half-open overlap on the stored UTC instants:
a session overlaps [start, end) when scheduled_at < end and ends_at > start.
"""

from datetime import datetime
import logging
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.enums import SessionStatus
from ..core.exceptions import RepositoryException
from ..models.session import TutoringSession
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class SessionRepository(BaseRepository[TutoringSession]):
    def __init__(self, db: Session):
        super().__init__(db, TutoringSession)
        self.logger = logging.getLogger(__name__)

    def get_overlapping(
        self,
        tutor_id: str,
        start_utc: datetime,
        end_utc: datetime,
        statuses: Optional[Iterable[SessionStatus]] = None,
    ) -> List[TutoringSession]:
        """Sessions of a tutor whose interval overlaps [start_utc, end_utc)."""
        try:
            query = self.db.query(TutoringSession).filter(
                TutoringSession.tutor_id == tutor_id,
                TutoringSession.scheduled_at < end_utc,
                TutoringSession.ends_at > start_utc,
            )
            if statuses is not None:
                query = query.filter(TutoringSession.status.in_([s.value for s in statuses]))
            return query.order_by(TutoringSession.scheduled_at).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading sessions for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to load sessions: {str(e)}") from e

    def get_non_cancelled(
        self, tutor_id: str, start_utc: datetime, end_utc: datetime
    ) -> List[TutoringSession]:
        statuses = [s for s in SessionStatus if s != SessionStatus.CANCELLED]
        return self.get_overlapping(tutor_id, start_utc, end_utc, statuses)
