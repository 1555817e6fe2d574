# backend/tutorbook/repositories/availability_repository.py
"""Availability window storage for tutors."""

import logging
from typing import Any, Dict, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.availability import AvailabilityWindowRecord
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class AvailabilityRepository(BaseRepository[AvailabilityWindowRecord]):
    def __init__(self, db: Session):
        super().__init__(db, AvailabilityWindowRecord)
        self.logger = logging.getLogger(__name__)

    def get_for_tutor(self, tutor_id: str) -> List[AvailabilityWindowRecord]:
        try:
            return (
                self.db.query(AvailabilityWindowRecord)
                .filter(AvailabilityWindowRecord.tutor_id == tutor_id)
                .order_by(
                    AvailabilityWindowRecord.weekday,
                    AvailabilityWindowRecord.specific_date,
                    AvailabilityWindowRecord.start_minute,
                )
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading availability for tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to load availability: {str(e)}") from e

    def replace_for_tutor(
        self, tutor_id: str, windows: List[Dict[str, Any]]
    ) -> List[AvailabilityWindowRecord]:
        """Delete every window of the tutor and insert the given ones. Does not commit."""
        try:
            self.db.query(AvailabilityWindowRecord).filter(
                AvailabilityWindowRecord.tutor_id == tutor_id
            ).delete(synchronize_session=False)
            records = [AvailabilityWindowRecord(tutor_id=tutor_id, **data) for data in windows]
            self.db.add_all(records)
            self.db.flush()
            return records
        except SQLAlchemyError as e:
            self.logger.error(f"Error replacing availability for tutor {tutor_id}: {str(e)}")
            self.db.rollback()
            raise RepositoryException(f"Failed to replace availability: {str(e)}") from e
