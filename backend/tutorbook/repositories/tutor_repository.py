# backend/tutorbook/repositories/tutor_repository.py
"""
Tutor profile repository.

Besides plain lookups this repository takes the row lock that serializes
concurrent bookings of one tutor on PostgreSQL.
"""

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, selectinload

from ..core.exceptions import RepositoryException
from ..models.tutor import Subject, TutorProfile
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class TutorRepository(BaseRepository[TutorProfile]):
    def __init__(self, db: Session):
        super().__init__(db, TutorProfile)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(selectinload(TutorProfile.subjects))

    def lock_for_booking(self, tutor_id: str) -> Optional[TutorProfile]:
        """
        Select the tutor row FOR UPDATE on PostgreSQL.

        SQLite has no row locks; there the process lock and the single
        writer already serialize inserts.
        """
        try:
            query = self.db.query(TutorProfile).filter(TutorProfile.id == tutor_id)
            if self.dialect_name == "postgresql":
                query = query.with_for_update()
            return query.first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking tutor {tutor_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock tutor: {str(e)}") from e


class SubjectRepository(BaseRepository[Subject]):
    def __init__(self, db: Session):
        super().__init__(db, Subject)
