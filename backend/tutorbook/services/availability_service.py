# backend/tutorbook/services/availability_service.py
"""
Availability Service for Tutorbook

Tutor-side management of the weekly schedule and date exceptions. The
whole set of windows is replaced at once so the no-overlap rule can be
checked against the final state before anything is written.
"""

import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, PersistenceException, RepositoryException
from ..domain.availability import AvailabilityModel, AvailabilityWindow
from ..repositories.factory import RepositoryFactory
from ..repositories.gateway import to_availability_window
from .base import BaseService

logger = logging.getLogger(__name__)


class AvailabilityService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.tutor_repository = RepositoryFactory.create_tutor_repository(db)
        self.repository = RepositoryFactory.create_availability_repository(db)

    def _read(self, fn, *args, **kwargs):
        """Run a repository read, turning storage failures into ``PersistenceException``."""
        try:
            return fn(*args, **kwargs)
        except RepositoryException as exc:
            raise PersistenceException(
                "Storage is temporarily unavailable",
                details={"error_type": type(exc).__name__},
            ) from exc

    def _require_tutor(self, tutor_id: str) -> None:
        if self._read(self.tutor_repository.get_by_id, tutor_id, False) is None:
            raise NotFoundException("Tutor not found", details={"tutor_id": tutor_id})

    @BaseService.measure_operation("get_windows")
    def get_windows(self, tutor_id: str) -> AvailabilityModel:
        self._require_tutor(tutor_id)
        records = self._read(self.repository.get_for_tutor, tutor_id)
        return AvailabilityModel(tutor_id, (to_availability_window(r) for r in records))

    @BaseService.measure_operation("replace_windows")
    def replace_windows(
        self, tutor_id: str, windows: Iterable[AvailabilityWindow]
    ) -> AvailabilityModel:
        """
        Replace every window of a tutor.

        Raises:
            NotFoundException: Unknown tutor
            AvailabilityOverlapException: Two open windows of one day overlap
        """
        self._require_tutor(tutor_id)
        model = AvailabilityModel(tutor_id, windows)

        rows: List[dict] = [
            {
                "weekday": w.weekday,
                "specific_date": w.date,
                "start_minute": w.start_minute,
                "end_minute": w.end_minute,
                "is_available": w.is_available,
            }
            for w in model.windows
        ]
        with self.transaction():
            self.repository.replace_for_tutor(tutor_id, rows)

        self.log_operation("replace_windows", tutor_id=tutor_id, window_count=len(rows))
        return model
