# backend/tests/unit/services/test_availability_service.py
"""Tests for tutor-side availability management."""

from unittest.mock import patch

import pytest

from tutorbook.core.exceptions import (
    AvailabilityOverlapException,
    NotFoundException,
    PersistenceException,
    RepositoryException,
)
from tutorbook.domain.availability import AvailabilityWindow
from tutorbook.models.availability import AvailabilityWindowRecord
from tutorbook.services.availability_service import AvailabilityService


@pytest.fixture
def service(db):
    return AvailabilityService(db)


class TestReplaceWindows:
    def test_replaces_all_windows(self, db, service, tutor):
        model = service.replace_windows(
            tutor.id,
            [AvailabilityWindow(600, 660, weekday=2), AvailabilityWindow(1080, 1440, weekday=2)],
        )

        assert [w.range_label for w in model.windows] == ["10:00-11:00", "18:00-24:00"]
        assert db.query(AvailabilityWindowRecord).filter_by(tutor_id=tutor.id).count() == 2

    def test_overlap_rejected_before_writing(self, db, service, tutor):
        with pytest.raises(AvailabilityOverlapException):
            service.replace_windows(
                tutor.id,
                [AvailabilityWindow(540, 720, weekday=0), AvailabilityWindow(660, 780, weekday=0)],
            )
        assert db.query(AvailabilityWindowRecord).filter_by(tutor_id=tutor.id).count() == 1

    def test_unknown_tutor(self, service):
        with pytest.raises(NotFoundException):
            service.replace_windows("missing", [])

    def test_write_failure_becomes_persistence_error(self, service, tutor):
        with patch.object(
            service.repository, "replace_for_tutor", side_effect=RepositoryException("disk full")
        ):
            with pytest.raises(PersistenceException):
                service.replace_windows(tutor.id, [AvailabilityWindow(600, 660, weekday=2)])


class TestGetWindows:
    def test_returns_model(self, service, tutor):
        model = service.get_windows(tutor.id)
        assert [w.range_label for w in model.windows] == ["09:00-12:00"]

    def test_read_failure_becomes_persistence_error(self, service, tutor):
        with patch.object(
            service.repository, "get_for_tutor", side_effect=RepositoryException("connection lost")
        ):
            with pytest.raises(PersistenceException):
                service.get_windows(tutor.id)

    def test_tutor_lookup_failure_becomes_persistence_error(self, service):
        with patch.object(
            service.tutor_repository, "get_by_id", side_effect=RepositoryException("connection lost")
        ):
            with pytest.raises(PersistenceException):
                service.get_windows("tutor-1")
