# backend/tests/unit/domain/test_slot_generator.py
"""Unit tests for SlotGenerator."""

import pytest

from tutorbook.core.exceptions import ValidationException
from tutorbook.domain.availability import AvailabilityWindow
from tutorbook.domain.slots import CandidateSlot, SlotGenerator


def window(start, end, is_available=True):
    return AvailabilityWindow(start, end, weekday=0, is_available=is_available)


class TestSlotGenerator:
    def test_hourly_slots_fill_window(self):
        slots = SlotGenerator.generate([window(540, 720)], 60, 60)
        assert [(s.start, s.end) for s in slots] == [(540, 600), (600, 660), (660, 720)]
        assert all(s.available for s in slots)

    def test_step_smaller_than_duration_gives_overlapping_slots(self):
        slots = SlotGenerator.generate([window(540, 660)], 60, 30)
        assert [s.start for s in slots] == [540, 570, 600]
        assert all(s.end - s.start == 60 for s in slots)

    def test_slot_never_extends_past_window_end(self):
        slots = SlotGenerator.generate([window(540, 630)], 60, 60)
        assert [(s.start, s.end) for s in slots] == [(540, 600)]

    def test_window_shorter_than_duration_yields_nothing(self):
        assert SlotGenerator.generate([window(540, 570)], 60, 15) == []

    def test_windows_processed_in_start_order(self):
        slots = SlotGenerator.generate([window(840, 900), window(540, 600)], 60, 60)
        assert [s.start for s in slots] == [540, 840]

    def test_closed_windows_are_skipped(self):
        assert SlotGenerator.generate([window(540, 720, is_available=False)], 60, 60) == []

    def test_window_ending_at_midnight(self):
        slots = SlotGenerator.generate([window(1320, 1440)], 60, 60)
        assert slots[-1].to_dict() == {"start": "23:00", "end": "24:00", "available": True}

    @pytest.mark.parametrize("step", [0, -15])
    def test_non_positive_step_rejected(self, step):
        with pytest.raises(ValidationException):
            SlotGenerator.generate([window(540, 720)], 60, step)

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ValidationException):
            SlotGenerator.generate([window(540, 720)], 0, 60)

    def test_duration_outside_bounds_rejected_not_clamped(self):
        with pytest.raises(ValidationException):
            SlotGenerator.generate([window(540, 720)], 15, 60, min_duration=30, max_duration=180)
        with pytest.raises(ValidationException):
            SlotGenerator.generate([window(0, 1440)], 240, 60, min_duration=30, max_duration=180)

    def test_candidate_slot_serialization(self):
        assert CandidateSlot(start=570, end=630, available=False).to_dict() == {
            "start": "09:30",
            "end": "10:30",
            "available": False,
        }
