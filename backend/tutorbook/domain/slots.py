"""Candidate slot generation over availability windows."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from ..core.constants import DEFAULT_SLOT_STEP_MINUTES
from ..core.exceptions import ValidationException
from ..utils.time_utils import minutes_to_time_str
from .availability import AvailabilityWindow


@dataclass(frozen=True)
class CandidateSlot:
    """A bookable start time of fixed duration, in minutes of the local day."""

    start: int
    end: int
    available: bool = True

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_dict(self) -> Dict[str, object]:
        return {
            "start": minutes_to_time_str(self.start),
            "end": minutes_to_time_str(self.end),
            "available": self.available,
        }


class SlotGenerator:
    """
    Expand availability windows into candidate slots.

    Slots start at each window's start and every ``step`` minutes after it,
    as long as the whole duration still fits before the window end. The
    grid advances by step, not by duration, so slots may overlap each other.
    """

    @staticmethod
    def generate(
        windows: Iterable[AvailabilityWindow],
        duration_minutes: int,
        step_minutes: int = DEFAULT_SLOT_STEP_MINUTES,
        *,
        min_duration: Optional[int] = None,
        max_duration: Optional[int] = None,
    ) -> List[CandidateSlot]:
        if step_minutes <= 0:
            raise ValidationException(
                "Step must be a positive number of minutes",
                details={"step_minutes": step_minutes},
            )
        if duration_minutes <= 0:
            raise ValidationException(
                "Duration must be a positive number of minutes",
                details={"duration_minutes": duration_minutes},
            )
        if (min_duration is not None and duration_minutes < min_duration) or (
            max_duration is not None and duration_minutes > max_duration
        ):
            raise ValidationException(
                f"Duration must be between {min_duration} and {max_duration} minutes",
                details={
                    "duration_minutes": duration_minutes,
                    "min_duration": min_duration,
                    "max_duration": max_duration,
                },
            )

        slots: List[CandidateSlot] = []
        ordered = sorted(
            (w for w in windows if w.is_available), key=lambda w: (w.start_minute, w.end_minute)
        )
        for window in ordered:
            start = window.start_minute
            while start + duration_minutes <= window.end_minute:
                slots.append(CandidateSlot(start=start, end=start + duration_minutes))
                start += step_minutes
        return slots
