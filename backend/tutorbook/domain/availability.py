"""
Availability model for one tutor.

A tutor publishes recurring weekly windows (keyed by weekday, 0 = Monday)
and one-off exceptions for specific dates. Exceptions for a date replace
the weekly schedule of that date entirely; a closed marker at the chosen
level closes the whole day.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from typing import DefaultDict, Dict, Iterable, List, Optional, Tuple, Union

from ..core.constants import MINUTES_PER_DAY, NEAREST_WINDOW_HINTS
from ..core.exceptions import AvailabilityOverlapException, ValidationException
from ..utils.time_utils import minutes_to_time_str

WEEKDAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")

_GroupKey = Union[int, date]


@dataclass(frozen=True)
class AvailabilityWindow:
    start_minute: int
    end_minute: int
    weekday: Optional[int] = None
    date: Optional[date] = None
    is_available: bool = True

    def __post_init__(self) -> None:
        if (self.weekday is None) == (self.date is None):
            raise ValidationException(
                "An availability window needs either a weekday or a specific date",
                details={"weekday": self.weekday, "date": str(self.date) if self.date else None},
            )
        if self.weekday is not None and not 0 <= self.weekday <= 6:
            raise ValidationException(
                "Weekday must be between 0 (Monday) and 6 (Sunday)",
                details={"weekday": self.weekday},
            )
        if not 0 <= self.start_minute < MINUTES_PER_DAY:
            raise ValidationException(
                "Window start must be between 00:00 and 23:59",
                details={"start_minute": self.start_minute},
            )
        if not 0 < self.end_minute <= MINUTES_PER_DAY:
            raise ValidationException(
                "Window end must be between 00:01 and 24:00",
                details={"end_minute": self.end_minute},
            )
        if self.start_minute >= self.end_minute:
            raise ValidationException(
                "Window start must be before window end",
                details={"start": self.start_label, "end": self.end_label},
            )

    @property
    def start_label(self) -> str:
        return minutes_to_time_str(self.start_minute)

    @property
    def end_label(self) -> str:
        return minutes_to_time_str(self.end_minute)

    @property
    def range_label(self) -> str:
        return f"{self.start_label}-{self.end_label}"

    @property
    def day_label(self) -> str:
        if self.date is not None:
            return self.date.isoformat()
        assert self.weekday is not None
        return WEEKDAY_NAMES[self.weekday]

    def overlaps(self, other: "AvailabilityWindow") -> bool:
        """Half-open overlap; windows that only touch do not overlap."""
        return self.start_minute < other.end_minute and other.start_minute < self.end_minute

    def contains(self, start_minute: int, end_minute: int) -> bool:
        return self.start_minute <= start_minute and end_minute <= self.end_minute

    def distance_to(self, minute: int) -> int:
        """Minutes between ``minute`` and the nearest edge of this window (0 if inside)."""
        if minute < self.start_minute:
            return self.start_minute - minute
        if minute > self.end_minute:
            return minute - self.end_minute
        return 0

    def to_hint(self) -> Dict[str, str]:
        return {"start": self.start_label, "end": self.end_label}


class AvailabilityModel:
    """
    A tutor's availability: recurring weekday windows plus date exceptions.

    Immutable after construction. Construction rejects overlapping open
    windows within the same weekday or the same exception date.
    """

    def __init__(self, tutor_id: str, windows: Iterable[AvailabilityWindow] = ()):
        self.tutor_id = tutor_id
        self._recurring: DefaultDict[int, List[AvailabilityWindow]] = defaultdict(list)
        self._exceptions: DefaultDict[date, List[AvailabilityWindow]] = defaultdict(list)

        for window in windows:
            if window.date is not None:
                self._exceptions[window.date].append(window)
            else:
                assert window.weekday is not None
                self._recurring[window.weekday].append(window)

        for weekday_group in self._recurring.values():
            weekday_group.sort(key=lambda w: (w.start_minute, w.end_minute))
            self._validate_group(weekday_group)
        for date_group in self._exceptions.values():
            date_group.sort(key=lambda w: (w.start_minute, w.end_minute))
            self._validate_group(date_group)

    @staticmethod
    def _validate_group(group: List[AvailabilityWindow]) -> None:
        # Closed markers close the whole day; only open windows must be disjoint
        open_windows = [w for w in group if w.is_available]
        for previous, current in zip(open_windows, open_windows[1:]):
            if previous.overlaps(current):
                raise AvailabilityOverlapException(
                    current.day_label, current.range_label, previous.range_label
                )

    @property
    def windows(self) -> List[AvailabilityWindow]:
        """Every stored window, recurring first, in a stable order."""
        result: List[AvailabilityWindow] = []
        for weekday in sorted(self._recurring):
            result.extend(self._recurring[weekday])
        for exception_date in sorted(self._exceptions):
            result.extend(self._exceptions[exception_date])
        return result

    def has_exception(self, target_date: date) -> bool:
        return bool(self._exceptions.get(target_date))

    def windows_for(self, target_date: date) -> List[AvailabilityWindow]:
        """
        Resolve the open windows of a date, ordered by start.

        Exceptions for the date take precedence over the weekday schedule.
        Any closed marker at the chosen level yields an empty list.
        """
        level = self._exceptions.get(target_date) or self._recurring.get(target_date.weekday(), [])
        if any(not w.is_available for w in level):
            return []
        return list(level)

    def contains(self, target_date: date, start_minute: int, end_minute: int) -> bool:
        """True when [start, end) lies fully inside one open window of the date."""
        return any(w.contains(start_minute, end_minute) for w in self.windows_for(target_date))

    def nearest_windows(
        self, target_date: date, minute: int, limit: int = NEAREST_WINDOW_HINTS
    ) -> List[AvailabilityWindow]:
        """Open windows of the date ordered by distance from ``minute``."""
        ranked: List[Tuple[int, int, AvailabilityWindow]] = [
            (w.distance_to(minute), w.start_minute, w) for w in self.windows_for(target_date)
        ]
        ranked.sort(key=lambda item: (item[0], item[1]))
        return [w for _, _, w in ranked[:limit]]

    def __repr__(self) -> str:
        return (
            f"AvailabilityModel(tutor_id={self.tutor_id!r}, "
            f"recurring={sum(len(v) for v in self._recurring.values())}, "
            f"exceptions={sum(len(v) for v in self._exceptions.values())})"
        )
