"""
Conflict detection between candidate intervals and committed sessions.

All comparisons happen on absolute UTC instants. Candidates are expressed
in minutes of a local day; ``DayFrame`` converts them using the zone rules
valid on that date, so days with a DST change are handled correctly.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.timezone_service import TimezoneService
from .sessions import BookedSession
from .slots import CandidateSlot


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open interval overlap: [a) and [b) that only touch do not overlap."""
    return start_a < end_b and end_a > start_b


@dataclass(frozen=True)
class DayFrame:
    """A local calendar date in a given zone."""

    local_date: date
    timezone: Optional[str] = None

    def instant(self, minute: int) -> Optional[datetime]:
        """UTC instant of a minute-of-day, or None if that wall-clock time does not exist."""
        try:
            return TimezoneService.minute_to_utc(self.local_date, minute, self.timezone)
        except ValueError:
            return None

    def interval(self, start_minute: int, end_minute: int) -> Optional[Tuple[datetime, datetime]]:
        start_at = self.instant(start_minute)
        end_at = self.instant(end_minute)
        if start_at is None or end_at is None:
            return None
        return start_at, end_at


class BookingConflictChecker:
    """
    Marks candidate slots against the sessions already on a tutor's calendar.

    Only pending, scheduled and in-progress sessions block time; completed
    and cancelled sessions never do.
    """

    @staticmethod
    def blocking(sessions: Iterable[BookedSession]) -> List[BookedSession]:
        return [s for s in sessions if s.is_blocking]

    @staticmethod
    def conflicts_for(
        start_at: datetime, end_at: datetime, sessions: Iterable[BookedSession]
    ) -> List[BookedSession]:
        """Blocking sessions that overlap the absolute interval [start_at, end_at)."""
        start_at = TimezoneService.ensure_utc(start_at)
        end_at = TimezoneService.ensure_utc(end_at)
        return [
            s
            for s in BookingConflictChecker.blocking(sessions)
            if overlaps(
                start_at,
                end_at,
                TimezoneService.ensure_utc(s.scheduled_at),
                TimezoneService.ensure_utc(s.ends_at),
            )
        ]

    @staticmethod
    def mark(
        candidates: Sequence[CandidateSlot],
        sessions: Iterable[BookedSession],
        day: DayFrame,
        now: Optional[datetime] = None,
    ) -> List[CandidateSlot]:
        """
        Return the candidates in the same order with ``available`` set.

        A candidate is unavailable when it overlaps a blocking session, when
        its local time does not exist on the day, or when it starts before
        ``now``.
        """
        blocking = BookingConflictChecker.blocking(sessions)
        now_utc = TimezoneService.ensure_utc(now) if now is not None else None

        marked: List[CandidateSlot] = []
        for candidate in candidates:
            interval = day.interval(candidate.start, candidate.end)
            if interval is None:
                marked.append(replace(candidate, available=False))
                continue

            start_at, end_at = interval
            if now_utc is not None and start_at < now_utc:
                marked.append(replace(candidate, available=False))
                continue

            taken = any(
                overlaps(
                    start_at,
                    end_at,
                    TimezoneService.ensure_utc(s.scheduled_at),
                    TimezoneService.ensure_utc(s.ends_at),
                )
                for s in blocking
            )
            marked.append(replace(candidate, available=not taken))
        return marked
