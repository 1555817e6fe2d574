"""
Centralized timezone handling for Tutorbook.

Rules:
- Availability windows and slot times: wall clock in the platform zone
- Session storage: UTC
- All comparisons: UTC
- Clients send intent (a date plus a wall-clock time) that is converted once here
"""

from datetime import date, datetime, time, timedelta, timezone
from typing import Callable, Optional, Tuple

import pytz

from .config import settings
from .constants import MINUTES_PER_DAY

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock; services accept any callable returning an aware datetime."""
    return datetime.now(timezone.utc)


class TimezoneService:
    """Handles all timezone conversions consistently."""

    DEFAULT_TIMEZONE = settings.platform_timezone

    @staticmethod
    def get_timezone(tz_str: Optional[str] = None) -> pytz.BaseTzInfo:
        """Get timezone object, with fallback to the platform zone."""
        try:
            return pytz.timezone(tz_str or TimezoneService.DEFAULT_TIMEZONE)
        except pytz.UnknownTimeZoneError:
            return pytz.timezone(TimezoneService.DEFAULT_TIMEZONE)

    @staticmethod
    def local_to_utc(local_date: date, local_time: time, timezone_str: Optional[str] = None) -> datetime:
        """
        Convert local date/time to UTC.

        Uses the timezone rules valid on local_date (not today), so DST
        transitions are handled.

        Raises:
            ValueError: If the time doesn't exist (DST spring-forward gap)
        """
        tz = TimezoneService.get_timezone(timezone_str)
        naive_dt = datetime.combine(local_date, local_time)  # naive on purpose for pytz.localize()

        try:
            local_dt = tz.localize(naive_dt, is_dst=None)
        except pytz.exceptions.AmbiguousTimeError:
            # Fall back (time exists twice) - use first occurrence
            local_dt = tz.localize(naive_dt, is_dst=True)
        except pytz.exceptions.NonExistentTimeError:
            raise ValueError(
                f"The time {local_time.strftime('%H:%M')} does not exist on "
                f"{local_date} in {tz.zone} due to Daylight Saving Time. "
                f"Please select a different time."
            )

        return local_dt.astimezone(timezone.utc)

    @staticmethod
    def minute_to_utc(local_date: date, minute: int, timezone_str: Optional[str] = None) -> datetime:
        """Convert a minute-of-day on a local date to UTC. Minute 1440 is next midnight."""
        if not 0 <= minute <= MINUTES_PER_DAY:
            raise ValueError(f"minute out of range: {minute}")
        if minute == MINUTES_PER_DAY:
            return TimezoneService.local_to_utc(local_date + timedelta(days=1), time(0, 0), timezone_str)
        return TimezoneService.local_to_utc(
            local_date, time(minute // 60, minute % 60), timezone_str
        )

    @staticmethod
    def utc_to_local(utc_dt: datetime, timezone_str: Optional[str] = None) -> datetime:
        """Convert UTC datetime to local timezone."""
        if utc_dt.tzinfo is None:
            utc_dt = utc_dt.replace(tzinfo=timezone.utc)

        tz = TimezoneService.get_timezone(timezone_str)
        return utc_dt.astimezone(tz)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """Attach UTC to naive values read back from storage and normalize aware ones."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_local_wall_clock(
        value: datetime, timezone_str: Optional[str] = None
    ) -> Tuple[date, int, datetime]:
        """
        Resolve a client-supplied timestamp to (local date, minute-of-day, UTC instant).

        A naive value is platform wall clock; an aware value is converted to the
        platform zone first.

        Raises:
            ValueError: If a naive value falls in a DST gap
        """
        if value.tzinfo is None:
            utc_value = TimezoneService.local_to_utc(value.date(), value.time(), timezone_str)
            local = value
        else:
            utc_value = value.astimezone(timezone.utc)
            local = TimezoneService.utc_to_local(utc_value, timezone_str)
        minute = local.hour * 60 + local.minute
        return local.date(), minute, utc_value

    @staticmethod
    def today(now_utc: datetime, timezone_str: Optional[str] = None) -> date:
        """Today's date in the platform zone for the given instant."""
        return TimezoneService.utc_to_local(now_utc, timezone_str).date()

    @staticmethod
    def day_bounds_utc(local_date: date, timezone_str: Optional[str] = None) -> Tuple[datetime, datetime]:
        """UTC instants of local midnight and the following local midnight."""
        tz = TimezoneService.get_timezone(timezone_str)
        start = tz.localize(datetime.combine(local_date, time(0, 0))).astimezone(timezone.utc)
        end = tz.localize(datetime.combine(local_date + timedelta(days=1), time(0, 0))).astimezone(
            timezone.utc
        )
        return start, end

    @staticmethod
    def is_past(instant_utc: datetime, now_utc: datetime) -> bool:
        """Check if an instant lies before now."""
        return TimezoneService.ensure_utc(instant_utc) < TimezoneService.ensure_utc(now_utc)

    @staticmethod
    def format_for_display(utc_dt: datetime, timezone_str: Optional[str] = None) -> str:
        """
        Format a UTC datetime for display in a specific timezone.

        Returns: e.g., "Dec 25, 2025 at 2:00 PM +03"
        """
        local_dt = TimezoneService.utc_to_local(utc_dt, timezone_str)
        return local_dt.strftime("%b %d, %Y at %I:%M %p %Z")
