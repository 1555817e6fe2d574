"""Application-wide constants for the Tutorbook platform."""

from __future__ import annotations

BRAND_NAME = "Tutorbook"

MINUTES_PER_DAY = 24 * 60

# Session duration constraints (the booking form offers 30 to 180 minutes)
MIN_SESSION_DURATION = 30  # minutes
MAX_SESSION_DURATION = 180  # minutes

# Candidate slot start times are generated on this grid unless the caller overrides it
DEFAULT_SLOT_STEP_MINUTES = 60

# Prices are stored in integer cents (1000 = 10.00 in the platform currency)
PLATFORM_CURRENCY = "BHD"

# One zone for every day boundary; Bahrain observes no daylight saving time
DEFAULT_PLATFORM_TIMEZONE = "Asia/Bahrain"

# How many windows an OutsideAvailability error suggests
NEAREST_WINDOW_HINTS = 2

# Text constraints
MAX_NOTES_LENGTH = 2000
