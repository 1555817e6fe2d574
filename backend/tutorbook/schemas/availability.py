# backend/tutorbook/schemas/availability.py
"""
Availability schemas.

Times travel as "HH:MM" strings of the platform-local day; "24:00" marks
the end of the day.
"""

import datetime
from typing import List, Optional

from pydantic import Field, field_validator, model_validator

from ..domain.availability import AvailabilityModel, AvailabilityWindow
from ..utils.time_utils import time_str_to_minutes
from ._strict_base import StrictModel, StrictRequestModel


class AvailabilityWindowIn(StrictRequestModel):
    weekday: Optional[int] = Field(default=None, ge=0, le=6, description="0 = Monday")
    date: Optional[datetime.date] = None
    start_time: str = Field(..., examples=["09:00"])
    end_time: str = Field(..., examples=["12:00"])
    is_available: bool = True

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, v: str) -> str:
        time_str_to_minutes(v)
        return v

    @model_validator(mode="after")
    def validate_day(self) -> "AvailabilityWindowIn":
        if (self.weekday is None) == (self.date is None):
            raise ValueError("Provide exactly one of weekday or date")
        return self

    def to_domain(self) -> AvailabilityWindow:
        return AvailabilityWindow(
            start_minute=time_str_to_minutes(self.start_time),
            end_minute=time_str_to_minutes(self.end_time),
            weekday=self.weekday,
            date=self.date,
            is_available=self.is_available,
        )


class AvailabilityReplaceRequest(StrictRequestModel):
    windows: List[AvailabilityWindowIn] = Field(default_factory=list)


class AvailabilityWindowOut(StrictModel):
    weekday: Optional[int] = None
    date: Optional[datetime.date] = None
    start_time: str
    end_time: str
    is_available: bool

    @classmethod
    def from_domain(cls, window: AvailabilityWindow) -> "AvailabilityWindowOut":
        return cls(
            weekday=window.weekday,
            date=window.date,
            start_time=window.start_label,
            end_time=window.end_label,
            is_available=window.is_available,
        )


class AvailabilityResponse(StrictModel):
    tutor_id: str
    timezone: str
    windows: List[AvailabilityWindowOut]

    @classmethod
    def from_model(cls, model: AvailabilityModel, timezone: str) -> "AvailabilityResponse":
        return cls(
            tutor_id=model.tutor_id,
            timezone=timezone,
            windows=[AvailabilityWindowOut.from_domain(w) for w in model.windows],
        )
