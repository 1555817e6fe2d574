# backend/tutorbook/schemas/slots.py
import datetime
from typing import List

from ..domain.slots import CandidateSlot
from ..utils.time_utils import minutes_to_time_str
from ._strict_base import StrictModel


class SlotOut(StrictModel):
    start: str
    end: str
    available: bool

    @classmethod
    def from_domain(cls, slot: CandidateSlot) -> "SlotOut":
        return cls(
            start=minutes_to_time_str(slot.start),
            end=minutes_to_time_str(slot.end),
            available=slot.available,
        )


class SlotsResponse(StrictModel):
    tutor_id: str
    date: datetime.date
    timezone: str
    duration_minutes: int
    step_minutes: int
    slots: List[SlotOut]
