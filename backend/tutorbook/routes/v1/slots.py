# backend/tutorbook/routes/v1/slots.py
"""
Slot query routes - API v1

Endpoints:
    GET /tutors/{tutor_id}/slots - Candidate start times for a date and duration
"""

from datetime import date
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...api.dependencies import get_availability_query_service
from ...core.exceptions import DomainException, ValidationException
from ...schemas.slots import SlotOut, SlotsResponse
from ...services.availability_query_service import AvailabilityQueryService
from .common import handle_domain_exception, pick_param

logger = logging.getLogger(__name__)

router = APIRouter(tags=["slots-v1"])


@router.get(
    "/tutors/{tutor_id}/slots",
    response_model=SlotsResponse,
    response_model_by_alias=True,
)
def get_tutor_slots(
    tutor_id: str,
    target_date: date = Query(..., alias="date"),
    duration_camel: Optional[int] = Query(None, alias="durationMinutes"),
    duration_snake: Optional[int] = Query(None, alias="duration_minutes"),
    step_camel: Optional[int] = Query(None, alias="stepMinutes"),
    step_snake: Optional[int] = Query(None, alias="step_minutes"),
    service: AvailabilityQueryService = Depends(get_availability_query_service),
) -> SlotsResponse:
    """
    List candidate slots for a tutor on a date.

    Every slot is returned with an ``available`` flag; unavailable slots are
    kept so clients can render the full grid.
    """
    try:
        duration = pick_param("durationMinutes", duration_camel, duration_snake, None)
        if duration is None:
            raise ValidationException(
                "durationMinutes is required", details={"field": "durationMinutes"}
            )
        step = pick_param("stepMinutes", step_camel, step_snake, None)
        slots = service.query(tutor_id, target_date, duration, step)
        return SlotsResponse(
            tutor_id=tutor_id,
            date=target_date,
            timezone=service.timezone,
            duration_minutes=duration,
            step_minutes=step if step is not None else service.config.slot_step_default_minutes,
            slots=[SlotOut.from_domain(slot) for slot in slots],
        )
    except DomainException as e:
        handle_domain_exception(e)
