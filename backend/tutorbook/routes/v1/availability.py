# backend/tutorbook/routes/v1/availability.py
"""
Tutor availability routes - API v1

Endpoints:
    GET /tutors/{tutor_id}/availability - Weekly schedule and date exceptions
    PUT /tutors/{tutor_id}/availability - Replace the schedule and exceptions
"""

import logging

from fastapi import APIRouter, Depends

from ...api.dependencies import get_availability_service
from ...core.config import settings
from ...core.exceptions import DomainException
from ...schemas.availability import AvailabilityReplaceRequest, AvailabilityResponse
from ...services.availability_service import AvailabilityService
from .common import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-v1"])


@router.get(
    "/tutors/{tutor_id}/availability",
    response_model=AvailabilityResponse,
    response_model_by_alias=True,
)
def get_availability(
    tutor_id: str,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        model = availability_service.get_windows(tutor_id)
        return AvailabilityResponse.from_model(model, settings.platform_timezone)
    except DomainException as e:
        handle_domain_exception(e)


@router.put(
    "/tutors/{tutor_id}/availability",
    response_model=AvailabilityResponse,
    response_model_by_alias=True,
)
def replace_availability(
    tutor_id: str,
    payload: AvailabilityReplaceRequest,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    # Authentication and ownership checks happen upstream of this router
    try:
        windows = [window.to_domain() for window in payload.windows]
        model = availability_service.replace_windows(tutor_id, windows)
        return AvailabilityResponse.from_model(model, settings.platform_timezone)
    except DomainException as e:
        handle_domain_exception(e)
