# backend/tutorbook/routes/v1/sessions.py
"""
Session booking routes - API v1

Endpoints:
    POST /sessions - Request a session with a tutor (created as pending)
"""

import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies import get_booking_service
from ...core.exceptions import DomainException
from ...schemas.booking import SessionCreateRequest, SessionResponse
from ...services.booking_service import BookingService
from .common import handle_domain_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["sessions-v1"])


@router.post(
    "/sessions",
    response_model=SessionResponse,
    response_model_by_alias=True,
    status_code=status.HTTP_201_CREATED,
)
def create_session(
    payload: SessionCreateRequest,
    booking_service: BookingService = Depends(get_booking_service),
) -> SessionResponse:
    """
    Book a session.

    The price is always computed from the tutor's hourly rate; clients
    cannot set it.
    """
    try:
        booked = booking_service.book(
            student_id=payload.student_id,
            tutor_id=payload.tutor_id,
            subject_id=payload.subject_id,
            scheduled_at=payload.scheduled_at,
            duration_minutes=payload.duration_minutes,
            notes=payload.notes,
        )
        return SessionResponse.from_domain(booked)
    except DomainException as e:
        handle_domain_exception(e)
