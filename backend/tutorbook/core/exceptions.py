# backend/tutorbook/core/exceptions.py
"""
Domain-specific exceptions for the Tutorbook booking core.

Every precondition failure of the availability and booking services is
raised as exactly one of these types. The API layer converts them to
HTTP responses through ``to_http_exception``.
"""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code: Optional[str] = None

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.default_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.status_code, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when input fails validation. The caller fixes the input; never retried."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"


class NotFoundException(DomainException):
    """Raised when a tutor, subject or student does not exist or cannot be booked."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "CONFLICT"


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE
    default_code = "BUSINESS_RULE"


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "SERVICE_ERROR"


# Specific business exceptions


class AvailabilityOverlapException(ValidationException):
    """Raised when two availability windows of the same day overlap."""

    def __init__(self, day_label: str, new_range: str, conflicting_range: str):
        super().__init__(
            message=f"Overlapping window on {day_label}: {new_range} conflicts with {conflicting_range}",
            code="AVAILABILITY_OVERLAP",
            details={
                "day": day_label,
                "new_window": new_range,
                "conflicting_window": conflicting_range,
            },
        )


class PricingUnavailableException(ValidationException):
    """Raised when a tutor has no usable hourly rate."""

    def __init__(self, tutor_id: str):
        super().__init__(
            message="This tutor has not set an hourly rate and cannot be booked",
            code="PRICING_UNAVAILABLE",
            details={"tutor_id": tutor_id},
        )


class OutsideAvailabilityException(BusinessRuleException):
    """Raised when the requested interval is not inside any open availability window."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        nearest_windows: Optional[List[Dict[str, str]]] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        payload = dict(details or {})
        payload["nearest_windows"] = list(nearest_windows or [])
        super().__init__(
            message=message or "The requested time is outside the tutor's availability",
            code="OUTSIDE_AVAILABILITY",
            details=payload,
        )

    @property
    def nearest_windows(self) -> List[Dict[str, str]]:
        return list(self.details.get("nearest_windows", []))


class SlotConflictException(ConflictException):
    """Raised when the requested interval overlaps a non-cancelled session."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "This time slot is no longer available, please pick another time",
            code="SLOT_CONFLICT",
            details=details or {},
        )


class PersistenceException(ServiceException):
    """Raised when storage fails for reasons unrelated to a booking conflict."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_code = "PERSISTENCE_ERROR"

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.to_dict(),
            headers={"Retry-After": "2"},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """


class RepositoryIntegrityException(RepositoryException):
    """Raised when a write violates a database constraint."""
