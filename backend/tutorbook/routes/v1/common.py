# backend/tutorbook/routes/v1/common.py
from typing import NoReturn, Optional

from ...core.exceptions import DomainException, ValidationException


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    raise exc.to_http_exception() from exc


def pick_param(name: str, camel: Optional[int], snake: Optional[int], default: Optional[int]) -> Optional[int]:
    """Resolve a query parameter that may be sent in camelCase or snake_case."""
    if camel is not None and snake is not None and camel != snake:
        raise ValidationException(
            f"Conflicting values for {name}", details={"field": name}
        )
    if camel is not None:
        return camel
    if snake is not None:
        return snake
    return default
