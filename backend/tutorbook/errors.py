# backend/tutorbook/errors.py
"""
App-level error handlers.

Routes convert ``DomainException`` into ``HTTPException`` themselves; this
handler covers anything raised outside a route body (dependencies,
middleware) so every domain error reaches the client in the same
``{"detail": {"message", "code", "details"}}`` shape.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from .core.exceptions import DomainException

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DomainException)
    async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
        http_exc = exc.to_http_exception()
        if http_exc.status_code >= 500:
            logger.error(
                "Domain error on %s %s: %s",
                request.method,
                request.url.path,
                exc.message,
                extra={"code": exc.code},
            )
        return JSONResponse(
            status_code=http_exc.status_code,
            content={"detail": jsonable_encoder(http_exc.detail)},
            headers=http_exc.headers,
        )
