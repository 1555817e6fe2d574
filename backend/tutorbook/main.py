# backend/tutorbook/main.py
"""
Tutorbook booking API.

Run locally with:
    uvicorn tutorbook.main:app --reload
"""

import logging

from fastapi import APIRouter, FastAPI

from .core.config import settings
from .core.constants import BRAND_NAME
from .errors import register_error_handlers
from .routes.v1 import availability as availability_v1
from .routes.v1 import metrics as metrics_v1
from .routes.v1 import sessions as sessions_v1
from .routes.v1 import slots as slots_v1

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

API_TITLE = f"{BRAND_NAME} API"
API_VERSION = "0.1.0"


def create_app() -> FastAPI:
    app = FastAPI(
        title=API_TITLE,
        description="Tutor availability and session booking",
        version=API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    register_error_handlers(app)

    api_v1 = APIRouter(prefix="/api/v1")
    api_v1.include_router(slots_v1.router)
    api_v1.include_router(availability_v1.router)
    api_v1.include_router(sessions_v1.router)
    app.include_router(api_v1)
    app.include_router(metrics_v1.router)

    @app.get("/health", include_in_schema=False)
    def health_check() -> dict:
        return {"status": "ok", "environment": settings.environment}

    logger.info(
        "Application configured",
        extra={"environment": settings.environment, "timezone": settings.platform_timezone},
    )
    return app


app = create_app()
