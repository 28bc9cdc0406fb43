"""TravelBuddy FastAPI application.

Main entry point for the backend API server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from travelbuddy.api import router
from travelbuddy.config import Settings, get_settings
from travelbuddy.models import AppError
from travelbuddy.services.container import ServiceContainer

logger = logging.getLogger(__name__)


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return ", ".join(parts)


def create_app(
    settings: Optional[Settings] = None,
    services: Optional[ServiceContainer] = None,
) -> FastAPI:
    """Build the application.

    Args:
        settings: Defaults to :func:`get_settings`.
        services: Prebuilt services (tests pass fakes here). When omitted
            they are built from ``settings`` at startup and closed on
            shutdown.
    """
    settings = settings or get_settings()

    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        app.state.services = services or ServiceContainer.from_settings(settings)
        logger.info("[APP] Services ready")
        yield
        if owned:
            await app.state.services.aclose()

    app = FastAPI(
        title="TravelBuddy API",
        description="Trip planning over OpenStreetMap places, Groq and OpenWeatherMap",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        level = logging.ERROR if exc.status_code >= 500 else logging.INFO
        logger.log(
            level,
            f"[API] {request.method} {request.url.path} -> {exc.status_code} "
            f"{exc.code.value}: {exc.message}",
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Malformed bodies or wrongly typed fields."""
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": _format_validation_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"[API] Unhandled error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy"}

    return app


app = create_app()
