"""
FastAPI application factory and main app configuration.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.errors import status_for
from .api.routers import health, queue, visits, voice
from .api.utils.responses import fail
from .core.config import get_settings
from .core.exceptions import VisitFlowException
from .core.structured_logger import configure_logging
from .domain.errors import DomainError
from .middleware.operator_middleware import OperatorMiddleware
from .middleware.performance_middleware import PerformanceMiddleware
from .middleware.request_id_middleware import RequestIDMiddleware

logger = logging.getLogger("visitflow")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("Starting %s v%s", settings.app_name, settings.app_version)
    logger.info("Environment: %s debug=%s", settings.app_env, settings.debug)
    if settings.voice_ai_available:
        logger.info("Voice AI enabled (model=%s)", settings.voice.extraction_model)
    else:
        logger.warning("Voice AI disabled; manual form entry only")
    yield
    logger.info("Shutting down %s", settings.app_name)


def _error_response(request: Request, status_code: int, error: str, message: str, details=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=fail(request, error, message, details).model_dump(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Visitflow",
        description="Hospital visit lifecycle, queue and voice-assisted intake API",
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of registration; request IDs are set first
    app.add_middleware(OperatorMiddleware)
    app.add_middleware(PerformanceMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(visits.router)
    app.include_router(queue.router)
    app.include_router(voice.router)

    @app.get("/", tags=["health"])
    async def root():
        """Root endpoint with API information."""
        return {
            "service": settings.app_name,
            "version": __version__,
            "environment": settings.app_env,
            "voice_ai_enabled": settings.voice_ai_available,
            "docs": "/docs",
        }

    @app.exception_handler(DomainError)
    async def domain_error_handler(request: Request, exc: DomainError):
        status_code = status_for(exc)
        logger.warning(
            "DomainError: %s (%s) %s | request_id=%s",
            exc.error_code,
            status_code,
            exc.message,
            getattr(request.state, "request_id", None),
        )
        return _error_response(request, status_code, exc.error_code or "DOMAIN_ERROR", exc.message, exc.details)

    @app.exception_handler(VisitFlowException)
    async def infrastructure_error_handler(request: Request, exc: VisitFlowException):
        status_code = status_for(exc)
        logger.error(
            "%s: %s (%s) %s | request_id=%s",
            type(exc).__name__,
            exc.error_code,
            status_code,
            exc.message,
            getattr(request.state, "request_id", None),
        )
        return _error_response(request, status_code, exc.error_code or "INTERNAL_ERROR", exc.message, exc.details)

    @app.exception_handler(ValueError)
    async def validation_error_handler(request: Request, exc: ValueError):
        return _error_response(request, 422, "VALIDATION_ERROR", str(exc))

    @app.exception_handler(RequestValidationError)
    async def pydantic_error_handler(request: Request, exc: RequestValidationError):
        error_messages = []
        for error in exc.errors():
            loc = " -> ".join(str(x) for x in error.get("loc", []))
            error_messages.append(f"{loc}: {error.get('msg', 'Validation error')}")
        logger.warning("ValidationError on %s %s: %s", request.method, request.url.path, error_messages)
        return _error_response(
            request,
            422,
            "INVALID_INPUT",
            f"Input validation failed: {'; '.join(error_messages)}",
            {"errors": error_messages},
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        logger.error(
            "Unhandled error: %s | request_id=%s",
            type(exc).__name__,
            getattr(request.state, "request_id", None),
            exc_info=exc,
        )
        return _error_response(
            request, 500, "INTERNAL_ERROR", "An unexpected error has occurred. Please try again later."
        )

    return app


# Create the app instance
app = create_app()
