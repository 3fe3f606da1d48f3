"""
Health check endpoints.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ... import __version__
from ..deps import SettingsDep, VisitRepositoryDep
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])
logger = logging.getLogger("visitflow")


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


@router.get("", response_model=ApiResponse[HealthResponse])
@router.get("/", response_model=ApiResponse[HealthResponse], include_in_schema=False)
async def health_check(request: Request, settings: SettingsDep):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return ok(
        request,
        data=HealthResponse(
            status="healthy",
            timestamp=datetime.utcnow(),
            version=__version__,
            service=settings.app_name,
        ),
        message="OK",
    )


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request, settings: SettingsDep, visit_repo: VisitRepositoryDep):
    """
    Readiness check endpoint.

    The visit store must answer; voice AI is reported but optional.
    """
    checks = {}
    ready = True
    try:
        await visit_repo.list_active()
        checks["visit_store"] = "ok"
    except Exception as e:
        logger.error("Readiness check failed: %s", e)
        checks["visit_store"] = f"error: {str(e)[:50]}"
        ready = False
    checks["voice_ai"] = "ok" if settings.voice_ai_available else "disabled"
    return ok(request, data={"ready": ready, "checks": checks}, message="Ready" if ready else "Not ready")


@router.get("/live", response_model=ApiResponse[dict])
async def liveness_check(request: Request):
    """Liveness check endpoint."""
    return ok(request, data={"alive": True}, message="Alive")
