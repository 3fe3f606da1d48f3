"""Operator middleware to extract X-Operator-ID / X-Operator-Role per request."""

import logging
import re
from dataclasses import dataclass

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from visitflow.core.config import get_settings

logger = logging.getLogger("visitflow")

OPERATOR_ROLES = ("NURSE", "DOCTOR", "PHARMACIST", "RECEPTIONIST", "ADMIN")

_OPERATOR_ID = re.compile(r"^[A-Za-z0-9_-]{1,100}$")


@dataclass(frozen=True)
class OperatorContext:
    """Who is performing the request. Passed explicitly into use cases."""

    user_id: str
    role: str


class OperatorMiddleware(BaseHTTPMiddleware):
    """Attach an OperatorContext to ``request.state.operator``."""

    PUBLIC_PATHS = {
        "/",
        "/favicon.ico",
        "/docs",
        "/redoc",
        "/openapi.json",
        "/health",
        "/health/live",
        "/health/ready",
    }
    PUBLIC_PATH_PREFIXES = {
        "/docs",
        "/redoc",
    }

    def is_public_endpoint(self, path: str) -> bool:
        normalized_path = path.rstrip("/") or "/"
        if normalized_path in self.PUBLIC_PATHS:
            return True
        for prefix in self.PUBLIC_PATH_PREFIXES:
            if path.startswith(prefix + "/"):
                return True
        return False

    async def dispatch(self, request: Request, call_next):
        if self.is_public_endpoint(request.url.path):
            return await call_next(request)

        settings = get_settings().operator
        operator_id = request.headers.get("X-Operator-ID")
        role = (request.headers.get("X-Operator-Role") or "").strip().upper()

        if not operator_id:
            if settings.require_header:
                logger.warning(
                    "Missing X-Operator-ID header for %s %s", request.method, request.url.path
                )
                return JSONResponse(
                    status_code=400,
                    content={
                        "success": False,
                        "error": "MISSING_OPERATOR_ID",
                        "message": "X-Operator-ID header is required",
                        "details": {"path": request.url.path, "method": request.method},
                    },
                )
            operator_id = settings.default_id

        if not _OPERATOR_ID.match(operator_id):
            logger.warning("Invalid operator id format: %s", operator_id[:80])
            return JSONResponse(
                status_code=400,
                content={
                    "success": False,
                    "error": "INVALID_OPERATOR_ID",
                    "message": "operator id must be 1-100 chars, alphanumeric, hyphen or underscore",
                    "details": {"operator_id": operator_id[:80]},
                },
            )

        role = role or settings.default_role.upper()
        if role not in OPERATOR_ROLES:
            return JSONResponse(
                status_code=400,
                content={
                    "success": False,
                    "error": "INVALID_OPERATOR_ROLE",
                    "message": f"Role must be one of: {', '.join(OPERATOR_ROLES)}",
                    "details": {"role": role},
                },
            )

        request.state.operator = OperatorContext(user_id=operator_id, role=role)
        return await call_next(request)
