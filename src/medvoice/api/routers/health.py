"""
Health check endpoints.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ... import __version__
from ...application.schema_registry import DOCUMENT_SCHEMAS
from ...core.config import get_settings
from ..schemas.common import ApiResponse
from ..utils.responses import ok

router = APIRouter(prefix="/health", tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    timestamp: datetime
    version: str
    service: str


@router.get("", response_model=ApiResponse[HealthResponse])
async def health_check(request: Request):
    """
    Health check endpoint.

    Returns the current status of the service.
    """
    return ok(request, data=HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc),
        version=__version__,
        service="MedVoice",
    ), message="OK")


@router.get("/ready", response_model=ApiResponse[dict])
async def readiness_check(request: Request):
    """
    Readiness check endpoint.

    Reports whether the AI service is configured and lists the supported
    document types. No AI call is made.
    """
    settings = get_settings()
    checks = {}
    all_ok = True

    if settings.ai.endpoint and settings.ai.api_key:
        checks["ai_service"] = "configured"
        checks["ai_fast_deployment"] = settings.ai.fast_deployment
        checks["ai_deep_deployment"] = settings.ai.deep_deployment
    else:
        checks["ai_service"] = "not_configured"
        all_ok = False

    checks["document_types"] = [t.value for t in DOCUMENT_SCHEMAS]

    status = "ready" if all_ok else "degraded"
    return ok(request, data={
        "status": status,
        "timestamp": datetime.now(timezone.utc),
        "checks": checks,
    }, message="OK" if all_ok else "Some services unavailable")
