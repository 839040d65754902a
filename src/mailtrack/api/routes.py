"""
API routes for the Mailtrack service.
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from loguru import logger
from pydantic import BaseModel

from mailtrack.infrastructure import MailTracker, get_tracker

router = APIRouter()


# ============================================================================
# Response Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response with service status."""

    status: str
    timestamp: str
    services: dict[str, str]
    active_accounts: int = 0


# ============================================================================
# Health Endpoints
# ============================================================================


@router.get("/health", response_model=HealthResponse, tags=["health"])
def health_check(tracker: MailTracker = Depends(get_tracker)) -> HealthResponse:
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=tracker.settings.app_version,
    )


@router.get("/health/ready", response_model=ReadinessResponse, tags=["health"])
def readiness_check(tracker: MailTracker = Depends(get_tracker)) -> ReadinessResponse:
    """Readiness check with storage and tracking status."""
    services: dict[str, str] = {}
    active = 0

    try:
        active = len(tracker.accounts.list_active())
        services["sqlite"] = "healthy"
    except Exception as e:
        logger.warning(f"SQLite health check failed: {e}")
        services["sqlite"] = f"error: {str(e)[:50]}"

    services["gmail_tracking"] = "enabled" if tracker.tracking_enabled else "disabled"

    status = "ready" if services["sqlite"] == "healthy" else "degraded"
    return ReadinessResponse(
        status=status,
        timestamp=datetime.now(timezone.utc).isoformat(),
        services=services,
        active_accounts=active,
    )
