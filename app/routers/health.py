# =============================================================================
# app/routers/health.py - Health Check Endpoints
# =============================================================================
# Liveness of the proxy itself, for load balancers and Cloud Run health checks.
# Never calls the upstream; use /api/test-api for that.
# =============================================================================

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from app.config import Settings, get_settings
from lib.utils import utc_now_iso

router = APIRouter()

VERSION = "1.0.0"


# =============================================================================
# Response Models
# =============================================================================

class HealthResponse(BaseModel):
    """Basic health check response."""
    status: str
    timestamp: str
    environment: str
    version: str
    upstream_configured: bool


# =============================================================================
# Endpoints
# =============================================================================

@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.

    Reports whether an upstream URL is configured, without contacting it.
    """
    return HealthResponse(
        status="healthy",
        timestamp=utc_now_iso(),
        environment=settings.ENVIRONMENT,
        version=VERSION,
        upstream_configured=settings.resolve_upstream() is not None,
    )
