"""
Health Check Endpoints
"""

from datetime import datetime, timezone
from typing import Dict, List

from fastapi import APIRouter, Request, Response
from pydantic import BaseModel

from northwind_analytics.config import get_settings
from northwind_analytics.reports import report_names

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    reports: int
    snapshots: List[str]


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """
    Service status with catalog size and loaded snapshots.
    
    Reported as "degraded" when no snapshot is registered yet.
    """
    settings = get_settings()
    snapshots = request.app.state.registry.ids()
    return HealthResponse(
        status="healthy" if snapshots else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        reports=len(report_names()),
        snapshots=snapshots,
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    """Returns 200 while the process is running."""
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(request: Request, response: Response) -> Dict[str, str]:
    """Ready once at least one snapshot is registered."""
    if not len(request.app.state.registry):
        response.status_code = 503
        return {"status": "not_ready", "reason": "no_snapshot_loaded"}
    return {"status": "ready"}
