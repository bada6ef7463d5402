# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Controller: System endpoints — health, readiness, metrics.
Pure HTTP layer — no business logic.
"""

from datetime import datetime, timezone

from fastapi import APIRouter
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from dutyroster.core.config import settings
from dutyroster.core.dependencies import get_availability_repo, get_roster_repo

router = APIRouter(tags=["System"])


@router.get("/health")
def health_check():
    """Liveness probe for Docker and orchestration."""
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "rosters_count": get_roster_repo().count(),
        "availability_records": get_availability_repo().count(),
    }


@router.get("/health/ready")
def readiness_check():
    """Readiness probe — verifies the service can serve traffic."""
    return {
        "status": "ready",
        "service": settings.SERVICE_NAME,
        "rosters_loaded": get_roster_repo().count() > 0,
    }


@router.get("/metrics")
def prometheus_metrics():
    """Expose Prometheus metrics in OpenMetrics format."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
