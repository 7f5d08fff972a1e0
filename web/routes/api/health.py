"""Health check endpoint."""
import time
from datetime import datetime, timezone

from fastapi import APIRouter

from core.observability import get_correlation_id
from web.config import VERSION
from web.schemas import HealthResponse
from ._deps import START_TIME

router = APIRouter()


def health_payload() -> dict:
    return {
        "status": "OK",
        "message": "Sales Dashboard API is running",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        "uptime_seconds": int(time.time() - START_TIME),
        "correlation_id": get_correlation_id(),
    }


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Liveness check for Docker/load balancer monitoring."""
    return health_payload()
