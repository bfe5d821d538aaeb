"""
Service status endpoints for load balancers and the admin page.

A missing vision or weather key does not make the service unready: the
analysis endpoint falls back to the catalog and only weather lookups
are refused. The database is the one hard requirement.
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cropsight.core.config import Settings, get_settings
from cropsight.core.database import get_db
from cropsight.models.schemas import HealthStatus, ReadinessStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])

_started_at: Optional[float] = None


def set_startup_time() -> None:
    """Remember when the app started, for uptime reporting."""
    global _started_at
    _started_at = time.monotonic()


def _uptime() -> Optional[float]:
    return time.monotonic() - _started_at if _started_at is not None else None


def _key_status(configured: bool, missing: str) -> dict:
    return {"status": "ready" if configured else missing}


@router.get("", response_model=HealthStatus)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthStatus:
    return HealthStatus(status="healthy", timestamp=time.time(), version=settings.app_version)


@router.get("/ready", response_model=ReadinessStatus)
def readiness_check(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> ReadinessStatus:
    """
    Database probe plus upstream key status.

    Returns 503 when the database does not answer, otherwise "ready" or
    "degraded" depending on which upstream keys are configured.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error(f"Readiness probe failed: {e}")
        raise HTTPException(status_code=503, detail="Database unavailable")

    components = {
        "database": {"status": "ready", "backend": db.get_bind().dialect.name},
        "vision_api": _key_status(bool(settings.google_vision_api_key), "fallback_only"),
        "weather_api": {
            **_key_status(bool(settings.openweather_api_key), "not_configured"),
            "cache_ttl_minutes": settings.weather_cache_ttl_minutes,
        },
    }
    all_ready = all(c["status"] == "ready" for c in components.values())

    return ReadinessStatus(
        status="ready" if all_ready else "degraded",
        timestamp=time.time(),
        version=settings.app_version,
        components=components,
        uptime_seconds=_uptime(),
    )


@router.get("/live")
async def liveness_check() -> dict:
    return {"status": "alive"}
