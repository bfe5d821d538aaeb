"""
FastAPI dependency injection.

Provides dependency injection for services and components,
enabling easy testing and component swapping.
"""

import random
import secrets
from functools import lru_cache
from typing import Optional

import httpx
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from cropsight.core.config import Settings, get_settings
from cropsight.core.database import get_db
from cropsight.services.analysis_service import AnalysisService
from cropsight.services.drone_service import DroneFeedStore
from cropsight.services.image_store import ImageStore
from cropsight.services.vision_client import VisionClient
from cropsight.services.weather_service import WeatherService


def get_http_transport() -> Optional[httpx.AsyncBaseTransport]:
    """Transport for outbound HTTP. None uses the httpx default."""
    return None


@lru_cache()
def get_fallback_rng() -> random.Random:
    """Process-wide random source for the fallback catalog draw."""
    return random.Random(get_settings().fallback_seed)


@lru_cache()
def get_image_store() -> ImageStore:
    """Get cached upload store."""
    return ImageStore(get_settings().upload_dir)


def get_vision_client(
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> VisionClient:
    return VisionClient(
        api_key=settings.google_vision_api_key,
        api_url=settings.vision_api_url,
        timeout=settings.vision_timeout_seconds,
        max_labels=settings.vision_max_labels,
        transport=transport,
    )


def get_analysis_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    vision_client: VisionClient = Depends(get_vision_client),
    image_store: ImageStore = Depends(get_image_store),
    rng: random.Random = Depends(get_fallback_rng),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> AnalysisService:
    return AnalysisService(
        db=db,
        vision_client=vision_client,
        image_store=image_store,
        rng=rng,
        max_image_size_mb=settings.max_image_size_mb,
        http_timeout=settings.http_timeout_seconds,
        transport=transport,
    )


def get_weather_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    transport: Optional[httpx.AsyncBaseTransport] = Depends(get_http_transport),
) -> WeatherService:
    return WeatherService(
        db=db,
        api_key=settings.openweather_api_key,
        api_url=settings.openweather_url,
        ttl_minutes=settings.weather_cache_ttl_minutes,
        timeout=settings.http_timeout_seconds,
        transport=transport,
    )


def get_drone_store(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> DroneFeedStore:
    return DroneFeedStore(db, max_size_mb=settings.max_video_size_mb, api_prefix=settings.api_prefix)


def require_admin(
    x_admin_token: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Guard for admin routes."""
    if not settings.admin_api_key:
        raise HTTPException(status_code=503, detail="Admin access is not configured")
    if not x_admin_token or not secrets.compare_digest(x_admin_token, settings.admin_api_key):
        raise HTTPException(status_code=403, detail="Invalid admin token")


__all__ = [
    "get_db",
    "get_settings",
    "get_http_transport",
    "get_fallback_rng",
    "get_image_store",
    "get_vision_client",
    "get_analysis_service",
    "get_weather_service",
    "get_drone_store",
    "require_admin",
]
