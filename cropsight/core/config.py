"""
Runtime settings, read from CROPSIGHT_* environment variables or a .env file.

Upstream API keys are optional: without a vision key analyses use the
fallback catalog, without a weather key the forecast endpoint answers 503.
"""

from pydantic_settings import BaseSettings
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    # API
    app_name: str = "CropSight API"
    app_version: str = "0.1.0"
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Server
    host: str = "0.0.0.0"
    port: int = 8000
    workers: int = 4

    # Storage
    database_url: str = "sqlite:///./cropsight.db"
    upload_dir: str = "./uploads"
    max_image_size_mb: float = 10.0
    max_video_size_mb: float = 50.0

    # Vision API (label detection)
    google_vision_api_key: Optional[str] = None
    vision_api_url: str = "https://vision.googleapis.com/v1/images:annotate"
    vision_timeout_seconds: float = 30.0
    vision_max_labels: int = 15

    # Weather API
    openweather_api_key: Optional[str] = None
    openweather_url: str = "https://api.openweathermap.org/data/2.5/forecast"
    weather_cache_ttl_minutes: int = 60

    # Outbound HTTP (image downloads etc.)
    http_timeout_seconds: float = 20.0

    # Admin endpoints are disabled unless a token is configured
    admin_api_key: Optional[str] = None

    # Seed for the fallback catalog draw; unseeded when None
    fallback_seed: Optional[int] = None

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "CROPSIGHT_"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
