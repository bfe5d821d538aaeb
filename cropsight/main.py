"""
CropSight API

Backend for the agricultural advisory dashboard: crop photo analysis,
cached weather forecasts and drone feed storage.

Usage:
    uvicorn cropsight.main:app --reload
    uvicorn cropsight.main:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from cropsight.api.routes import (
    admin_router,
    analyses_router,
    drone_router,
    health_router,
    weather_router,
)
from cropsight.api.routes.health import set_startup_time
from cropsight.core.config import Settings, get_settings
from cropsight.core.database import init_db
from cropsight.models.schemas import ErrorResponse
from cropsight.services.image_store import UPLOAD_URL_PREFIX

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent.parent / "static"

DESCRIPTION = """
Backend for an agricultural advisory dashboard.

- **Analyses**: crop photos are labelled by the vision API and scored
  against disease and health keywords; without labels a result is drawn
  from a per-crop fallback catalog
- **Weather**: 7-day outlook, cached per location for one hour
- **Drone**: store and replay recordings and snapshots
"""


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def api_info(settings: Settings) -> dict:
    prefix = settings.api_prefix
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "documentation": "/docs",
        "endpoints": {
            "health": f"{prefix}/health",
            "analyses": f"{prefix}/analyses",
            "weather": f"{prefix}/weather",
            "drone": f"{prefix}/drone/recordings",
        },
    }


def create_app(settings: Settings) -> FastAPI:
    """Build the application with its routers and file mounts."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting {settings.app_name} {settings.app_version}")
        set_startup_time()
        init_db()

        if not settings.google_vision_api_key:
            logger.warning("Vision API key not set, analyses will use the fallback catalog")
        if not settings.openweather_api_key:
            logger.warning("OpenWeather API key not set, weather lookups are disabled")

        yield

        logger.info("Shutdown complete")

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description=DESCRIPTION,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(Exception)
    async def unhandled_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        body = ErrorResponse(
            error="internal_server_error",
            message="An unexpected error occurred. Please try again.",
            details={"exception": str(exc)} if settings.debug else None,
        )
        return JSONResponse(status_code=500, content=body.model_dump())

    for router in (health_router, analyses_router, weather_router, drone_router, admin_router):
        app.include_router(router, prefix=settings.api_prefix)

    @app.get("/", tags=["Root"], include_in_schema=False)
    async def root():
        index_path = STATIC_DIR / "index.html"
        if index_path.exists():
            return FileResponse(index_path)
        return api_info(settings)

    @app.get("/api", tags=["Root"])
    async def info():
        return api_info(settings)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    app.mount(UPLOAD_URL_PREFIX, StaticFiles(directory=str(upload_dir)), name="uploads")

    if STATIC_DIR.exists():
        app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    return app


settings = get_settings()
configure_logging(settings)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "cropsight.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=1 if settings.debug else settings.workers
    )
