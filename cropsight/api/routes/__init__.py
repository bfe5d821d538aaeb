# API routes module
from cropsight.api.routes.admin import router as admin_router
from cropsight.api.routes.analyses import router as analyses_router
from cropsight.api.routes.drone import router as drone_router
from cropsight.api.routes.health import router as health_router
from cropsight.api.routes.weather import router as weather_router

__all__ = [
    "admin_router",
    "analyses_router",
    "drone_router",
    "health_router",
    "weather_router",
]
