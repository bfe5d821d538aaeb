"""
Weather forecast endpoint backed by the location cache.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from cropsight.core.dependencies import get_weather_service
from cropsight.models.schemas import ErrorResponse, WeatherRequest, WeatherResponse
from cropsight.services.weather_service import (
    WeatherConfigurationError,
    WeatherService,
    WeatherServiceError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/weather", tags=["Weather"])


@router.post(
    "",
    response_model=WeatherResponse,
    responses={
        502: {"model": ErrorResponse, "description": "Forecast provider failed"},
        503: {"model": ErrorResponse, "description": "Weather service not configured"},
    },
    summary="7-day forecast",
    description="Forecast for a coordinate pair, cached per location for one hour."
)
async def get_weather(
    request: WeatherRequest,
    service: WeatherService = Depends(get_weather_service)
) -> WeatherResponse:
    try:
        forecast, cached = await service.get_forecast(request.lat, request.lon, request.location)
    except WeatherConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=503, detail=str(e))
    except WeatherServiceError as e:
        logger.error(f"Weather lookup failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return WeatherResponse(data=forecast, cached=cached)
