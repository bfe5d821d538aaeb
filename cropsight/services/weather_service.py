"""
Weather Forecast Service

Serves a 7-day outlook reshaped from the OpenWeather 5 day / 3 hour
forecast, cached per location for a fixed time-to-live.

Cache key: the place name when given, otherwise "lat,lon".
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError
from sqlalchemy.orm import Session

from cropsight.models.orm import WeatherCache
from cropsight.models.schemas import (
    DailyForecast,
    TemperatureRange,
    WeatherForecast,
)
from cropsight.utils import round_half_up, utcnow

logger = logging.getLogger(__name__)

# The forecast has one entry every 3 hours, 8 per day
ENTRIES_PER_DAY = 8
FORECAST_DAYS = 7


class WeatherServiceError(Exception):
    """The forecast provider failed or returned unusable data."""


class WeatherConfigurationError(WeatherServiceError):
    """No forecast provider API key is configured."""


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _number(value: Any, default: float = 0.0) -> float:
    return float(value) if _is_number(value) else default


def _mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _text(value: Any, default: Optional[str] = "") -> Optional[str]:
    return value if isinstance(value, str) else default


def _daily_entry(item: dict) -> DailyForecast:
    """One forecast day; null or mistyped fields fall back to defaults."""
    main = _mapping(item.get("main"))
    wind = _mapping(item.get("wind"))
    rain = _mapping(item.get("rain"))
    conditions = item.get("weather")
    weather = _mapping(conditions[0]) if isinstance(conditions, list) and conditions else {}

    temp = _number(main.get("temp"))
    temp_min = _number(main.get("temp_min"), temp)
    temp_max = _number(main.get("temp_max"), temp)
    humidity = main.get("humidity")

    return DailyForecast(
        date=_text(item.get("dt_txt")).split(" ")[0],
        temperature=TemperatureRange(
            day=round_half_up(temp),
            night=round_half_up(temp_min),
            min=round_half_up(temp_min),
            max=round_half_up(temp_max),
        ),
        humidity=round_half_up(humidity) if _is_number(humidity) else None,
        wind_speed=round_half_up(_number(wind.get("speed")) * 3.6),  # m/s -> km/h
        description=_text(weather.get("description")),
        icon=_text(weather.get("icon"), None),
        precipitation=round_half_up(_number(rain.get("3h")) * 100) / 100,
    )


def reshape_forecast(payload: dict) -> WeatherForecast:
    """
    Reduce a raw forecast payload to one entry per day for 7 days.

    Raises:
        WeatherServiceError: payload has no city or entry list
    """
    city = payload.get("city") if isinstance(payload, dict) else None
    entries = payload.get("list") if isinstance(payload, dict) else None
    if not isinstance(city, dict) or not isinstance(entries, list):
        raise WeatherServiceError("Unexpected forecast payload")

    try:
        daily = [
            _daily_entry(item)
            for item in entries[::ENTRIES_PER_DAY][:FORECAST_DAYS]
            if isinstance(item, dict)
        ]
        return WeatherForecast(
            location=_text(city.get("name")) or "Unknown",
            country=_text(city.get("country"), None),
            forecast=daily,
        )
    except ValidationError as e:
        raise WeatherServiceError(f"Unusable forecast payload: {e}")


class WeatherService:
    """
    Cached forecast lookups.

    Usage:
        service = WeatherService(db, api_key="...")
        forecast, cached = await service.get_forecast(12.97, 77.59, "Bengaluru")
    """

    def __init__(
        self,
        db: Session,
        api_key: Optional[str],
        api_url: str = "https://api.openweathermap.org/data/2.5/forecast",
        ttl_minutes: int = 60,
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.db = db
        self.api_key = api_key
        self.api_url = api_url
        self.ttl = timedelta(minutes=ttl_minutes)
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    @staticmethod
    def cache_key(lat: float, lon: float, location: Optional[str] = None) -> str:
        if location and location.strip():
            return location.strip()
        return f"{lat},{lon}"

    async def get_forecast(
        self,
        lat: float,
        lon: float,
        location: Optional[str] = None
    ) -> tuple[WeatherForecast, bool]:
        """
        Forecast for a location, from cache when still fresh.

        Returns:
            (forecast, cached)

        Raises:
            WeatherConfigurationError: no API key
            WeatherServiceError: provider failure
        """
        if not self.api_key:
            raise WeatherConfigurationError("Weather service not configured")

        key = self.cache_key(lat, lon, location)
        now = self._clock()

        cached = self._read_cache(key, now)
        if cached is not None:
            logger.info(f"Returning cached weather for '{key}'")
            return cached, True

        logger.info(f"Fetching fresh weather for '{key}'")
        payload = await self._fetch(lat, lon)
        forecast = reshape_forecast(payload)
        self._write_cache(key, forecast, now)
        return forecast, False

    def _read_cache(self, key: str, now: datetime) -> Optional[WeatherForecast]:
        row = (
            self.db.query(WeatherCache)
            .filter(WeatherCache.location == key, WeatherCache.expires_at > now)
            .first()
        )
        if row is None:
            return None
        try:
            return WeatherForecast.model_validate(row.weather_data)
        except ValueError as e:
            logger.warning(f"Discarding unreadable cache entry for '{key}': {e}")
            return None

    def _write_cache(self, key: str, forecast: WeatherForecast, now: datetime) -> None:
        self.db.merge(WeatherCache(
            location=key,
            weather_data=forecast.model_dump(mode="json"),
            expires_at=now + self.ttl,
            updated_at=now,
        ))
        self.db.commit()

    async def _fetch(self, lat: float, lon: float) -> dict:
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.api_url, params=params)
        except httpx.TimeoutException:
            raise WeatherServiceError("Weather API timeout")
        except httpx.HTTPError as e:
            raise WeatherServiceError(f"Weather API request failed: {e}")

        if not response.is_success:
            logger.error(f"OpenWeather API error {response.status_code}: {response.text[:200]}")
            raise WeatherServiceError("Failed to fetch weather data")

        try:
            return response.json()
        except ValueError as e:
            raise WeatherServiceError(f"Weather API returned invalid JSON: {e}")
