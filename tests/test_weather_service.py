"""
Tests for the cached weather forecast service.

Tests cover:
- Forecast reshaping (sampling, rounding, unit conversion)
- Cache hits, misses and expiry
- Provider failures
"""

from datetime import datetime, timedelta

import httpx
import pytest

from cropsight.models.orm import WeatherCache
from cropsight.services.weather_service import (
    WeatherConfigurationError,
    WeatherService,
    WeatherServiceError,
    reshape_forecast,
)

from tests.conftest import make_forecast_payload


class Clock:
    """Settable clock for expiry tests."""

    def __init__(self):
        self.now = datetime(2026, 10, 19, 8, 0, 0)

    def __call__(self):
        return self.now


class TestReshapeForecast:

    def test_one_entry_per_day(self):
        forecast = reshape_forecast(make_forecast_payload(entries=40))

        assert forecast.location == "Nairobi"
        assert forecast.country == "KE"
        assert [d.date for d in forecast.forecast] == [
            "2026-10-19", "2026-10-20", "2026-10-21", "2026-10-22", "2026-10-23"
        ]

    def test_at_most_seven_days(self):
        forecast = reshape_forecast(make_forecast_payload(entries=80))

        assert len(forecast.forecast) == 7

    def test_values_are_rounded_and_converted(self):
        day = reshape_forecast(make_forecast_payload()).forecast[0]

        assert day.temperature.day == 22      # 21.5 rounds half up
        assert day.temperature.night == 14
        assert day.temperature.min == 14
        assert day.temperature.max == 26
        assert day.humidity == 60
        assert day.wind_speed == 11           # 3.0 m/s = 10.8 km/h
        assert day.description == "light rain"
        assert day.icon == "10d"
        assert day.precipitation == 0.46

    def test_missing_fields_use_defaults(self):
        payload = {
            "city": {"name": "Kisumu"},
            "list": [{"dt_txt": "2026-10-19 00:00:00", "main": {"temp": 18.0}}],
        }

        day = reshape_forecast(payload).forecast[0]

        assert day.temperature.min == 18
        assert day.wind_speed == 0
        assert day.precipitation == 0.0
        assert day.description == ""
        assert day.humidity is None

    def test_null_fields_use_defaults(self):
        payload = {
            "city": {"name": None, "country": 254},
            "list": [{
                "dt_txt": None,
                "main": "n/a",
                "wind": [3.0],
                "weather": [{"description": None, "icon": None}],
                "rain": None,
            }],
        }

        forecast = reshape_forecast(payload)
        day = forecast.forecast[0]

        assert forecast.location == "Unknown"
        assert forecast.country is None
        assert day.date == ""
        assert day.description == ""
        assert day.icon is None
        assert day.temperature.day == 0
        assert day.wind_speed == 0
        assert day.humidity is None
        assert day.precipitation == 0.0

    def test_weather_entry_that_is_not_an_object(self):
        payload = {
            "city": {"name": "Kisumu"},
            "list": [{"dt_txt": "2026-10-19 00:00:00", "weather": [None]}],
        }

        assert reshape_forecast(payload).forecast[0].description == ""

    @pytest.mark.parametrize("payload", [{}, {"city": {"name": "X"}}, {"list": []}, []])
    def test_unusable_payload_raises(self, payload):
        with pytest.raises(WeatherServiceError):
            reshape_forecast(payload)


class TestWeatherService:

    @pytest.fixture
    def clock(self):
        return Clock()

    def _service(self, db_session, upstream, clock, api_key="weather-key"):
        return WeatherService(
            db_session,
            api_key=api_key,
            ttl_minutes=60,
            transport=upstream.transport,
            clock=clock,
        )

    @pytest.mark.asyncio
    async def test_second_lookup_is_cached(self, db_session, upstream, clock):
        service = self._service(db_session, upstream, clock)

        first, cached_first = await service.get_forecast(-1.29, 36.82, "Nairobi")
        second, cached_second = await service.get_forecast(-1.29, 36.82, "Nairobi")

        assert cached_first is False
        assert cached_second is True
        assert first == second
        assert len(upstream.calls_to("api.openweathermap.org")) == 1

    @pytest.mark.asyncio
    async def test_request_parameters(self, db_session, upstream, clock):
        await self._service(db_session, upstream, clock).get_forecast(-1.29, 36.82)

        params = upstream.calls_to("api.openweathermap.org")[0].url.params
        assert params["lat"] == "-1.29"
        assert params["lon"] == "36.82"
        assert params["units"] == "metric"
        assert params["appid"] == "weather-key"

    @pytest.mark.asyncio
    async def test_expired_entry_is_refreshed(self, db_session, upstream, clock):
        service = self._service(db_session, upstream, clock)
        await service.get_forecast(-1.29, 36.82, "Nairobi")

        clock.now += timedelta(minutes=61)
        _, cached = await service.get_forecast(-1.29, 36.82, "Nairobi")

        assert cached is False
        assert len(upstream.calls_to("api.openweathermap.org")) == 2
        row = db_session.get(WeatherCache, "Nairobi")
        assert row.expires_at == clock.now + timedelta(minutes=60)

    @pytest.mark.asyncio
    async def test_coordinates_key_without_location(self, db_session, upstream, clock):
        await self._service(db_session, upstream, clock).get_forecast(-1.29, 36.82)

        assert db_session.get(WeatherCache, "-1.29,36.82") is not None

    @pytest.mark.asyncio
    async def test_locations_are_cached_separately(self, db_session, upstream, clock):
        service = self._service(db_session, upstream, clock)

        await service.get_forecast(-1.29, 36.82, "Nairobi")
        _, cached = await service.get_forecast(-0.09, 34.77, "Kisumu")

        assert cached is False
        assert len(upstream.calls_to("api.openweathermap.org")) == 2

    @pytest.mark.asyncio
    async def test_missing_key_raises(self, db_session, upstream, clock):
        service = self._service(db_session, upstream, clock, api_key=None)

        with pytest.raises(WeatherConfigurationError):
            await service.get_forecast(0.0, 0.0)
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_provider_error_raises_and_is_not_cached(self, db_session, upstream, clock):
        upstream.weather = lambda request: httpx.Response(401, json={"message": "Invalid API key"})
        service = self._service(db_session, upstream, clock)

        with pytest.raises(WeatherServiceError):
            await service.get_forecast(-1.29, 36.82, "Nairobi")
        assert db_session.get(WeatherCache, "Nairobi") is None

    def test_cache_key(self):
        assert WeatherService.cache_key(1.5, 2.5) == "1.5,2.5"
        assert WeatherService.cache_key(1.5, 2.5, "  Eldoret ") == "Eldoret"
        assert WeatherService.cache_key(1.5, 2.5, "   ") == "1.5,2.5"
