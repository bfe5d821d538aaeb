"""
Shared fixtures.

The database is an in-memory SQLite engine shared by the app and the
tests; upstream HTTP APIs are replaced with an httpx.MockTransport.
"""

import os
import tempfile

os.environ.setdefault("CROPSIGHT_DATABASE_URL", "sqlite://")
os.environ.setdefault("CROPSIGHT_UPLOAD_DIR", tempfile.mkdtemp(prefix="cropsight-uploads-"))

import base64
import io
import random

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from cropsight.core.config import Settings, get_settings
from cropsight.core.database import Base, SessionLocal, engine, init_db
from cropsight.core.dependencies import get_fallback_rng, get_http_transport, get_image_store
from cropsight.main import app
from cropsight.services.image_store import ImageStore


def make_png_bytes(size=(128, 128), color=(34, 139, 34)) -> bytes:
    """A small green image (simulating a leaf)."""
    img = Image.new("RGB", size, color=color)
    pixels = img.load()
    for i in range(size[0]):
        for j in range(size[1]):
            if (i * j) % 7 == 0:
                pixels[i, j] = (120 + i % 60, 90, 30 + j % 50)  # brown speckles
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def make_forecast_payload(entries: int = 40, city: str = "Nairobi") -> dict:
    """OpenWeather 5 day / 3 hour forecast shaped payload."""
    items = []
    for i in range(entries):
        day, slot = divmod(i, 8)
        items.append({
            "dt_txt": f"2026-10-{19 + day:02d} {slot * 3:02d}:00:00",
            "main": {
                "temp": 21.5 + day,
                "temp_min": 14.4 + day,
                "temp_max": 25.6 + day,
                "humidity": 60 + day,
            },
            "wind": {"speed": 3.0},
            "weather": [{"description": "light rain", "icon": "10d"}],
            "rain": {"3h": 0.456},
        })
    return {"city": {"name": city, "country": "KE"}, "list": items}


class FakeUpstream:
    """
    Stand-in for the vision API, OpenWeather and remote image hosts.

    Each host is answered by a callable that builds a fresh response;
    tests replace them as needed. Every request is recorded.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.vision_labels = [{"description": "Leaf Spot", "score": 0.9}]
        self.vision = lambda request: httpx.Response(200, json={
            "responses": [{"labelAnnotations": self.vision_labels}]
        })
        self.weather = lambda request: httpx.Response(200, json=make_forecast_payload())
        self.images = lambda request: httpx.Response(200, content=make_png_bytes())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host
        if host == "vision.googleapis.com":
            return self.vision(request)
        if host == "api.openweathermap.org":
            return self.weather(request)
        if host == "images.example.com":
            return self.images(request)
        return httpx.Response(404)

    def calls_to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture(autouse=True)
def reset_database():
    """Fresh tables for every test."""
    Base.metadata.drop_all(bind=engine)
    init_db()
    yield


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def png_bytes():
    return make_png_bytes()


@pytest.fixture
def sample_image_base64(png_bytes):
    return base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def settings():
    return Settings(
        upload_dir=os.environ["CROPSIGHT_UPLOAD_DIR"],
        google_vision_api_key=None,
        openweather_api_key="test-weather-key",
        admin_api_key="admin-secret",
        fallback_seed=7,
    )


@pytest.fixture
def image_store(settings):
    return ImageStore(settings.upload_dir)


@pytest.fixture
def client(settings, upstream, image_store):
    """Test client with upstream APIs and storage replaced."""
    transport = upstream.transport
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_http_transport] = lambda: transport
    app.dependency_overrides[get_image_store] = lambda: image_store
    app.dependency_overrides[get_fallback_rng] = lambda: random.Random(7)

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
