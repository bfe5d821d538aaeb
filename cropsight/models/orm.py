"""
SQLAlchemy table definitions.

Tables:
- crop_analyses: one row per classified photo
- weather_cache: one forecast per location key with an expiry
- drone_recordings: base64 encoded drone feed captures
"""

import uuid

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String, Text

from cropsight.core.database import Base
from cropsight.utils import utcnow


def _new_id() -> str:
    return str(uuid.uuid4())


class CropAnalysis(Base):
    __tablename__ = "crop_analyses"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(128), nullable=False, index=True)
    image_url = Column(Text, nullable=True)
    crop_type = Column(String(64), nullable=False)
    disease_detected = Column(String(255), nullable=False)
    severity_level = Column(String(16), nullable=False)
    confidence_score = Column(Integer, nullable=False)
    treatment_suggestions = Column(JSON, nullable=False, default=list)
    source = Column(String(16), nullable=False)
    analysis_date = Column(DateTime, nullable=False, default=utcnow, index=True)


class WeatherCache(Base):
    __tablename__ = "weather_cache"

    location = Column(String(255), primary_key=True)
    weather_data = Column(JSON, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False, default=utcnow)


class DroneRecording(Base):
    __tablename__ = "drone_recordings"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(128), nullable=False, index=True)
    kind = Column(String(16), nullable=False)
    title = Column(String(255), nullable=True)
    mime_type = Column(String(64), nullable=False)
    size_bytes = Column(Integer, nullable=False)
    duration_seconds = Column(Float, nullable=True)
    video_data = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
