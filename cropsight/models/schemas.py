"""
Pydantic schemas for API request/response validation.

These schemas define the contract between the API and clients,
ensuring type safety and automatic documentation.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from cropsight.models.enums import AnalysisSource, MediaKind, Severity


# === Classification Schemas ===

class LabelObservation(BaseModel):
    """One weighted tag returned by the vision service."""
    description: str = Field(..., description="Label text, e.g. 'leaf spot'")
    score: float = Field(..., ge=0.0, le=1.0, description="Label score (0-1)")


class ClassificationResult(BaseModel):
    """
    Disease classification for one crop photo.

    Immutable once produced; stored verbatim alongside the image
    reference and user.
    """
    disease: str = Field(..., description="Disease name or 'Healthy'")
    severity: Severity = Field(..., description="healthy, mild, moderate or severe")
    confidence: int = Field(..., ge=0, le=100, description="Confidence percentage")
    treatments: tuple[str, ...] = Field(
        ...,
        min_length=1,
        description="Ordered treatment suggestions"
    )

    class Config:
        frozen = True


# === Analysis Schemas ===

class AnalyzeRequest(BaseModel):
    """
    Request to analyze a crop photo.

    Attributes:
        crop_type: Free-text crop name (matched case-insensitively)
        user_id: Identity of the submitting user
        image: Base64 image data or a data URL
        image_url: Reference to an already uploaded image
    """
    crop_type: str = Field(..., min_length=1, max_length=64)
    user_id: str = Field(..., min_length=1, max_length=128)
    image: Optional[str] = Field(
        default=None,
        description="Base64-encoded image data (JPEG, PNG) or data URL"
    )
    image_url: Optional[str] = Field(
        default=None,
        description="URL of an image that is already stored"
    )

    @field_validator("crop_type")
    @classmethod
    def strip_crop_type(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("crop_type must not be blank")
        return v

    @model_validator(mode="after")
    def require_image(self) -> "AnalyzeRequest":
        if not self.image and not self.image_url:
            raise ValueError("Either image or image_url is required")
        return self


class ClassifyLabelsRequest(BaseModel):
    """Classify an already obtained label set without storing anything."""
    crop_type: str = Field(..., min_length=1, max_length=64)
    labels: list[LabelObservation] = Field(default_factory=list)
    seed: Optional[int] = Field(
        default=None,
        description="Seed for the fallback draw when labels are empty"
    )


class AnalysisRecord(BaseModel):
    """A stored analysis as returned to the dashboard."""
    id: str
    user_id: str
    crop_type: str
    image_url: Optional[str] = None
    disease: str
    severity: Severity
    confidence: int
    treatments: list[str]
    source: AnalysisSource
    analysis_date: datetime

    class Config:
        json_schema_extra = {
            "example": {
                "id": "3f9a2a4e-6a4b-4a57-9a52-3b1a0b6c2d11",
                "user_id": "farmer-42",
                "crop_type": "tomato",
                "image_url": "/uploads/0b6c2d11.jpeg",
                "disease": "Early Blight",
                "severity": "severe",
                "confidence": 90,
                "treatments": [
                    "Apply appropriate fungicide immediately",
                    "Remove affected plant parts",
                    "Improve air circulation",
                    "Consult agricultural extension service"
                ],
                "source": "vision",
                "analysis_date": "2026-10-19T08:30:00"
            }
        }


class AnalysisListResponse(BaseModel):
    """Analysis history."""
    analyses: list[AnalysisRecord]
    total: int


class AnalysisSummary(BaseModel):
    """Dashboard statistics for one user."""
    user_id: str
    total: int
    healthy: int
    diseased: int
    by_severity: dict[str, int]
    latest_analysis_date: Optional[datetime] = None


# === Weather Schemas ===

class WeatherRequest(BaseModel):
    """Forecast lookup by coordinates with an optional place name."""
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)
    location: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Place name, used as the cache key when given"
    )


class TemperatureRange(BaseModel):
    day: int
    night: int
    min: int
    max: int


class DailyForecast(BaseModel):
    """One day of the reshaped forecast."""
    date: str
    temperature: TemperatureRange
    humidity: Optional[int] = None
    wind_speed: int = Field(..., description="Wind speed in km/h")
    description: str = ""
    icon: Optional[str] = None
    precipitation: float = Field(0.0, description="Rain over 3 hours in mm")


class WeatherForecast(BaseModel):
    location: str
    country: Optional[str] = None
    forecast: list[DailyForecast]


class WeatherResponse(BaseModel):
    data: WeatherForecast
    cached: bool


# === Drone Feed Schemas ===

class DroneRecordingCreate(BaseModel):
    """Upload of a drone feed capture."""
    user_id: str = Field(..., min_length=1, max_length=128)
    data: str = Field(
        ...,
        min_length=16,
        description="Base64 payload or data URL (e.g. data:video/webm;base64,...)"
    )
    kind: MediaKind = MediaKind.RECORDING
    mime_type: Optional[str] = Field(
        default=None,
        description="Overrides the mime type from the data URL"
    )
    title: Optional[str] = Field(default=None, max_length=255)
    duration_seconds: Optional[float] = Field(default=None, ge=0.0)


class DroneRecordingInfo(BaseModel):
    """Stored capture metadata (payload served separately)."""
    id: str
    user_id: str
    kind: MediaKind
    title: Optional[str] = None
    mime_type: str
    size_bytes: int
    duration_seconds: Optional[float] = None
    created_at: datetime
    media_url: str


class DroneRecordingList(BaseModel):
    recordings: list[DroneRecordingInfo]
    total: int


# === Status Schemas ===

class HealthStatus(BaseModel):
    status: str
    timestamp: float
    version: str


class ReadinessStatus(HealthStatus):
    """Readiness with per-component status."""
    components: dict[str, dict]
    uptime_seconds: Optional[float] = None


# === Error Schemas ===

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[dict] = Field(default=None, description="Additional error details")
