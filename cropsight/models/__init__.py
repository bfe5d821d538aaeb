# Data models module
from cropsight.models.schemas import (
    LabelObservation,
    ClassificationResult,
    AnalyzeRequest,
    AnalysisRecord,
    WeatherForecast,
    DroneRecordingInfo,
)
from cropsight.models.enums import Severity, AnalysisSource, MediaKind

__all__ = [
    "LabelObservation",
    "ClassificationResult",
    "AnalyzeRequest",
    "AnalysisRecord",
    "WeatherForecast",
    "DroneRecordingInfo",
    "Severity",
    "AnalysisSource",
    "MediaKind",
]
