# Services module
from cropsight.services.analysis_service import AnalysisService
from cropsight.services.weather_service import WeatherService
from cropsight.services.drone_service import DroneFeedStore
from cropsight.services.vision_client import VisionClient

__all__ = [
    "AnalysisService",
    "WeatherService",
    "DroneFeedStore",
    "VisionClient",
]
