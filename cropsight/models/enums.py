"""
Enumerations for the crop analysis system.

These enums provide type safety and clear documentation of valid values.
"""

from enum import Enum


class Severity(str, Enum):
    """Severity level attached to a classification result."""
    HEALTHY = "healthy"
    MILD = "mild"
    MODERATE = "moderate"
    SEVERE = "severe"


class AnalysisSource(str, Enum):
    """Where a stored classification came from."""
    VISION = "vision"      # scored from vision API labels
    FALLBACK = "fallback"  # drawn from the fallback catalog


class MediaKind(str, Enum):
    """Kind of drone feed capture."""
    RECORDING = "recording"
    SNAPSHOT = "snapshot"

    @property
    def mime_family(self) -> str:
        """Top-level mime type accepted for this kind."""
        return "video" if self is MediaKind.RECORDING else "image"
