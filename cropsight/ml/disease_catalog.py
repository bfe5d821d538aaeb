"""
Static lookup tables for the disease classifier.

- CROP_DISEASE_TABLE: crop -> detected keyword -> disease name
- MOCK_CATALOG: crop -> canned results used when no labels are available
- Treatment lists for the label-scoring branches

All tables are read-only mappings built once at import time.

Iteration Point: add a crop by extending both tables.
"""

from types import MappingProxyType

from cropsight.models.enums import Severity
from cropsight.models.schemas import ClassificationResult


DEFAULT_BUCKET = "default"

# Keyword order matters: the first detected keyword names the disease.
DISEASE_INDICATORS: tuple[str, ...] = (
    "leaf spot", "blight", "rust", "mold", "fungus", "disease", "infection",
    "wilted", "damaged", "brown", "yellow", "spotted", "diseased",
)

HEALTHY_INDICATORS: tuple[str, ...] = (
    "healthy", "green", "fresh", "plant", "leaf", "crop", "vegetation",
)

SEVERE_TREATMENTS: tuple[str, ...] = (
    "Apply appropriate fungicide immediately",
    "Remove affected plant parts",
    "Improve air circulation",
    "Consult agricultural extension service",
)

MODERATE_TREATMENTS: tuple[str, ...] = (
    "Monitor closely for progression",
    "Consider preventive treatment",
    "Improve cultural practices",
    "Test soil conditions",
)

HEALTHY_TREATMENTS: tuple[str, ...] = (
    "Continue current care routine",
    "Monitor for any changes",
    "Maintain proper watering schedule",
)


CROP_DISEASE_TABLE = MappingProxyType({
    "cassava": MappingProxyType({
        "leaf spot": "Cassava Bacterial Blight",
        "mosaic": "Cassava Mosaic Disease",
        "yellow": "Cassava Mosaic Disease",
        "brown": "Cassava Brown Streak Disease",
        "streak": "Cassava Brown Streak Disease",
    }),
    "sugarcane": MappingProxyType({
        "red": "Red Rot",
        "rot": "Red Rot",
        "smut": "Smut Disease",
        "rust": "Orange Rust",
        "yellow": "Yellow Leaf Disease",
    }),
    "tomato": MappingProxyType({
        "leaf spot": "Early Blight",
        "blight": "Late Blight",
        "yellow": "Septoria Leaf Spot",
        "brown": "Alternaria Stem Canker",
    }),
})


def _result(disease: str, severity: Severity, confidence: int, *treatments: str) -> ClassificationResult:
    return ClassificationResult(
        disease=disease,
        severity=severity,
        confidence=confidence,
        treatments=treatments,
    )


MOCK_CATALOG = MappingProxyType({
    "cassava": (
        _result(
            "Cassava Mosaic Disease", Severity.MODERATE, 89,
            "Use virus-free planting material",
            "Control whitefly vectors",
            "Remove infected plants",
            "Apply neem-based pesticides",
        ),
        _result(
            "Cassava Brown Streak Disease", Severity.SEVERE, 92,
            "Plant resistant varieties",
            "Control whitefly vectors",
            "Remove infected plants immediately",
            "Maintain field hygiene",
        ),
        _result(
            "Healthy", Severity.HEALTHY, 96,
            "Continue current care routine",
            "Monitor for pest activity",
            "Maintain proper spacing",
        ),
    ),
    "sugarcane": (
        _result(
            "Red Rot", Severity.SEVERE, 91,
            "Use disease-resistant varieties",
            "Treat seeds with fungicide",
            "Improve drainage",
            "Remove infected plants",
        ),
        _result(
            "Smut Disease", Severity.MODERATE, 87,
            "Hot water treatment of seeds",
            "Use resistant varieties",
            "Remove affected shoots",
            "Apply appropriate fungicides",
        ),
        _result(
            "Healthy", Severity.HEALTHY, 95,
            "Maintain current practices",
            "Monitor for diseases",
            "Ensure proper nutrition",
        ),
    ),
    "tomato": (
        _result(
            "Early Blight", Severity.MODERATE, 89,
            "Apply copper-based fungicide",
            "Improve air circulation",
            "Remove affected leaves",
            "Monitor weekly for 4 weeks",
        ),
        _result(
            "Late Blight", Severity.SEVERE, 94,
            "Apply systemic fungicide immediately",
            "Remove all affected plant parts",
            "Increase plant spacing",
            "Apply preventive treatments weekly",
        ),
        _result(
            "Healthy", Severity.HEALTHY, 97,
            "Continue current care routine",
            "Monitor for any changes",
            "Maintain proper watering schedule",
        ),
    ),
    DEFAULT_BUCKET: (
        _result(
            "Leaf Spot Disease", Severity.MILD, 78,
            "Apply broad-spectrum fungicide",
            "Improve ventilation",
            "Monitor plant health",
            "Consider soil testing",
        ),
    ),
})


def supported_crops() -> list[str]:
    """Crops with a dedicated keyword table or fallback bucket."""
    crops = set(CROP_DISEASE_TABLE) | set(MOCK_CATALOG)
    crops.discard(DEFAULT_BUCKET)
    return sorted(crops)
