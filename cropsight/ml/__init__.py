# Classification module
from cropsight.ml.disease_classifier import classify, fallback_result, score_labels
from cropsight.ml.disease_catalog import CROP_DISEASE_TABLE, MOCK_CATALOG, supported_crops

__all__ = [
    "classify",
    "fallback_result",
    "score_labels",
    "CROP_DISEASE_TABLE",
    "MOCK_CATALOG",
    "supported_crops",
]
