"""
Keyword-scored disease classifier.

Maps weighted vision labels plus a crop name to a ClassificationResult.

Scoring:
- every disease keyword found in a label adds the label score to the
  disease score; every healthy keyword adds it to the health score
- a label can feed both scores, and one score several times
- healthy keywords that only occur inside a matched disease keyword
  ("leaf" in "leaf spot") are not counted

When no labels are available a canned result is drawn from the
fallback catalog with the supplied random source.
"""

import logging
import random
from typing import Optional, Sequence

from cropsight.ml.disease_catalog import (
    CROP_DISEASE_TABLE,
    DEFAULT_BUCKET,
    DISEASE_INDICATORS,
    HEALTHY_INDICATORS,
    HEALTHY_TREATMENTS,
    MOCK_CATALOG,
    MODERATE_TREATMENTS,
    SEVERE_TREATMENTS,
)
from cropsight.models.enums import Severity
from cropsight.models.schemas import ClassificationResult, LabelObservation
from cropsight.utils import round_half_up

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 60
MAX_CONFIDENCE = 95

# Disease evidence must exceed this fraction of the health evidence
DISEASE_THRESHOLD = 0.3


def clamp_confidence(value: int) -> int:
    return min(max(value, MIN_CONFIDENCE), MAX_CONFIDENCE)


def crop_specific_disease(crop_type: str, keyword: str) -> str:
    """Disease name for a keyword on a crop, generic name on a miss."""
    table = CROP_DISEASE_TABLE.get((crop_type or "").strip().lower(), {})
    return table.get(keyword) or f"{crop_type} Disease Detected"


def score_labels(labels: Sequence[LabelObservation]) -> tuple[float, float, list[str]]:
    """
    Accumulate disease and health evidence over a label set.

    Returns:
        (disease_score, health_score, detected_keywords) with keywords in
        label order, then indicator order.
    """
    disease_score = 0.0
    health_score = 0.0
    detected: list[str] = []

    for label in labels:
        text = (label.description or "").lower()

        matched = [kw for kw in DISEASE_INDICATORS if kw in text]
        for kw in matched:
            disease_score += label.score
            detected.append(kw)

        residual = text
        for kw in matched:
            residual = residual.replace(kw, " ")

        for kw in HEALTHY_INDICATORS:
            if kw in residual:
                health_score += label.score

    return disease_score, health_score, detected


def fallback_result(crop_type: str, rng: Optional[random.Random] = None) -> ClassificationResult:
    """Uniform draw from the crop's fallback bucket (or the default one)."""
    rng = rng or random.Random()
    bucket = MOCK_CATALOG.get((crop_type or "").strip().lower()) or MOCK_CATALOG[DEFAULT_BUCKET]
    choice = bucket[rng.randrange(len(bucket))]

    confidence = clamp_confidence(choice.confidence)
    if confidence != choice.confidence:
        return choice.model_copy(update={"confidence": confidence})
    return choice


def classify(
    crop_type: str,
    labels: Optional[Sequence[LabelObservation]] = None,
    rng: Optional[random.Random] = None,
) -> ClassificationResult:
    """
    Classify a crop photo from its vision labels.

    Args:
        crop_type: Free-text crop name, matched case-insensitively
        labels: Vision labels; None or empty selects the fallback catalog
        rng: Random source for the fallback draw

    Returns:
        ClassificationResult with confidence in [60, 95]
    """
    if not labels:
        logger.debug(f"No labels for '{crop_type}', using fallback catalog")
        return fallback_result(crop_type, rng)

    disease_score, health_score, detected = score_labels(labels)
    total = health_score + disease_score
    confidence = round_half_up(health_score / (total or 1) * 100)

    if disease_score > health_score * DISEASE_THRESHOLD:
        if detected:
            disease = crop_specific_disease(crop_type, detected[0])
        else:
            disease = "Leaf Abnormality Detected"

        if disease_score > health_score:
            severity = Severity.SEVERE
            confidence = round_half_up(disease_score * 100)
            treatments = SEVERE_TREATMENTS
        else:
            severity = Severity.MODERATE
            confidence = round_half_up(disease_score * 80)
            treatments = MODERATE_TREATMENTS
    else:
        disease = "Healthy"
        severity = Severity.HEALTHY
        treatments = HEALTHY_TREATMENTS

    logger.debug(
        f"Scored {len(labels)} labels for '{crop_type}': "
        f"disease={disease_score:.2f} health={health_score:.2f} -> {disease}"
    )

    return ClassificationResult(
        disease=disease,
        severity=severity,
        confidence=clamp_confidence(confidence),
        treatments=treatments,
    )
