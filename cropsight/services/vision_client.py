"""
Google Cloud Vision label detection client.

Sends one image per request and returns the label annotations as
LabelObservation objects. Any failure raises VisionServiceError so the
caller can switch to the fallback catalog.

API: https://cloud.google.com/vision/docs/labels
"""

import logging
import time
from typing import Any, Optional

import httpx

from cropsight.models.schemas import LabelObservation

logger = logging.getLogger(__name__)


class VisionServiceError(Exception):
    """The vision API could not produce labels for an image."""


def parse_label_annotations(response: Any) -> list[LabelObservation]:
    """
    Convert one annotate response into label observations.

    Any structural deviation (missing field, wrong types) yields an
    empty list rather than an error.
    """
    if not isinstance(response, dict):
        return []

    annotations = response.get("labelAnnotations")
    if not isinstance(annotations, list):
        return []

    labels = []
    for item in annotations:
        if not isinstance(item, dict):
            return []
        description = item.get("description")
        score = item.get("score")
        if not isinstance(description, str) or isinstance(score, bool) \
                or not isinstance(score, (int, float)):
            return []
        labels.append(LabelObservation(
            description=description.lower(),
            score=min(max(float(score), 0.0), 1.0)
        ))
    return labels


class VisionClient:
    """
    Async client for the images:annotate endpoint.

    Usage:
        client = VisionClient(api_key="...")
        labels = await client.detect_labels(image_base64)
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_url: str = "https://vision.googleapis.com/v1/images:annotate",
        timeout: float = 30.0,
        max_labels: int = 15,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.timeout = timeout
        self.max_labels = max_labels
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _build_payload(self, image_base64: str) -> dict:
        return {
            "requests": [{
                "image": {"content": image_base64},
                "features": [
                    {"type": "LABEL_DETECTION", "maxResults": self.max_labels},
                    {"type": "TEXT_DETECTION", "maxResults": 5},
                ]
            }]
        }

    async def detect_labels(self, image_base64: str) -> list[LabelObservation]:
        """
        Run label detection on a base64-encoded image.

        Raises:
            VisionServiceError: key missing, transport failure, non-2xx
                status, undecodable body or an error object in the response
        """
        if not self.api_key:
            raise VisionServiceError("Vision API key not configured")

        start_time = time.time()

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.api_url,
                    params={"key": self.api_key},
                    json=self._build_payload(image_base64)
                )
        except httpx.TimeoutException:
            raise VisionServiceError("Vision API timeout")
        except httpx.HTTPError as e:
            raise VisionServiceError(f"Vision API request failed: {e}")

        processing_time = (time.time() - start_time) * 1000

        if response.status_code == 401 or response.status_code == 403:
            raise VisionServiceError("Vision API rejected the API key")
        if response.status_code == 429:
            raise VisionServiceError("Vision API rate limit exceeded")
        if not response.is_success:
            raise VisionServiceError(
                f"Vision API error: {response.status_code} - {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise VisionServiceError(f"Vision API returned invalid JSON: {e}")

        responses = data.get("responses") if isinstance(data, dict) else None
        first = responses[0] if isinstance(responses, list) and responses else None

        if isinstance(first, dict) and first.get("error"):
            error = first["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            raise VisionServiceError(f"Vision API error: {message}")

        labels = parse_label_annotations(first)
        logger.info(f"Vision API returned {len(labels)} labels in {processing_time:.0f}ms")
        return labels
