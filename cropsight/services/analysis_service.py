"""
Crop Analysis Service

Coordinates the crop photo analysis flow:
1. Image intake (decode, verify, store)
2. Label detection through the vision API
3. Disease classification (label scoring or fallback catalog)
4. Persistence of the result
5. History and dashboard statistics

Vision failures never fail an analysis: they are logged and the
classifier is called without labels, which selects the fallback catalog.
"""

import base64
import logging
import random
import time
from typing import Optional

import httpx
from sqlalchemy.orm import Session

from cropsight.ml.disease_classifier import classify
from cropsight.models.enums import AnalysisSource, Severity
from cropsight.models.orm import CropAnalysis
from cropsight.models.schemas import (
    AnalysisRecord,
    AnalysisSummary,
    AnalyzeRequest,
    ClassificationResult,
    LabelObservation,
)
from cropsight.services.image_store import ImageStore, decode_image
from cropsight.services.vision_client import VisionClient, VisionServiceError

logger = logging.getLogger(__name__)


def to_record(row: CropAnalysis) -> AnalysisRecord:
    """Build the API representation of a stored analysis."""
    return AnalysisRecord(
        id=row.id,
        user_id=row.user_id,
        crop_type=row.crop_type,
        image_url=row.image_url,
        disease=row.disease_detected,
        severity=Severity(row.severity_level),
        confidence=row.confidence_score,
        treatments=list(row.treatment_suggestions or []),
        source=AnalysisSource(row.source),
        analysis_date=row.analysis_date,
    )


class AnalysisService:
    """
    Analysis orchestration and history queries.

    Usage:
        service = AnalysisService(db, vision_client, image_store)
        record = await service.analyze(request)

    Components are injected so tests can replace the vision client
    transport and the random source.
    """

    def __init__(
        self,
        db: Session,
        vision_client: VisionClient,
        image_store: ImageStore,
        rng: Optional[random.Random] = None,
        max_image_size_mb: float = 10.0,
        http_timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.db = db
        self.vision_client = vision_client
        self.image_store = image_store
        self.rng = rng or random.Random()
        self.max_image_size_mb = max_image_size_mb
        self.http_timeout = http_timeout
        self._transport = transport

    async def analyze(self, request: AnalyzeRequest) -> AnalysisRecord:
        """
        Analyze one crop photo and store the result.

        Raises:
            ValueError: the uploaded image is not a valid image
        """
        start = time.perf_counter()

        image_base64 = None
        image_url = request.image_url
        if request.image:
            decoded = decode_image(request.image, self.max_image_size_mb)
            image_url = self.image_store.save(decoded)
            image_base64 = decoded.as_base64

        labels = await self._detect_labels(image_base64, image_url)
        result = classify(request.crop_type, labels, self.rng)
        source = AnalysisSource.VISION if labels else AnalysisSource.FALLBACK

        row = self._persist(request, image_url, result, source)

        logger.info(
            f"Analysis {row.id} for user={request.user_id} crop={request.crop_type}: "
            f"{result.disease} ({result.severity.value}, {result.confidence}%) "
            f"via {source.value} in {(time.perf_counter() - start) * 1000:.0f}ms"
        )
        return to_record(row)

    async def _detect_labels(
        self,
        image_base64: Optional[str],
        image_url: Optional[str]
    ) -> list[LabelObservation]:
        """Labels from the vision API, or an empty list on any failure."""
        if not self.vision_client.is_configured:
            logger.info("Vision API key not available, using fallback catalog")
            return []

        try:
            if image_base64 is None:
                image_base64 = await self._load_image(image_url)
            return await self.vision_client.detect_labels(image_base64)
        except (VisionServiceError, ValueError) as e:
            logger.warning(f"Falling back to catalog analysis: {e}")
            return []

    async def _load_image(self, image_url: Optional[str]) -> str:
        """Base64 content of a stored or remote image."""
        if not image_url:
            raise ValueError("No image available for analysis")

        local_path = self.image_store.path_for(image_url)
        if local_path is not None:
            return base64.b64encode(local_path.read_bytes()).decode("ascii")

        if not image_url.startswith(("http://", "https://")):
            raise ValueError(f"Unsupported image reference: {image_url}")

        max_bytes = int(self.max_image_size_mb * 1024 * 1024)
        content = bytearray()
        try:
            async with httpx.AsyncClient(timeout=self.http_timeout, transport=self._transport) as client:
                async with client.stream("GET", image_url, follow_redirects=True) as response:
                    if not response.is_success:
                        raise ValueError(f"Failed to fetch image from URL ({response.status_code})")
                    async for chunk in response.aiter_bytes():
                        content.extend(chunk)
                        if len(content) > max_bytes:
                            raise ValueError(f"Remote image exceeds {self.max_image_size_mb:g}MB limit")
        except httpx.HTTPError as e:
            raise ValueError(f"Could not fetch image: {e}")

        return base64.b64encode(bytes(content)).decode("ascii")

    def _persist(
        self,
        request: AnalyzeRequest,
        image_url: Optional[str],
        result: ClassificationResult,
        source: AnalysisSource
    ) -> CropAnalysis:
        row = CropAnalysis(
            user_id=request.user_id,
            image_url=image_url,
            crop_type=request.crop_type,
            disease_detected=result.disease,
            severity_level=result.severity.value,
            confidence_score=result.confidence,
            treatment_suggestions=list(result.treatments),
            source=source.value,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)
        return row

    # === Queries ===

    def get(self, analysis_id: str) -> Optional[AnalysisRecord]:
        row = self.db.get(CropAnalysis, analysis_id)
        return to_record(row) if row else None

    def list_for_user(self, user_id: str, limit: int = 50) -> list[AnalysisRecord]:
        """A user's analyses, newest first."""
        rows = (
            self.db.query(CropAnalysis)
            .filter(CropAnalysis.user_id == user_id)
            .order_by(CropAnalysis.analysis_date.desc())
            .limit(limit)
            .all()
        )
        return [to_record(r) for r in rows]

    def list_all(self, limit: int = 200) -> list[AnalysisRecord]:
        """All analyses, newest first (admin view)."""
        rows = (
            self.db.query(CropAnalysis)
            .order_by(CropAnalysis.analysis_date.desc())
            .limit(limit)
            .all()
        )
        return [to_record(r) for r in rows]

    def delete(self, analysis_id: str) -> bool:
        """Delete an analysis. Returns False when it does not exist."""
        row = self.db.get(CropAnalysis, analysis_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        logger.info(f"Deleted analysis {analysis_id}")
        return True

    def summary(self, user_id: str) -> AnalysisSummary:
        """Dashboard statistics for one user."""
        rows = (
            self.db.query(CropAnalysis.severity_level, CropAnalysis.analysis_date)
            .filter(CropAnalysis.user_id == user_id)
            .all()
        )

        by_severity = {s.value: 0 for s in Severity}
        for severity, _ in rows:
            by_severity[severity] = by_severity.get(severity, 0) + 1

        healthy = by_severity[Severity.HEALTHY.value]
        return AnalysisSummary(
            user_id=user_id,
            total=len(rows),
            healthy=healthy,
            diseased=len(rows) - healthy,
            by_severity=by_severity,
            latest_analysis_date=max((d for _, d in rows), default=None),
        )
