"""
Crop analysis API endpoints.

- Analyze a crop photo (vision labels or fallback catalog) and store it
- Classify a raw label set without storing anything
- Analysis history, single analysis and dashboard statistics
"""

import logging
import random

from fastapi import APIRouter, Depends, HTTPException, Query

from cropsight.core.dependencies import get_analysis_service, get_fallback_rng
from cropsight.ml.disease_catalog import supported_crops
from cropsight.ml.disease_classifier import classify
from cropsight.models.schemas import (
    AnalysisListResponse,
    AnalysisRecord,
    AnalysisSummary,
    AnalyzeRequest,
    ClassificationResult,
    ClassifyLabelsRequest,
    ErrorResponse,
)
from cropsight.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analyses", tags=["Analysis"])


@router.post(
    "",
    response_model=AnalysisRecord,
    status_code=201,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid image"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
    summary="Analyze crop photo",
    description="""
    Analyze a crop photo for disease.

    The photo is sent to the vision API for label detection and the labels
    are scored against disease and health keywords. When the vision API is
    unavailable the result is drawn from a per-crop fallback catalog
    (`source` = `fallback`).

    **Image input:** either `image` (base64 or data URL) or `image_url`.
    """
)
async def analyze_crop(
    request: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisRecord:
    try:
        logger.info(f"Received analysis request (crop={request.crop_type}, user={request.user_id})")
        return await service.analyze(request)
    except ValueError as e:
        logger.warning(f"Validation error: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.post(
    "/classify",
    response_model=ClassificationResult,
    summary="Classify vision labels",
    description="Score a label set for a crop. An empty label list uses the fallback catalog."
)
async def classify_labels(
    request: ClassifyLabelsRequest,
    rng: random.Random = Depends(get_fallback_rng)
) -> ClassificationResult:
    if request.seed is not None:
        rng = random.Random(request.seed)
    return classify(request.crop_type, request.labels, rng)


@router.get(
    "/crops",
    summary="List supported crops",
    description="Crops with dedicated disease keywords or fallback results."
)
async def get_supported_crops() -> dict:
    crops = supported_crops()
    return {
        "crops": crops,
        "note": "Other crop names are accepted and use generic disease names"
    }


@router.get("", response_model=AnalysisListResponse, summary="Analysis history")
def list_analyses(
    user_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=500),
    service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisListResponse:
    analyses = service.list_for_user(user_id, limit)
    return AnalysisListResponse(analyses=analyses, total=len(analyses))


@router.get("/summary", response_model=AnalysisSummary, summary="Dashboard statistics")
def analysis_summary(
    user_id: str = Query(..., min_length=1),
    service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisSummary:
    return service.summary(user_id)


@router.get("/{analysis_id}", response_model=AnalysisRecord, summary="Get analysis")
def get_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisRecord:
    record = service.get(analysis_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return record
