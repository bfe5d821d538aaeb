"""
Admin endpoints: review and remove analyses across all users.

Every route requires the X-Admin-Token header.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from cropsight.core.dependencies import get_analysis_service, require_admin
from cropsight.models.schemas import AnalysisListResponse
from cropsight.services.analysis_service import AnalysisService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/analyses", response_model=AnalysisListResponse)
def list_all_analyses(
    limit: int = Query(200, ge=1, le=1000),
    service: AnalysisService = Depends(get_analysis_service)
) -> AnalysisListResponse:
    analyses = service.list_all(limit)
    return AnalysisListResponse(analyses=analyses, total=len(analyses))


@router.delete("/analyses/{analysis_id}")
def delete_analysis(
    analysis_id: str,
    service: AnalysisService = Depends(get_analysis_service)
) -> dict:
    if not service.delete(analysis_id):
        raise HTTPException(status_code=404, detail="Analysis not found")
    logger.info(f"Admin deleted analysis {analysis_id}")
    return {"status": "deleted", "id": analysis_id}
