"""
Drone feed capture endpoints.

Stores recordings and snapshots uploaded from the drone page and serves
them back for playback.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from cropsight.core.dependencies import get_drone_store
from cropsight.models.schemas import DroneRecordingCreate, DroneRecordingInfo, DroneRecordingList
from cropsight.services.drone_service import DroneFeedStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/drone", tags=["Drone"])


@router.post(
    "/recordings",
    response_model=DroneRecordingInfo,
    status_code=201,
    summary="Store drone capture"
)
def create_recording(
    request: DroneRecordingCreate,
    store: DroneFeedStore = Depends(get_drone_store)
) -> DroneRecordingInfo:
    try:
        return store.save(request)
    except ValueError as e:
        logger.warning(f"Rejected drone capture: {e}")
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/recordings", response_model=DroneRecordingList, summary="List drone captures")
def list_recordings(
    user_id: str = Query(..., min_length=1),
    limit: int = Query(50, ge=1, le=200),
    store: DroneFeedStore = Depends(get_drone_store)
) -> DroneRecordingList:
    recordings = store.list_for_user(user_id, limit)
    return DroneRecordingList(recordings=recordings, total=len(recordings))


@router.get("/recordings/{recording_id}", response_model=DroneRecordingInfo)
def get_recording(
    recording_id: str,
    store: DroneFeedStore = Depends(get_drone_store)
) -> DroneRecordingInfo:
    info = store.get(recording_id)
    if info is None:
        raise HTTPException(status_code=404, detail="Recording not found")
    return info


@router.get("/recordings/{recording_id}/media", summary="Capture payload for playback")
def get_recording_media(
    recording_id: str,
    store: DroneFeedStore = Depends(get_drone_store)
) -> Response:
    blob = store.load_blob(recording_id)
    if blob is None:
        raise HTTPException(status_code=404, detail="Recording not found")
    content, mime_type = blob
    return Response(content=content, media_type=mime_type)


@router.delete("/recordings/{recording_id}")
def delete_recording(
    recording_id: str,
    store: DroneFeedStore = Depends(get_drone_store)
) -> dict:
    if not store.delete(recording_id):
        raise HTTPException(status_code=404, detail="Recording not found")
    return {"status": "deleted", "id": recording_id}
