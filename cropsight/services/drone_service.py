"""
Drone feed capture storage.

Recordings (video) and snapshots (images) captured in the browser arrive
as base64 blobs and are kept as-is in the drone_recordings table.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from cropsight.models.enums import MediaKind
from cropsight.models.orm import DroneRecording
from cropsight.models.schemas import DroneRecordingCreate, DroneRecordingInfo
from cropsight.services.image_store import decode_base64, strip_data_url

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPES = {
    MediaKind.RECORDING: "video/webm",
    MediaKind.SNAPSHOT: "image/png",
}


def media_url(recording_id: str, api_prefix: str = "/api/v1") -> str:
    return f"{api_prefix}/drone/recordings/{recording_id}/media"


class DroneFeedStore:
    """Persist, list and serve drone feed captures."""

    def __init__(self, db: Session, max_size_mb: float = 50.0, api_prefix: str = "/api/v1"):
        self.db = db
        self.max_size_mb = max_size_mb
        self.api_prefix = api_prefix

    def _info(self, row: DroneRecording) -> DroneRecordingInfo:
        return DroneRecordingInfo(
            id=row.id,
            user_id=row.user_id,
            kind=MediaKind(row.kind),
            title=row.title,
            mime_type=row.mime_type,
            size_bytes=row.size_bytes,
            duration_seconds=row.duration_seconds,
            created_at=row.created_at,
            media_url=media_url(row.id, self.api_prefix),
        )

    def save(self, request: DroneRecordingCreate) -> DroneRecordingInfo:
        """
        Store a capture.

        Raises:
            ValueError: bad base64, wrong mime family for the kind,
                or payload over the size limit
        """
        payload, url_mime = strip_data_url(request.data)
        mime_type = (request.mime_type or url_mime or DEFAULT_MIME_TYPES[request.kind]).lower()

        if mime_type.split("/", 1)[0] != request.kind.mime_family:
            raise ValueError(
                f"A {request.kind.value} must be {request.kind.mime_family}/*, got {mime_type}"
            )

        content = decode_base64(payload)
        if not content:
            raise ValueError("Capture is empty")
        if len(content) > self.max_size_mb * 1024 * 1024:
            raise ValueError(f"Capture exceeds {self.max_size_mb:g}MB limit")

        row = DroneRecording(
            user_id=request.user_id,
            kind=request.kind.value,
            title=request.title,
            mime_type=mime_type,
            size_bytes=len(content),
            duration_seconds=request.duration_seconds,
            video_data=payload,
        )
        self.db.add(row)
        self.db.commit()
        self.db.refresh(row)

        logger.info(f"Stored drone {row.kind} {row.id} for user={row.user_id} ({row.size_bytes} bytes)")
        return self._info(row)

    def get(self, recording_id: str) -> Optional[DroneRecordingInfo]:
        row = self.db.get(DroneRecording, recording_id)
        return self._info(row) if row else None

    def list_for_user(self, user_id: str, limit: int = 50) -> list[DroneRecordingInfo]:
        rows = (
            self.db.query(DroneRecording)
            .filter(DroneRecording.user_id == user_id)
            .order_by(DroneRecording.created_at.desc())
            .limit(limit)
            .all()
        )
        return [self._info(r) for r in rows]

    def load_blob(self, recording_id: str) -> Optional[tuple[bytes, str]]:
        """Decoded payload and mime type for playback."""
        row = self.db.get(DroneRecording, recording_id)
        if row is None:
            return None
        return decode_base64(row.video_data), row.mime_type

    def delete(self, recording_id: str) -> bool:
        row = self.db.get(DroneRecording, recording_id)
        if row is None:
            return False
        self.db.delete(row)
        self.db.commit()
        return True
