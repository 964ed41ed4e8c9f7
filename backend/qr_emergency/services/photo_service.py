"""
Emergency photos behind one-time view links.

A scanner uploads a photo for a token; the owner's contacts receive a link
with a random view token. The first view returns the photo and burns the
link, every later view is told the link has expired.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.errors import PhotoRejected
from ..models.base import generate_token, utcnow
from ..models.records import PhotoRecord
from .aux_store import AuxiliaryStore
from .image_storage import ImageStorageService, generate_photo_filename
from .resolution import ResolutionService

logger = logging.getLogger(__name__)

DEFAULT_MAX_PHOTO_BYTES = 5 * 1024 * 1024


class PhotoViewStatus(str, Enum):
    AVAILABLE = "available"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


@dataclass
class PhotoView:
    status: PhotoViewStatus
    record: Optional[PhotoRecord] = None
    content: Optional[bytes] = None


class PhotoService:

    def __init__(
        self,
        store: AuxiliaryStore,
        storage: ImageStorageService,
        resolution: ResolutionService,
        max_bytes: int = DEFAULT_MAX_PHOTO_BYTES,
    ):
        self.store = store
        self.storage = storage
        self.resolution = resolution
        self.max_bytes = max_bytes

    def upload(
        self,
        owner_token: str,
        data: bytes,
        original_name: str,
        content_type: Optional[str],
        patient_name: Optional[str] = None,
        captured_at: Optional[str] = None,
    ) -> Optional[PhotoRecord]:
        """Store a photo for a resolvable token.

        Returns None if the token is unknown. Raises PhotoRejected for non-image
        content or oversized files.
        """
        if self.resolution.lookup(owner_token) is None:
            return None
        if not content_type or not content_type.startswith("image/"):
            raise PhotoRejected("Only image files are allowed")
        if not data:
            raise PhotoRejected("No photo uploaded")
        if len(data) > self.max_bytes:
            raise PhotoRejected(f"Photo exceeds {self.max_bytes // (1024 * 1024)}MB limit")

        filename = generate_photo_filename()
        self.storage.store(data, filename)

        record = PhotoRecord(
            view_token=generate_token(),
            owner_token=owner_token,
            filename=filename,
            original_name=original_name or filename,
            size=len(data),
            patient_name=patient_name,
            uploaded_at=utcnow(),
            content_type=content_type,
            captured_at=captured_at,
        )
        self.store.put_photo_record(record)
        return record

    def view(self, view_token: str) -> PhotoView:
        record = self.store.get_photo_record(view_token)
        if record is None:
            return PhotoView(PhotoViewStatus.NOT_FOUND)

        # mark_photo_viewed is the atomic check-and-set; losing the race means expired
        if not self.store.mark_photo_viewed(view_token):
            return PhotoView(PhotoViewStatus.EXPIRED, record=record)

        content = self.storage.load(record.filename)
        if content is None:
            logger.warning("Photo file %s missing for view token %s...", record.filename, view_token[:8])
            return PhotoView(PhotoViewStatus.NOT_FOUND, record=record)
        return PhotoView(PhotoViewStatus.AVAILABLE, record=self.store.get_photo_record(view_token), content=content)
