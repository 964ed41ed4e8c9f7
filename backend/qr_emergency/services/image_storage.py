"""
Emergency photo storage.
Photos are written to a local uploads directory, or kept in process memory when
running stateless (serverless platforms have no writable persistent disk).
"""
import logging
import os
import random
import threading
from datetime import datetime, timezone
from typing import Dict, Optional

logger = logging.getLogger(__name__)


def generate_photo_filename() -> str:
    millis = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"emergency-{millis}-{random.randint(0, 10**9)}.jpg"


class ImageStorageService:
    """Store uploaded photo bytes by filename.

    ``base_dir=None`` selects memory storage.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = base_dir
        self._memory: Dict[str, bytes] = {}
        self._lock = threading.Lock()

    @property
    def in_memory(self) -> bool:
        return self.base_dir is None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def store(self, image_data: bytes, filename: str) -> None:
        """Persist an image under ``filename``; read it back with :meth:`load`."""
        if self.in_memory:
            with self._lock:
                self._memory[filename] = image_data
        else:
            self._save_local(image_data, filename)

    def load(self, filename: str) -> Optional[bytes]:
        if self.in_memory:
            with self._lock:
                return self._memory.get(filename)
        filepath = self._path(filename)
        if filepath is None or not os.path.exists(filepath):
            return None
        with open(filepath, "rb") as fh:
            return fh.read()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _path(self, filename: str) -> Optional[str]:
        # filenames are generated server-side; refuse anything path-like
        if os.path.basename(filename) != filename or filename in ("", ".", ".."):
            return None
        return os.path.join(self.base_dir, filename)

    def _save_local(self, image_data: bytes, filename: str) -> str:
        os.makedirs(self.base_dir, exist_ok=True)
        filepath = self._path(filename)
        if filepath is None:
            raise ValueError(f"Invalid photo filename: {filename!r}")
        with open(filepath, "wb") as fh:
            fh.write(image_data)
        logger.debug("Saved photo to %s", filepath)
        return filepath


def default_upload_dir() -> str:
    return os.path.join(
        os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
        "uploads",
    )


def build_image_storage(app_settings) -> ImageStorageService:
    if app_settings.STATELESS_MODE:
        return ImageStorageService(base_dir=None)
    return ImageStorageService(base_dir=app_settings.UPLOAD_DIR or default_upload_dir())
