"""
Auxiliary store for data that cannot live inside a token.

Holds legacy profiles by token, accident location logs and photo records.
``AuxiliaryStore`` keeps everything in process memory (stateless/serverless
mode). ``PersistentAuxiliaryStore`` additionally writes the full affected
collection to the ``store_snapshots`` table after every mutation and reloads
it on startup.

Every mutation runs under a single lock: FastAPI serves sync endpoints from a
thread pool, so concurrent requests share this object.
"""
import logging
import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from ..core.errors import StoreUnavailable
from ..models.base import Base, utcnow
from ..models.profile import Profile
from ..models.records import AccidentLogEntry, PhotoRecord
from ..models.snapshot import StoreCollection, StoreSnapshot

logger = logging.getLogger(__name__)


class AuxiliaryStore:
    """In-memory keyed collections. State lives for the process lifetime only."""

    def __init__(self):
        self._lock = threading.Lock()
        self._profiles: Dict[str, Profile] = {}
        self._accident_logs: List[AccidentLogEntry] = []
        self._photos: Dict[str, PhotoRecord] = {}
        self._next_log_id = 1
        self._last_updated: datetime = utcnow()

    # ------------------------------------------------------------------
    # Profiles (legacy tokens and mirrored registrations)
    # ------------------------------------------------------------------

    def put_profile(self, token: str, profile: Profile) -> None:
        with self._lock:
            self._profiles[token] = profile
            self._touch()
            self._persist(StoreCollection.USERS)
        logger.info("Stored profile for %s (token %s...)", profile.full_name, token[:8])

    def get_profile(self, token: str) -> Optional[Profile]:
        with self._lock:
            return self._profiles.get(token)

    # ------------------------------------------------------------------
    # Accident logs
    # ------------------------------------------------------------------

    def append_accident_log(
        self,
        token: str,
        user_name: str,
        latitude: Optional[float],
        longitude: Optional[float],
        maps_url: Optional[str],
        reported_at: Optional[datetime] = None,
    ) -> AccidentLogEntry:
        with self._lock:
            entry = AccidentLogEntry(
                id=self._next_log_id,
                token=token,
                user_name=user_name,
                latitude=latitude,
                longitude=longitude,
                maps_url=maps_url,
                reported_at=reported_at or utcnow(),
            )
            self._accident_logs.append(entry)
            self._next_log_id += 1
            self._touch()
            self._persist(StoreCollection.ACCIDENT_LOGS)
        logger.info("Accident location logged for %s: %s", user_name, maps_url)
        return entry

    def list_recent_accident_logs(self, limit: int = 10) -> List[AccidentLogEntry]:
        """Last ``limit`` entries, most recent first."""
        if limit <= 0:
            return []
        with self._lock:
            return list(reversed(self._accident_logs[-limit:]))

    # ------------------------------------------------------------------
    # Photos
    # ------------------------------------------------------------------

    def put_photo_record(self, record: PhotoRecord) -> None:
        with self._lock:
            self._photos[record.view_token] = replace(record)
            self._touch()
            self._persist(StoreCollection.PHOTOS)
        logger.info("Photo uploaded: %s (%d bytes)", record.filename, record.size)

    def get_photo_record(self, view_token: str) -> Optional[PhotoRecord]:
        with self._lock:
            record = self._photos.get(view_token)
            return replace(record) if record else None

    def mark_photo_viewed(self, view_token: str) -> bool:
        """Flip ``viewed`` to True. Returns True only for the first call.

        Absent or already viewed records are left untouched.
        """
        with self._lock:
            record = self._photos.get(view_token)
            if record is None or record.viewed:
                return False
            record.viewed = True
            record.viewed_at = utcnow()
            self._touch()
            self._persist(StoreCollection.PHOTOS)
        logger.info("Photo marked as viewed (view token %s...)", view_token[:8])
        return True

    # ------------------------------------------------------------------
    # Statistics
    # ------------------------------------------------------------------

    def stats(self) -> Dict:
        with self._lock:
            return {
                "totalUsers": len(self._profiles),
                "totalAccidentLogs": len(self._accident_logs),
                "totalPhotos": len(self._photos),
                "lastUpdated": self._last_updated.isoformat(),
            }

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _touch(self) -> None:
        self._last_updated = utcnow()

    def _persist(self, collection: str) -> None:
        """Hook for durable stores. Called with the lock held."""

    def _serialize(self, collection: str):
        if collection == StoreCollection.USERS:
            return {token: p.to_record() for token, p in self._profiles.items()}
        if collection == StoreCollection.ACCIDENT_LOGS:
            return [entry.to_record() for entry in self._accident_logs]
        return {token: r.to_record() for token, r in self._photos.items()}


class PersistentAuxiliaryStore(AuxiliaryStore):
    """Write-through store: every mutation snapshots its collection via SQLAlchemy.

    A failed write is logged and swallowed; memory stays authoritative for the
    rest of the process lifetime.
    """

    def __init__(self, engine: Engine):
        super().__init__()
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
        try:
            Base.metadata.create_all(bind=engine)
        except SQLAlchemyError as exc:
            logger.error("Failed to prepare store tables, starting empty: %s", exc)
            return
        self._load()

    def _persist(self, collection: str) -> None:
        try:
            self._write_snapshot(collection, self._serialize(collection))
        except StoreUnavailable as exc:
            logger.warning("Failed to save %s snapshot: %s", collection, exc)

    def _write_snapshot(self, collection: str, payload) -> None:
        db = self._session_factory()
        try:
            row = db.get(StoreSnapshot, collection)
            if row is None:
                db.add(StoreSnapshot(collection=collection, payload=payload))
            else:
                row.payload = payload
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise StoreUnavailable(str(exc)) from exc
        finally:
            db.close()

    def _load(self) -> None:
        db = self._session_factory()
        try:
            rows = {row.collection: row.payload for row in db.query(StoreSnapshot).all()}
        except SQLAlchemyError as exc:
            logger.error("Failed to load store snapshots: %s", exc)
            return
        finally:
            db.close()

        try:
            self._profiles = {
                token: Profile.from_record(record)
                for token, record in (rows.get(StoreCollection.USERS) or {}).items()
            }
            logger.info("Loaded %d users from database", len(self._profiles))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Failed to load users snapshot: %s", exc)
            self._profiles = {}

        try:
            self._accident_logs = [
                AccidentLogEntry.from_record(record)
                for record in (rows.get(StoreCollection.ACCIDENT_LOGS) or [])
            ]
            logger.info("Loaded %d accident logs", len(self._accident_logs))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Failed to load accident logs snapshot: %s", exc)
            self._accident_logs = []
        self._next_log_id = max((e.id for e in self._accident_logs), default=0) + 1

        try:
            self._photos = {
                token: PhotoRecord.from_record(record)
                for token, record in (rows.get(StoreCollection.PHOTOS) or {}).items()
            }
            logger.info("Loaded %d photo records", len(self._photos))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.error("Failed to load photos snapshot: %s", exc)
            self._photos = {}


def build_store(app_settings, engine: Optional[Engine] = None) -> AuxiliaryStore:
    """One store per process: in-memory when stateless, persistent otherwise."""
    if app_settings.STATELESS_MODE:
        logger.info("Stateless mode: auxiliary store is in-memory only")
        return AuxiliaryStore()
    if engine is None:
        from ..models.base import engine
    return PersistentAuxiliaryStore(engine)
