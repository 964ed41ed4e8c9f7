from sqlalchemy import Column, String, JSON
from .base import Base, TimestampMixin


class StoreCollection:
    USERS = "users"
    ACCIDENT_LOGS = "accident_logs"
    PHOTOS = "photos"

    ALL = [USERS, ACCIDENT_LOGS, PHOTOS]


class StoreSnapshot(Base, TimestampMixin):
    """Full serialized copy of one auxiliary store collection."""
    __tablename__ = "store_snapshots"

    collection = Column(String(50), primary_key=True)
    payload = Column(JSON, nullable=False)
