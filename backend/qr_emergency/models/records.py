"""
Records owned by the auxiliary store: accident location logs and photo uploads.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class AccidentLogEntry:
    """A scanner shared their location for a token. Append-only."""
    id: int
    token: str
    user_name: str
    latitude: Optional[float]
    longitude: Optional[float]
    maps_url: Optional[str]
    reported_at: datetime

    def to_record(self) -> Dict:
        return {
            "id": self.id,
            "token": self.token,
            "userName": self.user_name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "mapsUrl": self.maps_url,
            "reportedAt": self.reported_at.isoformat(),
        }

    @classmethod
    def from_record(cls, record: Dict) -> "AccidentLogEntry":
        return cls(
            id=int(record["id"]),
            token=record["token"],
            user_name=record["userName"],
            latitude=record.get("latitude"),
            longitude=record.get("longitude"),
            maps_url=record.get("mapsUrl"),
            reported_at=datetime.fromisoformat(record["reportedAt"]),
        )


@dataclass
class PhotoRecord:
    """An uploaded emergency photo behind a one-time view link."""
    view_token: str
    owner_token: str
    filename: str
    original_name: str
    size: int
    patient_name: Optional[str]
    uploaded_at: datetime
    content_type: str = "image/jpeg"
    captured_at: Optional[str] = None  # client-supplied timestamp, kept verbatim
    viewed: bool = False
    viewed_at: Optional[datetime] = None

    def to_record(self) -> Dict:
        return {
            "viewToken": self.view_token,
            "ownerToken": self.owner_token,
            "filename": self.filename,
            "originalName": self.original_name,
            "size": self.size,
            "patientName": self.patient_name,
            "uploadedAt": self.uploaded_at.isoformat(),
            "contentType": self.content_type,
            "capturedAt": self.captured_at,
            "viewed": self.viewed,
            "viewedAt": self.viewed_at.isoformat() if self.viewed_at else None,
        }

    @classmethod
    def from_record(cls, record: Dict) -> "PhotoRecord":
        viewed_at = record.get("viewedAt")
        return cls(
            view_token=record["viewToken"],
            owner_token=record["ownerToken"],
            filename=record["filename"],
            original_name=record["originalName"],
            size=int(record["size"]),
            patient_name=record.get("patientName"),
            uploaded_at=datetime.fromisoformat(record["uploadedAt"]),
            content_type=record.get("contentType", "image/jpeg"),
            captured_at=record.get("capturedAt"),
            viewed=bool(record.get("viewed", False)),
            viewed_at=datetime.fromisoformat(viewed_at) if viewed_at else None,
        )
