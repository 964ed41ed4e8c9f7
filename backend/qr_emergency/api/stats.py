"""Stats and accident log viewer (admin/demo)."""
from fastapi import APIRouter, Depends, Query
from typing import List, Optional
from pydantic import BaseModel
from datetime import datetime

from ..services.aux_store import AuxiliaryStore
from ..services.resolution import ResolutionService
from .deps import get_resolution_service, get_settings, get_store

router = APIRouter(tags=["stats"])


class StatsResponse(BaseModel):
    totalUsers: int
    totalAccidentLogs: int
    totalPhotos: int
    lastUpdated: str


class AccidentLogResponse(BaseModel):
    id: int
    token: str
    userName: str
    latitude: Optional[float]
    longitude: Optional[float]
    mapsUrl: Optional[str]
    reportedAt: datetime


@router.get("/stats", response_model=StatsResponse)
def get_stats(store: AuxiliaryStore = Depends(get_store)):
    return store.stats()


@router.get("/accident-logs", response_model=List[AccidentLogResponse])
def get_accident_logs(
    limit: Optional[int] = Query(None, ge=1, le=1000, description="Maximum number of logs"),
    service: ResolutionService = Depends(get_resolution_service),
    app_settings=Depends(get_settings),
):
    """Recent accident location logs, newest first."""
    entries = service.recent_accident_logs(limit or app_settings.RECENT_LOGS_DEFAULT)
    return [entry.to_record() for entry in entries]
