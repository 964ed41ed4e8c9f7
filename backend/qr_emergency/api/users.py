"""Scanner-facing endpoints: public profile view and location logging."""
from fastapi import APIRouter, Depends, HTTPException
from typing import Dict, List, Optional
from pydantic import BaseModel

from ..services.resolution import ResolutionService
from .deps import get_resolution_service

router = APIRouter(prefix="/users", tags=["users"])


class PublicProfileResponse(BaseModel):
    fullName: str
    bloodGroup: str
    emergencyContacts: List[Dict[str, str]]
    governmentHelplines: List[Dict[str, str]]


class LocationRequest(BaseModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    mapsUrl: Optional[str] = None


@router.get("/{token}/public", response_model=PublicProfileResponse)
def get_public_profile(
    token: str,
    service: ResolutionService = Depends(get_resolution_service),
):
    """Public info for the scan page. Phone numbers are base64-encoded, not shown as text."""
    view = service.resolve(token)
    if view is None:
        raise HTTPException(status_code=404, detail="User not found")
    return view.to_dict()


@router.post("/{token}/location")
def log_location(
    token: str,
    req: Optional[LocationRequest] = None,
    service: ResolutionService = Depends(get_resolution_service),
):
    """Log the accident location a scanner shared."""
    req = req or LocationRequest()
    entry = service.log_location(token, req.latitude, req.longitude, req.mapsUrl)
    if entry is None:
        raise HTTPException(status_code=404, detail="User not found")
    return {"ok": True}
