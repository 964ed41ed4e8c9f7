from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.responses import Response
from typing import Optional
import logging

from ..core.errors import PhotoRejected
from ..services.photo_service import PhotoService, PhotoViewStatus
from .deps import get_photo_service, public_base_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["photos"])


def photo_path(view_token: str) -> str:
    return f"/photo/{view_token}"


@router.post("/api/upload-photo")
async def upload_photo(
    request: Request,
    token: str = Form(...),
    patientName: Optional[str] = Form(None),
    timestamp: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    service: PhotoService = Depends(get_photo_service),
):
    """
    Upload an emergency photo and return a one-time view link.
    """
    if photo is None:
        if service.resolution.lookup(token) is None:
            raise HTTPException(status_code=404, detail="User not found")
        raise HTTPException(status_code=400, detail="No photo uploaded")

    data = await photo.read()
    try:
        record = service.upload(
            owner_token=token,
            data=data,
            original_name=photo.filename or "",
            content_type=photo.content_type,
            patient_name=patientName,
            captured_at=timestamp,
        )
    except PhotoRejected as e:
        raise HTTPException(status_code=400, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="User not found")

    return {
        "success": True,
        "photoUrl": photo_path(record.view_token),
        "secureUrl": public_base_url(request) + photo_path(record.view_token),
        "viewToken": record.view_token,
        "message": "Photo uploaded successfully",
    }


@router.get("/photo/{view_token}")
def view_photo(
    view_token: str,
    service: PhotoService = Depends(get_photo_service),
):
    """View a photo once. Later requests get 410 Gone."""
    result = service.view(view_token)
    if result.status == PhotoViewStatus.NOT_FOUND:
        raise HTTPException(status_code=404, detail="Photo not found or expired")
    if result.status == PhotoViewStatus.EXPIRED:
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Photo link expired - one-time access only")
    return Response(
        content=result.content,
        media_type=result.record.content_type,
        headers={"Cache-Control": "no-store"},
    )
