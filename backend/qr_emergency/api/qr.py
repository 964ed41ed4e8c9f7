import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from ..services.qr_renderer import QRRenderer
from ..services.registration import scan_path
from ..services.resolution import ResolutionService
from .deps import get_qr_renderer, get_resolution_service, public_base_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/qr", tags=["qr"])


@router.get("/{token}")
def get_qr_image(
    token: str,
    request: Request,
    service: ResolutionService = Depends(get_resolution_service),
    renderer: QRRenderer = Depends(get_qr_renderer),
):
    """PNG QR code pointing at the scan page for this token."""
    if service.lookup(token) is None:
        raise HTTPException(status_code=404, detail="Unknown QR code")

    url = public_base_url(request) + scan_path(token)
    try:
        png = renderer.render(url)
    except Exception:
        logger.exception("QR generation failed for token %s...", token[:8])
        raise HTTPException(status_code=500, detail="Failed to generate QR code")

    return Response(
        content=png,
        media_type="image/png",
        headers={"Cache-Control": "public, max-age=31536000"},
    )
