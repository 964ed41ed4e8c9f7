import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..core.errors import ProfileValidationError
from ..services.registration import RegistrationService
from .deps import get_registration_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["registration"])


class RegisterResponse(BaseModel):
    token: str
    publicUrl: str
    qrImageUrl: str


@router.post("/register", response_model=RegisterResponse)
def register(
    payload: Dict[str, Any] = Body(...),
    service: RegistrationService = Depends(get_registration_service),
):
    """
    Register emergency information and issue a token.
    The body is validated field by field so every failure has its own message.
    """
    try:
        result = service.register(payload)
    except ProfileValidationError as e:
        logger.info("Registration rejected: %s", e)
        return JSONResponse(status_code=400, content={"error": str(e)})
    return result.to_dict()
