"""Request dependencies: services are built once per app and kept on ``app.state``."""
from fastapi import Request

from ..services.aux_store import AuxiliaryStore
from ..services.photo_service import PhotoService
from ..services.qr_renderer import QRRenderer
from ..services.registration import RegistrationService
from ..services.resolution import ResolutionService


def get_settings(request: Request):
    return request.app.state.settings


def get_store(request: Request) -> AuxiliaryStore:
    return request.app.state.store


def get_registration_service(request: Request) -> RegistrationService:
    return request.app.state.registration


def get_resolution_service(request: Request) -> ResolutionService:
    return request.app.state.resolution


def get_photo_service(request: Request) -> PhotoService:
    return request.app.state.photos


def get_qr_renderer(request: Request) -> QRRenderer:
    return request.app.state.qr_renderer


def public_base_url(request: Request) -> str:
    """Configured PUBLIC_BASE_URL, else the URL this request came in on."""
    configured = request.app.state.settings.PUBLIC_BASE_URL
    return (configured or str(request.base_url)).rstrip("/")
