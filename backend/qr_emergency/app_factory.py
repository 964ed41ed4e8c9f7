"""
Application factory. Importing this module builds nothing; callers decide
the settings and therefore the deployment mode.
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .api import photos, qr, register, stats, users
from .core.config import Settings, settings
from .core.request_logging import RequestLoggingMiddleware
from .services.aux_store import build_store
from .services.image_storage import build_image_storage
from .services.photo_service import PhotoService
from .services.qr_renderer import QRRenderer
from .services.registration import RegistrationService
from .services.resolution import ResolutionService
from .services.validation import PhonePolicy

logger = logging.getLogger(__name__)


def create_app(app_settings: Optional[Settings] = None, store=None) -> FastAPI:
    """Build the app with one auxiliary store for this process."""
    app_settings = app_settings or settings
    logging.basicConfig(level=app_settings.LOG_LEVEL.upper())

    store = store if store is not None else build_store(app_settings)
    resolution = ResolutionService(store)

    app = FastAPI(
        title=app_settings.APP_NAME,
        description=(
            "Emergency contact registration with scannable codes. "
            "Profiles travel inside self-contained tokens; accident locations "
            "and one-time photo links live in an auxiliary store."
        ),
        version=app_settings.VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = app_settings
    app.state.store = store
    app.state.resolution = resolution
    app.state.registration = RegistrationService(
        store,
        phone_policy=PhonePolicy.from_settings(app_settings),
        mirror_to_store=app_settings.mirror_profiles,
    )
    app.state.photos = PhotoService(
        store,
        build_image_storage(app_settings),
        resolution,
        max_bytes=app_settings.MAX_PHOTO_BYTES,
    )
    app.state.qr_renderer = QRRenderer(box_size=app_settings.QR_BOX_SIZE, border=app_settings.QR_BORDER)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[app_settings.ALLOWED_ORIGIN] if app_settings.ALLOWED_ORIGIN else ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(register.router, prefix="/api")
    app.include_router(users.router, prefix="/api")
    app.include_router(qr.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")
    app.include_router(photos.router)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy",
            "service": app_settings.APP_NAME,
            "version": app_settings.VERSION,
            "stateless": app_settings.STATELESS_MODE,
        }

    logger.info(
        "%s started (mode=%s, phone validation=%s)",
        app_settings.APP_NAME,
        "stateless" if app_settings.STATELESS_MODE else "persistent",
        app_settings.PHONE_VALIDATION,
    )
    return app
