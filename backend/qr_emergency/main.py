"""
QR Emergency Alert System API.
Registration issues self-contained tokens; scanners resolve them to the
minimum emergency information and can share their location or a photo.

Run with ``uvicorn qr_emergency.main:app``. Serverless entry points use
``qr_emergency.serverless`` and never import this module.
"""
from .app_factory import create_app

app = create_app()
