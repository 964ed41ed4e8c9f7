"""
Netlify / AWS Lambda proxy handler.

Translates a proxy event into an HTTP request against the ASGI app (through
httpx's in-process ASGI transport) and the response back into the proxy
result shape. The app, and with it the auxiliary store, is built once per
warm process; nothing is shared between processes.
"""
import asyncio
import base64
import json
import logging
from typing import Dict, Optional

import httpx
from fastapi import FastAPI

logger = logging.getLogger(__name__)

_app: Optional[FastAPI] = None

TEXT_CONTENT_TYPES = ("application/json", "text/")


def get_app() -> FastAPI:
    global _app
    if _app is None:
        from .core.config import Settings
        from .app_factory import create_app
        _app = create_app(Settings(STATELESS_MODE=True))
    return _app


def _request_body(event: Dict) -> bytes:
    body = event.get("body")
    if not body:
        return b""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body)
    return body.encode("utf-8")


async def _dispatch(app: FastAPI, event: Dict) -> Dict:
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    host = headers.pop("host", "localhost")
    scheme = headers.get("x-forwarded-proto", "https")
    headers.pop("content-length", None)

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=f"{scheme}://{host}") as client:
        response = await client.request(
            event.get("httpMethod", "GET"),
            event.get("path", "/"),
            params=event.get("queryStringParameters") or None,
            headers=headers,
            content=_request_body(event),
        )

    content_type = response.headers.get("content-type", "")
    is_text = any(content_type.startswith(t) for t in TEXT_CONTENT_TYPES)
    return {
        "statusCode": response.status_code,
        "headers": dict(response.headers),
        "body": response.text if is_text else base64.b64encode(response.content).decode("ascii"),
        "isBase64Encoded": not is_text,
    }


def handler(event: Dict, context=None, app: Optional[FastAPI] = None) -> Dict:
    """Serverless entry point."""
    try:
        return asyncio.run(_dispatch(app or get_app(), event))
    except Exception as exc:
        logger.exception("Serverless function error")
        return {
            "statusCode": 500,
            "headers": {"content-type": "application/json"},
            "body": json.dumps({"error": "Internal server error", "details": type(exc).__name__}),
            "isBase64Encoded": False,
        }
