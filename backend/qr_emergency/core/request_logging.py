"""
Access logging for scanner-facing endpoints.
Tokens are truncated so full identifiers never reach the logs.
"""
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# Paths carrying a token or view token in their second segment
TOKEN_PATH_PREFIXES = (
    "/api/users/",
    "/api/qr/",
    "/photo/",
    "/scan/",
)


def mask_path(path: str) -> str:
    """Truncate the token segment: /api/users/<token>/public -> /api/users/abcd1234.../public"""
    for prefix in TOKEN_PATH_PREFIXES:
        if path.startswith(prefix):
            rest = path[len(prefix):]
            token, sep, tail = rest.partition("/")
            if len(token) > 8:
                token = token[:8] + "..."
            return f"{prefix}{token}{sep}{tail}"
    return path


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs method, masked path, status and duration of API requests."""

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)

        path = request.url.path
        if path == "/health":
            return response

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            "%s %s -> %d (%.1f ms)",
            request.method, mask_path(path), response.status_code, elapsed_ms,
        )
        return response
