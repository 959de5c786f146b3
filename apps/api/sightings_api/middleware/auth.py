"""Operator authentication for moderation endpoints.

A single shared secret (``ADMIN_PASSWORD``) guards every ``/api/admin/*``
path and the moderation page. Credentials arrive as HTTP Basic; only the
password part is checked.
"""

import base64
import binascii
import logging
import secrets
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from sightings_api.errors import AuthError
from sightings_api.settings import get_settings

logger = logging.getLogger(__name__)

ADMIN_PATH_PREFIX = "/api/admin/"
ADMIN_UI_PATH = "/deymod"
CHALLENGE = {"WWW-Authenticate": 'Basic realm="admin"'}


def is_protected_path(path: str) -> bool:
    """Paths that require the operator credential."""
    return path.startswith(ADMIN_PATH_PREFIX) or path == ADMIN_UI_PATH


def basic_auth_password(header: Optional[str]) -> Optional[str]:
    """Extract the password from a Basic ``Authorization`` header."""
    if not header or not header.startswith("Basic "):
        return None
    try:
        decoded = base64.b64decode(header[len("Basic "):].strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    _, sep, password = decoded.partition(":")
    if not sep:
        return None
    return password


def is_authorized(header: Optional[str], expected_password: Optional[str]) -> bool:
    """Compare the presented password with the configured one in constant time."""
    if not expected_password:
        return False
    password = basic_auth_password(header)
    if password is None:
        return False
    return secrets.compare_digest(password.encode("utf-8"), expected_password.encode("utf-8"))


class AdminAuthMiddleware(BaseHTTPMiddleware):
    """Reject unauthenticated requests to operator endpoints."""

    async def dispatch(self, request: Request, call_next):
        """Process request with operator credential check."""
        if request.method == "OPTIONS" or not is_protected_path(request.url.path):
            return await call_next(request)

        settings = get_settings()
        if not is_authorized(request.headers.get("authorization"), settings.admin_password):
            error = AuthError()
            logger.warning(
                "Operator authentication failed",
                extra={
                    "path": request.url.path,
                    "correlation_id": getattr(request.state, "correlation_id", None),
                },
            )
            return JSONResponse(
                status_code=error.status_code,
                content={"error": error.response_message},
                headers=CHALLENGE,
            )

        return await call_next(request)
