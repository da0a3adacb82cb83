from __future__ import annotations

import base64
import binascii
from secrets import compare_digest
from typing import Optional, Tuple

from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response
from starlette.types import ASGIApp

from kotoba.config import Credentials
from kotoba.security.errors import AuthenticationError, error_response


def mask_user(username: Optional[str]) -> str:
    """Log-safe form of a submitted username: first two characters only."""
    if not username:
        return "-"
    return f"{username[:2]}***"


def parse_basic_auth(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """
    Decode an ``Authorization: Basic ...`` header into ``(username, password)``.

    Returns None for a missing header, another scheme, broken base64 or a
    payload without the ``:`` separator. The password may itself contain ``:``.
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "basic" or not token.strip():
        return None
    try:
        decoded = base64.b64decode(token.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None
    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def verify_credentials(provided: Optional[Tuple[str, str]], expected: Credentials) -> bool:
    if provided is None or not expected.configured:
        return False
    username, password = provided
    # no short-circuit between the two fields
    user_ok = compare_digest(username.encode("utf-8"), expected.username.encode("utf-8"))
    pass_ok = compare_digest(password.encode("utf-8"), expected.password.encode("utf-8"))
    return user_ok and pass_ok


class BasicAuthMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, *, credentials: Credentials) -> None:
        super().__init__(app)
        self.credentials = credentials
        if not credentials.configured:
            logger.warning("AUTH_USERNAME/AUTH_PASSWORD not configured; every request will be rejected")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        provided = parse_basic_auth(request.headers.get("authorization"))
        if verify_credentials(provided, self.credentials):
            return await call_next(request)
        logger.info("## Basic auth rejected path={} user={}",
                    request.url.path,
                    mask_user(provided[0] if provided else None))
        return error_response(AuthenticationError("Unauthorized"))
