from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from starlette.responses import JSONResponse


AUTH_REALM = "AI Worker Access"
CHALLENGE_HEADERS = {"WWW-Authenticate": f'Basic realm="{AUTH_REALM}"'}


class ProxyError(Exception):
    """Terminal request failure carrying the HTTP status it maps to."""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, detail: str, *, code: Optional[str] = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if code is not None:
            self.code = code

    @property
    def headers(self) -> Optional[Mapping[str, str]]:
        return None


class AuthenticationError(ProxyError):
    status_code = 401
    code = "UNAUTHORIZED"

    @property
    def headers(self) -> Optional[Mapping[str, str]]:
        return CHALLENGE_HEADERS


class ValidationError(ProxyError):
    status_code = 400
    code = "INVALID_PARAMETER"


class UpstreamError(ProxyError):
    status_code = 500
    code = "UPSTREAM_ERROR"


class NotFoundError(ProxyError):
    status_code = 404
    code = "NOT_FOUND"


def json_error(
    status_code: int,
    code: str,
    detail: str,
    headers: Optional[Mapping[str, str]] = None,
) -> JSONResponse:
    payload: Dict[str, Any] = {"code": code, "detail": detail}
    return JSONResponse(payload, status_code=status_code, headers=dict(headers) if headers else None)


def error_response(exc: ProxyError) -> JSONResponse:
    return json_error(exc.status_code, exc.code, exc.detail, exc.headers)
