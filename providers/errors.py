from __future__ import annotations


class ProviderError(Exception):
    def __init__(self, status_code: int, code: str, detail: str) -> None:
        self.status_code = status_code
        self.code = code
        self.detail = detail
        super().__init__(f"{status_code} {code}: {detail}")


def map_status(status_code: int) -> str:
    if status_code == 401:
        return "AUTH_FAILED"
    if status_code in (402, 429):
        return "RATE_LIMIT"
    if 400 <= status_code < 500:
        return "BAD_REQUEST"
    return "UPSTREAM_ERROR"


def mask_key(api_key: str) -> str:
    if not api_key:
        return ""
    visible = api_key[:4]
    return f"{visible}{'*' * max(len(api_key) - 4, 0)}"
