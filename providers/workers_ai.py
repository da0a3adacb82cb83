from __future__ import annotations

from typing import Any, Dict, List, Optional

import httpx
from loguru import logger

from providers.errors import ProviderError, map_status, mask_key


SENTENCES_JSON_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "sentences": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "jp": {"type": "string"},
                    "jp_reading": {"type": "string"},
                    "en": {"type": "string"},
                },
                "required": ["jp", "jp_reading", "en"],
            },
        },
    },
    "required": ["sentences"],
}


class WorkersAIProvider:
    """
    Cloudflare Workers AI, reached over the account-scoped REST endpoint.

    Inside a Worker the ``AI`` binding returns the model output directly; the
    REST API wraps the same payload as ``{"result": ..., "success": true}``.
    ``run`` unwraps it so callers see what the binding would have returned.
    """

    def __init__(
        self,
        account_id: str,
        api_token: str,
        model: str,
        *,
        api_base: str = "https://api.cloudflare.com/client/v4",
        timeout: float = 60.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.account_id = account_id
        self.api_token = api_token
        self.model = model
        self.api_base = api_base.rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout)
        logger.debug(
            "Initialized WorkersAIProvider (model={}, account={}, token={})",
            model,
            account_id,
            mask_key(api_token),
        )

    def _url(self, model: str) -> str:
        return f"{self.api_base}/accounts/{self.account_id}/ai/run/{model}"

    async def run(self, payload: Dict[str, Any], *, model: Optional[str] = None) -> Any:
        target = model or self.model
        try:
            response = await self._client.post(
                self._url(target),
                headers={"Authorization": f"Bearer {self.api_token}"},
                json=payload,
            )
        except httpx.HTTPError as exc:
            raise ProviderError(502, "UPSTREAM_UNAVAILABLE", f"{exc.__class__.__name__}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        if response.is_error:
            detail = _error_detail(body) or response.text or "Unknown error"
            raise ProviderError(response.status_code, map_status(response.status_code), detail)
        if not isinstance(body, dict) or not body.get("success", False):
            raise ProviderError(502, "UPSTREAM_ERROR", _error_detail(body) or "Workers AI call failed")
        return body.get("result")

    async def generate_sentences(
        self,
        messages: List[Dict[str, str]],
        *,
        max_tokens: int,
    ) -> Any:
        payload = {
            "messages": messages,
            "max_tokens": max_tokens,
            "temperature": 0,
            "stream": False,
            "response_format": {
                "type": "json_schema",
                "json_schema": SENTENCES_JSON_SCHEMA,
            },
        }
        logger.debug("Invoking Workers AI (model={}, max_tokens={})", self.model, max_tokens)
        return await self.run(payload)

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_detail(body: Any) -> str:
    if not isinstance(body, dict):
        return ""
    errors = body.get("errors") or []
    messages = [str(item.get("message")) for item in errors if isinstance(item, dict) and item.get("message")]
    return "; ".join(messages)
