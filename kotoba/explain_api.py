from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from loguru import logger

from kotoba.config import Settings, get_settings
from kotoba.dispatch import ProviderRegistry, get_providers, require_prompt
from kotoba.metrics import Span, log_metrics
from kotoba.prompts import EXPLANATION_KINDS, build_messages, explanation_prompt
from kotoba.security.errors import UpstreamError, ValidationError
from kotoba.streaming import typed_stream
from providers.errors import ProviderError

router = APIRouter()

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.get("/explain/open")
async def explain(
    prompt: Optional[str] = Query(None),
    kind: str = Query("vocabulary", alias="type"),
    settings: Settings = Depends(get_settings),
    providers: ProviderRegistry = Depends(get_providers),
) -> StreamingResponse:
    prompt = require_prompt(prompt)
    if kind not in EXPLANATION_KINDS:
        raise ValidationError(f"type must be one of: {', '.join(EXPLANATION_KINDS)}")

    messages = build_messages(explanation_prompt(kind, prompt, settings.max_tokens), prompt)
    provider = providers.openai()

    span = Span()
    try:
        deltas = await provider.stream_text(messages, max_tokens=settings.max_tokens)
    except ProviderError as exc:
        logger.warning("Explanation stream failed to open status={} code={}", exc.status_code, exc.code)
        raise UpstreamError("Failed to generate explanation") from exc

    def _finished(chars: int) -> None:
        log_metrics(
            {"route": "explain", "backend": "open", "type": kind, "chars": chars, "upstream_ms": span.upstream_ms()},
            settings,
        )

    body = typed_stream(deltas, settings.stream_char_delay_ms / 1000.0, on_complete=_finished)
    return StreamingResponse(body, media_type="text/plain; charset=utf-8", headers=STREAM_HEADERS)
