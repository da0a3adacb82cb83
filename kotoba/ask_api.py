from __future__ import annotations

import json
from typing import Any, List, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from loguru import logger

from kotoba.config import Settings, get_settings
from kotoba.dispatch import Backend, ProviderRegistry, get_providers, require_prompt, resolve_backend
from kotoba.metrics import Span, log_metrics
from kotoba.prompts import ask_prompt, build_messages
from kotoba.security.errors import UpstreamError
from providers.errors import ProviderError

router = APIRouter()


async def _open_sentences(provider, messages, settings: Settings) -> List[dict]:
    sentences = await provider.generate_sentences(messages, max_tokens=settings.max_tokens)
    if not sentences:
        raise UpstreamError("Failed to generate sentences")
    return [sentence.model_dump() for sentence in sentences]


def _cf_sentences(payload: Any) -> List[Any]:
    if not isinstance(payload, dict):
        return []
    response = payload.get("response")
    if isinstance(response, str):
        try:
            response = json.loads(response)
        except ValueError:
            return []
    if not isinstance(response, dict):
        return []
    sentences = response.get("sentences")
    return sentences if isinstance(sentences, list) else []


async def _cf_payload(provider, messages, settings: Settings) -> Any:
    payload = await provider.generate_sentences(messages, max_tokens=settings.max_tokens)
    # returned untouched; only its sentence list is checked
    if not _cf_sentences(payload):
        raise UpstreamError("Failed to generate sentences")
    return payload


async def ask(backend: Backend, prompt: Optional[str], settings: Settings, providers: ProviderRegistry) -> JSONResponse:
    prompt = require_prompt(prompt)
    messages = build_messages(ask_prompt(settings.max_tokens), prompt)
    provider = providers.for_backend(backend)

    span = Span()
    try:
        if backend is Backend.OPENAI:
            body = await _open_sentences(provider, messages, settings)
            items = len(body)
        else:
            body = await _cf_payload(provider, messages, settings)
            items = len(_cf_sentences(body))
    except ProviderError as exc:
        logger.warning("Sentence generation failed backend={} status={} code={}", backend.value, exc.status_code, exc.code)
        raise UpstreamError("Failed to generate sentences") from exc

    log_metrics({"route": "ask", "backend": backend.value, "items": items, "upstream_ms": span.upstream_ms()}, settings)
    return JSONResponse(body)


@router.get("/ask")
async def ask_default(
    prompt: Optional[str] = Query(None),
    provider: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    providers: ProviderRegistry = Depends(get_providers),
) -> JSONResponse:
    return await ask(resolve_backend(provider), prompt, settings, providers)


@router.get("/ask/{segment}")
async def ask_backend(
    segment: str,
    prompt: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    providers: ProviderRegistry = Depends(get_providers),
) -> JSONResponse:
    return await ask(resolve_backend(segment), prompt, settings, providers)
