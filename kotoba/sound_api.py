from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from loguru import logger

from kotoba.config import Settings, get_settings
from kotoba.dispatch import ProviderRegistry, get_providers, require_prompt
from kotoba.metrics import Span, log_metrics
from kotoba.prompts import speech_instructions
from kotoba.security.errors import UpstreamError, ValidationError
from providers.errors import ProviderError
from providers.openai_llm import VOICES

router = APIRouter()

AUDIO_MEDIA_TYPE = "audio/mpeg"


@router.get("/sound/open")
async def sound(
    prompt: Optional[str] = Query(None),
    voice: Optional[str] = Query(None),
    model: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
    providers: ProviderRegistry = Depends(get_providers),
) -> Response:
    prompt = require_prompt(prompt)
    voice = voice or settings.tts_default_voice
    model = model or settings.tts_default_model
    if voice not in VOICES:
        raise ValidationError(f"Unknown voice: {voice}")

    provider = providers.openai()
    span = Span()
    try:
        audio = await provider.synthesize_speech(
            prompt,
            voice=voice,
            model=model,
            instructions=speech_instructions(model),
        )
    except ProviderError as exc:
        logger.warning("Speech synthesis failed status={} code={} model={}", exc.status_code, exc.code, model)
        raise UpstreamError("Failed to generate speech") from exc
    if not audio:
        raise UpstreamError("Failed to generate speech")

    log_metrics(
        {"route": "sound", "backend": "open", "voice": voice, "model": model, "bytes": len(audio), "upstream_ms": span.upstream_ms()},
        settings,
    )
    return Response(
        content=audio,
        media_type=AUDIO_MEDIA_TYPE,
        headers={"Content-Disposition": 'inline; filename="speech.mp3"'},
    )
