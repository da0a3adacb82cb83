from __future__ import annotations

import threading
from enum import Enum
from typing import Any, Dict, Optional

from fastapi import Depends
from loguru import logger

from kotoba.config import Settings, get_settings
from kotoba.security.errors import NotFoundError, UpstreamError, ValidationError
from providers.openai_llm import OpenAIProvider
from providers.workers_ai import WorkersAIProvider


class Backend(str, Enum):
    WORKERS_AI = "cf"
    OPENAI = "open"


# path segment (or ?provider= value) -> backend
ASK_ROUTES: Dict[str, Backend] = {
    "cf": Backend.WORKERS_AI,
    "open": Backend.OPENAI,
}
DEFAULT_ASK_BACKEND = Backend.WORKERS_AI


def resolve_backend(segment: Optional[str]) -> Backend:
    if segment is None:
        return DEFAULT_ASK_BACKEND
    backend = ASK_ROUTES.get(segment)
    if backend is None:
        raise NotFoundError(f"Unknown provider: {segment}")
    return backend


def require_prompt(prompt: Optional[str]) -> str:
    if not prompt:
        raise ValidationError("Missing prompt", code="MISSING_PROMPT")
    return prompt


class ProviderRegistry:
    """Lazily builds one client per backend for a given settings value."""

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._openai: Optional[OpenAIProvider] = None
        self._workers_ai: Optional[WorkersAIProvider] = None
        self._lock = threading.Lock()

    def openai(self) -> OpenAIProvider:
        with self._lock:
            if self._openai is None:
                if not self.settings.openai_configured:
                    logger.warning("OpenAI backend requested but OPENAI_KEY is not set")
                    raise UpstreamError("Provider not configured", code="PROVIDER_NOT_CONFIGURED")
                self._openai = OpenAIProvider(
                    api_key=self.settings.openai_key,
                    model=self.settings.openai_model,
                )
            return self._openai

    def workers_ai(self) -> WorkersAIProvider:
        with self._lock:
            if self._workers_ai is None:
                if not self.settings.workers_ai_configured:
                    logger.warning("Workers AI backend requested but CF_ACCOUNT_ID/CF_API_TOKEN are not set")
                    raise UpstreamError("Provider not configured", code="PROVIDER_NOT_CONFIGURED")
                self._workers_ai = WorkersAIProvider(
                    account_id=self.settings.cf_account_id,
                    api_token=self.settings.cf_api_token,
                    model=self.settings.cf_model,
                    api_base=self.settings.cf_api_base,
                    timeout=self.settings.upstream_timeout_sec,
                )
            return self._workers_ai

    def for_backend(self, backend: Backend) -> Any:
        if backend is Backend.OPENAI:
            return self.openai()
        return self.workers_ai()

    async def aclose(self) -> None:
        for provider in (self._openai, self._workers_ai):
            if provider is not None:
                await provider.aclose()
        self._openai = None
        self._workers_ai = None


_registries: Dict[Settings, ProviderRegistry] = {}
_registry_lock = threading.Lock()


def get_providers(settings: Settings = Depends(get_settings)) -> ProviderRegistry:
    with _registry_lock:
        registry = _registries.get(settings)
        if registry is None:
            registry = ProviderRegistry(settings)
            _registries[settings] = registry
        return registry


async def close_providers() -> None:
    with _registry_lock:
        registries = list(_registries.values())
        _registries.clear()
    for registry in registries:
        await registry.aclose()
    logger.debug("Provider clients closed")
