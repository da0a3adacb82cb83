from __future__ import annotations

from typing import AsyncIterator, Dict, List, Optional

import openai
from loguru import logger
from openai import AsyncOpenAI
from pydantic import BaseModel
from pydantic import ValidationError as SchemaError

from providers.errors import ProviderError, map_status, mask_key


VOICES = (
    "alloy",
    "ash",
    "ballad",
    "coral",
    "echo",
    "fable",
    "nova",
    "onyx",
    "sage",
    "shimmer",
    "verse",
)


class Sentence(BaseModel):
    jp: str
    jp_reading: str
    en: str


class SentenceList(BaseModel):
    sentences: List[Sentence]


def _provider_error(exc: Exception) -> ProviderError:
    status = getattr(exc, "status_code", None)
    if isinstance(status, int):
        return ProviderError(status, map_status(status), str(exc))
    return ProviderError(502, "UPSTREAM_ERROR", f"{exc.__class__.__name__}: {exc}")


class OpenAIProvider:
    def __init__(
        self,
        api_key: str,
        model: str,
        *,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key)
        logger.debug("Initialized OpenAIProvider (model={}, key={})", model, mask_key(api_key))

    async def generate_sentences(
        self,
        messages: List[Dict[str, str]],
        *,
        max_tokens: int,
    ) -> List[Sentence]:
        """Structured-output call; returns an empty list on refusal."""
        logger.debug("Invoking OpenAI parse (model={}, max_tokens={})", self.model, max_tokens)
        try:
            completion = await self._client.chat.completions.parse(
                model=self.model,
                messages=messages,
                response_format=SentenceList,
                max_tokens=max_tokens,
            )
        except (openai.OpenAIError, SchemaError) as exc:
            raise _provider_error(exc) from exc

        if not completion.choices:
            return []
        parsed = completion.choices[0].message.parsed
        if parsed is None:
            return []
        return list(parsed.sentences)

    async def stream_text(
        self,
        messages: List[Dict[str, str]],
        *,
        max_tokens: int,
    ) -> AsyncIterator[str]:
        """
        Open a token stream and return an iterator over the text deltas.

        The request is sent before this coroutine returns, so connection and
        authentication failures surface as ProviderError here rather than in
        the middle of a response.
        """
        logger.debug("Invoking OpenAI stream (model={}, max_tokens={})", self.model, max_tokens)
        try:
            stream = await self._client.chat.completions.create(
                model=self.model,
                messages=messages,
                max_tokens=max_tokens,
                stream=True,
            )
        except openai.OpenAIError as exc:
            raise _provider_error(exc) from exc
        return _deltas(stream)

    async def synthesize_speech(
        self,
        text: str,
        *,
        voice: str,
        model: str,
        instructions: Optional[str] = None,
    ) -> bytes:
        extra = {"instructions": instructions} if instructions else {}
        logger.debug("Invoking OpenAI speech (model={}, voice={})", model, voice)
        try:
            response = await self._client.audio.speech.create(
                model=model,
                voice=voice,
                input=text,
                response_format="mp3",
                **extra,
            )
        except openai.OpenAIError as exc:
            raise _provider_error(exc) from exc
        return response.content

    async def aclose(self) -> None:
        await self._client.close()


async def _deltas(stream) -> AsyncIterator[str]:
    try:
        async for chunk in stream:
            if not chunk.choices:
                continue
            text = chunk.choices[0].delta.content
            if text:
                yield text
    except openai.OpenAIError as exc:
        raise _provider_error(exc) from exc
    finally:
        await stream.close()
