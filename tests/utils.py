from __future__ import annotations

import base64
from typing import Any, AsyncIterator, Dict, Iterable, Iterator, List, Optional, Sequence, Union

from kotoba.dispatch import Backend
from providers.openai_llm import Sentence

USERNAME = "tanuki"
PASSWORD = "s3cret:with:colons"


def basic_auth_header(username: str, password: str) -> Dict[str, str]:
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return {"Authorization": f"Basic {token}"}


async def aiter_items(items: Iterable[Union[str, Exception]]) -> AsyncIterator[str]:
    for item in items:
        if isinstance(item, Exception):
            raise item
        yield item


def make_sentences(count: int) -> List[Sentence]:
    return [
        Sentence(jp=f"猫[ねこ]が{i}匹[ひき]いる。", jp_reading=f"ねこが{i}ひきいる。", en=f"There are {i} cats.")
        for i in range(1, count + 1)
    ]


class FakeOpenAIProvider:
    def __init__(
        self,
        *,
        sentences: Optional[Sequence[Sentence]] = None,
        deltas: Optional[Sequence[Union[str, Exception]]] = None,
        audio: bytes = b"ID3\x03\x00fake-mp3",
        error: Optional[Exception] = None,
    ) -> None:
        self.sentences = list(sentences or [])
        self.deltas = list(deltas or [])
        self.audio = audio
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate_sentences(self, messages, *, max_tokens):
        self.calls.append({"op": "sentences", "messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return list(self.sentences)

    async def stream_text(self, messages, *, max_tokens):
        self.calls.append({"op": "stream", "messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return aiter_items(self.deltas)

    async def synthesize_speech(self, text, *, voice, model, instructions=None):
        self.calls.append({"op": "speech", "text": text, "voice": voice, "model": model, "instructions": instructions})
        if self.error is not None:
            raise self.error
        return self.audio


class FakeWorkersAIProvider:
    def __init__(self, *, payload: Any = None, error: Optional[Exception] = None) -> None:
        self.payload = payload
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate_sentences(self, messages, *, max_tokens):
        self.calls.append({"op": "sentences", "messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return self.payload


class FakeRegistry:
    def __init__(
        self,
        openai: Optional[FakeOpenAIProvider] = None,
        workers_ai: Optional[FakeWorkersAIProvider] = None,
    ) -> None:
        self._openai = openai or FakeOpenAIProvider()
        self._workers_ai = workers_ai or FakeWorkersAIProvider()

    def openai(self) -> FakeOpenAIProvider:
        return self._openai

    def workers_ai(self) -> FakeWorkersAIProvider:
        return self._workers_ai

    def for_backend(self, backend: Backend):
        if backend is Backend.OPENAI:
            return self._openai
        return self._workers_ai

    def provider_calls(self) -> int:
        return len(self._openai.calls) + len(self._workers_ai.calls)


class FakeResponse:
    def __init__(self, status_code: int = 200, chunks: Sequence[Union[str, bytes]] = (), text: str = "") -> None:
        self.status_code = status_code
        self._chunks = list(chunks)
        self.text = text or "".join(c if isinstance(c, str) else c.decode("utf-8", "replace") for c in self._chunks)
        self.closed = False

    def iter_content(self, chunk_size=None, decode_unicode=False) -> Iterator[Union[str, bytes]]:
        yield from self._chunks

    def close(self) -> None:
        self.closed = True

    def __enter__(self) -> "FakeResponse":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = [
    "PASSWORD",
    "USERNAME",
    "FakeOpenAIProvider",
    "FakeRegistry",
    "FakeResponse",
    "FakeWorkersAIProvider",
    "aiter_items",
    "basic_auth_header",
    "make_sentences",
]
