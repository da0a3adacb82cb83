from __future__ import annotations

import asyncio
from typing import AsyncIterable, AsyncIterator, Callable, Optional

from loguru import logger

from providers.errors import ProviderError


DEFAULT_CHAR_DELAY_SEC = 0.02


async def paced_characters(
    deltas: AsyncIterable[str],
    delay: float = DEFAULT_CHAR_DELAY_SEC,
) -> AsyncIterator[str]:
    """Re-emit upstream text deltas one character at a time with a pause after each."""
    async for text in deltas:
        if not text:
            continue
        for char in text:
            yield char
            if delay > 0:
                await asyncio.sleep(delay)


async def typed_stream(
    deltas: AsyncIterable[str],
    delay: float = DEFAULT_CHAR_DELAY_SEC,
    on_complete: Optional[Callable[[int], None]] = None,
) -> AsyncIterator[str]:
    """
    Response body for a paced explanation.

    An upstream failure mid-stream ends the body early; the client sees a
    truncated text. A client disconnect cancels this generator, and closing
    ``deltas`` in turn closes the upstream stream.
    """
    count = 0
    try:
        async for char in paced_characters(deltas, delay):
            count += 1
            yield char
    except ProviderError as exc:
        logger.warning("Upstream stream ended early after {} chars ({})", count, exc.code)
    finally:
        # report before awaiting: a cancelled scope may interrupt the close
        logger.debug("Explanation stream closed chars={}", count)
        if on_complete is not None:
            on_complete(count)
        aclose = getattr(deltas, "aclose", None)
        if aclose is not None:
            await aclose()
