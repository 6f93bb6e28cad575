from __future__ import annotations

"""
Single translation entry point used by the note session.

Design intent:
- Hide provider protocol detail behind one async call.
- Bound every call with a timeout so no entry stays pending forever.
- Retry transient transport failures only, with exponential backoff.
"""

import asyncio
import logging
from time import perf_counter
from typing import AsyncIterator

from .base import TranslationError, TranslationProvider, TranslationResult

logger = logging.getLogger(__name__)


async def _next_chunk(chunks: AsyncIterator[str]) -> str:
    return await chunks.__anext__()


class TranslationClient:
    def __init__(
        self,
        provider: TranslationProvider,
        *,
        timeout_sec: float | None = 30.0,
        max_retries: int = 0,
        retry_backoff_sec: float = 0.5,
    ) -> None:
        self._provider = provider
        self._timeout_sec = None if timeout_sec is None or timeout_sec <= 0 else float(timeout_sec)
        self._max_retries = max(0, int(max_retries))
        self._retry_backoff_sec = max(0.0, float(retry_backoff_sec))

    @property
    def provider(self) -> TranslationProvider:
        return self._provider

    async def translate(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        normalized = str(text or "").strip()
        if not normalized:
            raise TranslationError("EMPTY_INPUT", "Text to translate is empty.", self._provider.name())

        attempt = 0
        while True:
            started = perf_counter()
            try:
                result = await self._attempt(normalized, source_lang, target_lang)
            except TranslationError as exc:
                if not exc.transient or attempt >= self._max_retries:
                    raise
                delay = self._retry_backoff_sec * (2**attempt)
                attempt += 1
                logger.info(
                    "translation_retry provider=%s code=%s attempt=%s delay_sec=%.2f",
                    exc.provider_name,
                    exc.code,
                    attempt,
                    delay,
                )
                if delay:
                    await asyncio.sleep(delay)
                continue

            logger.debug(
                "translation_done provider=%s chars=%s passthrough=%s duration_ms=%d",
                self._provider.name(),
                len(normalized),
                result.passthrough,
                int((perf_counter() - started) * 1000),
            )
            return result

    async def stream(self, text: str, source_lang: str, target_lang: str) -> AsyncIterator[str]:
        """
        Yield provider chunks under one overall deadline.

        Streams are not retried: chunks already handed to the caller cannot be
        taken back. A stream still open at the deadline raises TIMEOUT.
        """
        normalized = str(text or "").strip()
        if not normalized:
            raise TranslationError("EMPTY_INPUT", "Text to translate is empty.", self._provider.name())

        chunks = self._provider.translate_stream(normalized, source_lang, target_lang)
        loop = asyncio.get_running_loop()
        deadline = None if self._timeout_sec is None else loop.time() + self._timeout_sec
        try:
            while True:
                try:
                    if deadline is None:
                        chunk = await chunks.__anext__()
                    else:
                        remaining = deadline - loop.time()
                        if remaining <= 0:
                            raise asyncio.TimeoutError()
                        chunk = await asyncio.wait_for(_next_chunk(chunks), timeout=remaining)
                except StopAsyncIteration:
                    return
                except asyncio.TimeoutError as exc:
                    raise TranslationError(
                        "TIMEOUT",
                        f"Translation stream timed out after {self._timeout_sec:.1f}s.",
                        self._provider.name(),
                    ) from exc
                yield chunk
        finally:
            await chunks.aclose()

    async def _attempt(self, text: str, source_lang: str, target_lang: str) -> TranslationResult:
        call = self._provider.translate(text, source_lang, target_lang)
        if self._timeout_sec is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self._timeout_sec)
        except asyncio.TimeoutError as exc:
            raise TranslationError(
                "TIMEOUT",
                f"Translation timed out after {self._timeout_sec:.1f}s.",
                self._provider.name(),
            ) from exc

    async def aclose(self) -> None:
        await self._provider.aclose()
