from __future__ import annotations

import logging
from typing import AsyncIterator

from .base import TranslationError, TranslationProvider, TranslationResult

logger = logging.getLogger(__name__)


class PassthroughOnFailureProvider(TranslationProvider):
    """
    Degraded mode: echo the input when the wrapped provider fails.

    The echoed text is flagged ``passthrough=True`` so callers can report it as
    untranslated instead of treating it as a real translation. Streams are
    delegated unchanged; stream consumers ask ``fallback_for`` on failure.
    """

    def __init__(self, inner: TranslationProvider) -> None:
        self._inner = inner

    def name(self) -> str:
        return f"{self._inner.name()}+passthrough"

    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult:
        try:
            return await self._inner.translate(text, source_lang, target_lang)
        except TranslationError as exc:
            return self.fallback_for(text, exc)

    async def translate_stream(
        self, text: str, source_lang: str, target_lang: str
    ) -> AsyncIterator[str]:
        async for chunk in self._inner.translate_stream(text, source_lang, target_lang):
            yield chunk

    def fallback_for(self, text: str, error: TranslationError) -> TranslationResult:
        logger.warning(
            "translation_passthrough provider=%s code=%s chars=%s",
            error.provider_name,
            error.code,
            len(text),
        )
        return TranslationResult(text=text, passthrough=True, provider_name=self.name())

    async def aclose(self) -> None:
        await self._inner.aclose()
