from __future__ import annotations

import asyncio
from typing import Mapping, Optional

from .base import TranslationError, TranslationProvider, TranslationResult


class MockTranslationProvider(TranslationProvider):
    def __init__(
        self,
        phrasebook: Optional[Mapping[str, str]] = None,
        *,
        delay_sec: float = 0.0,
        fail_on: Optional[set[str]] = None,
    ) -> None:
        self._phrasebook = dict(phrasebook or {})
        self._delay_sec = max(0.0, float(delay_sec))
        self._fail_on = set(fail_on or set())
        self.calls: list[tuple[str, str, str]] = []

    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult:
        self.calls.append((text, source_lang, target_lang))
        if self._delay_sec:
            await asyncio.sleep(self._delay_sec)
        if text in self._fail_on:
            raise TranslationError("MOCK_FAILURE", f"mock failure for {text!r}", self.name())
        translated = self._phrasebook.get(text)
        if translated is None:
            translated = f"(mock) {text} [{source_lang} -> {target_lang}]"
        return TranslationResult(text=translated, provider_name=self.name())

    def name(self) -> str:
        return "mock"
