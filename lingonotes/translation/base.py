from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import AsyncIterator, Optional

TRANSIENT_CODES: frozenset[str] = frozenset({"TRANSPORT", "TIMEOUT"})


class TranslationError(RuntimeError):
    def __init__(
        self,
        code: str,
        message: str,
        provider_name: str,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.provider_name = provider_name
        self.status_code = status_code

    @property
    def transient(self) -> bool:
        if self.code in TRANSIENT_CODES:
            return True
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


@dataclass(frozen=True)
class TranslationResult:
    text: str
    passthrough: bool = False
    provider_name: str = ""


class TranslationProvider(ABC):
    @abstractmethod
    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult: ...

    @abstractmethod
    def name(self) -> str: ...

    async def translate_stream(
        self, text: str, source_lang: str, target_lang: str
    ) -> AsyncIterator[str]:
        """Yield translated text incrementally; providers without streaming yield once."""
        result = await self.translate(text, source_lang, target_lang)
        yield result.text

    def fallback_for(self, text: str, error: TranslationError) -> Optional[TranslationResult]:
        """Result to report instead of `error`, or None when failures must surface."""
        return None

    async def aclose(self) -> None:
        return None


def build_translation_prompt(text: str, source_lang: str, target_lang: str) -> str:
    return (
        f"You are a precise translator. Translate ONLY the following text from {source_lang} "
        f"to {target_lang}. Return ONLY the translated text, with no explanations, quotes, "
        f"or comments:\n\n{text}"
    )


def clean_model_output(raw: str) -> str:
    text = str(raw or "").strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "'"}:
        text = text[1:-1].strip()
    return text
