from __future__ import annotations

from typing import Any, Optional

import httpx

from lingonotes.internal_core.contracts import language_code

from .base import TranslationError, TranslationProvider, TranslationResult
from .http_common import HTTPProviderMixin


class LibreTranslationProvider(HTTPProviderMixin, TranslationProvider):
    """LibreTranslate ``/translate``; expects ISO codes, so display names are mapped first."""

    _provider_name = "libretranslate"

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout_sec: float = 30.0,
    ) -> None:
        super().__init__(client=client, timeout_sec=timeout_sec)
        self._base_url = base_url.rstrip("/")
        self._api_key = api_key

    def name(self) -> str:
        return self._provider_name

    def _resolve(self, lang: str, *, allow_auto: bool) -> str:
        if allow_auto and str(lang or "").strip().lower() in {"", "auto"}:
            return "auto"
        code = language_code(lang)
        if code is None:
            raise TranslationError("UNSUPPORTED_LANGUAGE", f"Unsupported language: {lang!r}", self.name())
        return code

    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult:
        payload: dict[str, Any] = {
            "q": text,
            "source": self._resolve(source_lang, allow_auto=True),
            "target": self._resolve(target_lang, allow_auto=False),
            "format": "text",
        }
        if self._api_key:
            payload["api_key"] = self._api_key

        body = await self._post_json(f"{self._base_url}/translate", payload=payload)
        if not isinstance(body, dict):
            raise TranslationError("MALFORMED_RESPONSE", "Unexpected response shape.", self.name())
        translated = str(body.get("translatedText", "") or "").strip()
        if not translated:
            raise TranslationError("EMPTY_OUTPUT", "LibreTranslate returned no translation.", self.name())
        return TranslationResult(text=translated, provider_name=self.name())
