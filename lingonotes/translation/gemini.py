from __future__ import annotations

from typing import Any, AsyncIterator, Optional

import httpx

from .base import (
    TranslationError,
    TranslationProvider,
    TranslationResult,
    build_translation_prompt,
    clean_model_output,
)
from .http_common import HTTPProviderMixin


def _candidate_text(payload: Any) -> str:
    candidates = list((payload or {}).get("candidates") or [])
    if not candidates:
        return ""
    parts = list(((candidates[0] or {}).get("content") or {}).get("parts") or [])
    return "".join(str(part.get("text", "") or "") for part in parts if isinstance(part, dict))


class GeminiTranslationProvider(HTTPProviderMixin, TranslationProvider):
    """Google Generative Language REST API (``generateContent`` / ``streamGenerateContent``)."""

    _provider_name = "gemini"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gemini-1.5-flash-latest",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        temperature: float = 0.1,
        max_output_tokens: int = 256,
        stream: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        timeout_sec: float = 30.0,
    ) -> None:
        super().__init__(client=client, timeout_sec=timeout_sec)
        self._api_key = str(api_key or "").strip()
        self._model = model
        self._base_url = base_url.rstrip("/")
        self._temperature = float(temperature)
        self._max_output_tokens = int(max_output_tokens)
        self._stream = bool(stream)

    def name(self) -> str:
        return self._provider_name

    def _payload(self, text: str, source_lang: str, target_lang: str) -> dict[str, Any]:
        return {
            "contents": [
                {"role": "user", "parts": [{"text": build_translation_prompt(text, source_lang, target_lang)}]}
            ],
            "generationConfig": {
                "temperature": self._temperature,
                "topP": 0.95,
                "maxOutputTokens": self._max_output_tokens,
            },
        }

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise TranslationError("CONFIG", "GEMINI_API_KEY is not configured.", self.name())
        return {"x-goog-api-key": self._api_key}

    async def translate_stream(
        self, text: str, source_lang: str, target_lang: str
    ) -> AsyncIterator[str]:
        headers = self._headers()
        async for chunk in self._iter_sse(
            f"{self._base_url}/models/{self._model}:streamGenerateContent",
            payload=self._payload(text, source_lang, target_lang),
            headers=headers,
            params={"alt": "sse"},
            extract_chunk=_candidate_text,
        ):
            yield chunk

    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult:
        headers = self._headers()
        if self._stream:
            raw = "".join([chunk async for chunk in self.translate_stream(text, source_lang, target_lang)])
        else:
            body = await self._post_json(
                f"{self._base_url}/models/{self._model}:generateContent",
                payload=self._payload(text, source_lang, target_lang),
                headers=headers,
            )
            if not isinstance(body, dict):
                raise TranslationError("MALFORMED_RESPONSE", "Unexpected response shape.", self.name())
            raw = _candidate_text(body)

        translated = clean_model_output(raw)
        if not translated:
            raise TranslationError("EMPTY_OUTPUT", "Gemini returned no translation.", self.name())
        return TranslationResult(text=translated, provider_name=self.name())
