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

_SYSTEM_MESSAGE = "You are a precise translator. Reply with the translated text only."


def _message_text(payload: Any) -> str:
    choices = list((payload or {}).get("choices") or [])
    if not choices:
        return ""
    return str(((choices[0] or {}).get("message") or {}).get("content", "") or "")


def _delta_text(payload: Any) -> str:
    choices = list((payload or {}).get("choices") or [])
    if not choices:
        return ""
    return str(((choices[0] or {}).get("delta") or {}).get("content", "") or "")


class OpenAIChatTranslationProvider(HTTPProviderMixin, TranslationProvider):
    _provider_name = "openai"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        model: str = "gpt-4o-mini",
        base_url: str = "https://api.openai.com/v1",
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

    def _headers(self) -> dict[str, str]:
        if not self._api_key:
            raise TranslationError("CONFIG", "OPENAI_API_KEY is not configured.", self.name())
        return {"Authorization": f"Bearer {self._api_key}"}

    def _payload(self, text: str, source_lang: str, target_lang: str, *, stream: bool) -> dict[str, Any]:
        return {
            "model": self._model,
            "messages": [
                {"role": "system", "content": _SYSTEM_MESSAGE},
                {"role": "user", "content": build_translation_prompt(text, source_lang, target_lang)},
            ],
            "temperature": self._temperature,
            "max_tokens": self._max_output_tokens,
            "stream": stream,
        }

    async def translate_stream(
        self, text: str, source_lang: str, target_lang: str
    ) -> AsyncIterator[str]:
        headers = self._headers()
        async for chunk in self._iter_sse(
            f"{self._base_url}/chat/completions",
            payload=self._payload(text, source_lang, target_lang, stream=True),
            headers=headers,
            extract_chunk=_delta_text,
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
                f"{self._base_url}/chat/completions",
                payload=self._payload(text, source_lang, target_lang, stream=False),
                headers=headers,
            )
            if not isinstance(body, dict):
                raise TranslationError("MALFORMED_RESPONSE", "Unexpected response shape.", self.name())
            raw = _message_text(body)

        translated = clean_model_output(raw)
        if not translated:
            raise TranslationError("EMPTY_OUTPUT", "Chat completion returned no translation.", self.name())
        return TranslationResult(text=translated, provider_name=self.name())
