from __future__ import annotations

from typing import Any, AsyncIterator, Callable, Optional

import httpx

from .base import TranslationError, TranslationProvider, TranslationResult
from .http_common import HTTPProviderMixin


def _chunk_text(payload: Any) -> str:
    return str((payload or {}).get("chunk", "") or "")


class ProxyTranslationProvider(HTTPProviderMixin, TranslationProvider):
    """
    Client for a LingoNotes-style ``/api/translate`` proxy.

    Request body is ``{text, sourceLang, targetLang}``. The proxy answers either
    ``{"translation": ...}`` or, with ``stream`` enabled, a server-sent event stream
    of ``{"chunk": ...}`` payloads terminated by ``[DONE]``. A chunk carrying
    ``"passthrough": true`` marks the result as an untranslated echo.
    """

    _provider_name = "proxy"

    def __init__(
        self,
        url: str,
        *,
        stream: bool = False,
        client: Optional[httpx.AsyncClient] = None,
        timeout_sec: float = 30.0,
    ) -> None:
        super().__init__(client=client, timeout_sec=timeout_sec)
        self._url = url
        self._stream = bool(stream)

    def name(self) -> str:
        return self._provider_name

    @staticmethod
    def _payload(text: str, source_lang: str, target_lang: str, *, stream: bool) -> dict[str, Any]:
        return {
            "text": text,
            "sourceLang": source_lang,
            "targetLang": target_lang,
            "stream": stream,
        }

    async def translate_stream(
        self, text: str, source_lang: str, target_lang: str
    ) -> AsyncIterator[str]:
        async for chunk in self._stream_chunks(text, source_lang, target_lang, _chunk_text):
            yield chunk

    def _stream_chunks(
        self, text: str, source_lang: str, target_lang: str, extract_chunk: Callable[[Any], str]
    ) -> AsyncIterator[str]:
        return self._iter_sse(
            self._url,
            payload=self._payload(text, source_lang, target_lang, stream=True),
            extract_chunk=extract_chunk,
        )

    async def translate(
        self, text: str, source_lang: str, target_lang: str
    ) -> TranslationResult:
        passthrough = False
        if self._stream:
            flags: list[bool] = []

            def extract(payload: Any) -> str:
                flags.append(bool((payload or {}).get("passthrough", False)))
                return _chunk_text(payload)

            raw = "".join(
                [chunk async for chunk in self._stream_chunks(text, source_lang, target_lang, extract)]
            )
            passthrough = any(flags)
        else:
            body = await self._post_json(
                self._url, payload=self._payload(text, source_lang, target_lang, stream=False)
            )
            if not isinstance(body, dict):
                raise TranslationError("MALFORMED_RESPONSE", "Unexpected response shape.", self.name())
            raw = str(body.get("translation", "") or "")
            passthrough = bool(body.get("passthrough", False))

        translated = raw.strip()
        if not translated:
            raise TranslationError("EMPTY_OUTPUT", "Proxy returned no translation.", self.name())
        return TranslationResult(text=translated, passthrough=passthrough, provider_name=self.name())
