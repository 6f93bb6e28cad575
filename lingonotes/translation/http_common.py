from __future__ import annotations

"""
Shared httpx plumbing for HTTP-backed translation providers.

Design intent:
- Map every transport or status failure to a single TranslationError shape.
- Assemble server-sent event streams into one final text.
- Allow tests to inject an httpx client backed by a mock transport.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Optional

import httpx

from .base import TranslationError

logger = logging.getLogger(__name__)

SSE_DONE = "[DONE]"


class HTTPProviderMixin:
    _provider_name: str = "http"

    def __init__(self, *, client: Optional[httpx.AsyncClient] = None, timeout_sec: float = 30.0) -> None:
        self._client = client
        self._timeout_sec = float(timeout_sec)

    @asynccontextmanager
    async def _http(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._timeout_sec) as client:
            yield client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()

    async def _post_json(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> Any:
        try:
            async with self._http() as client:
                response = await client.post(url, json=payload, headers=headers, params=params)
        except httpx.TimeoutException as exc:
            raise TranslationError("TIMEOUT", f"Request timed out: {exc}", self._provider_name) from exc
        except httpx.HTTPError as exc:
            raise TranslationError("TRANSPORT", f"Transport error: {exc}", self._provider_name) from exc

        _raise_for_status(response, self._provider_name)
        try:
            return response.json()
        except ValueError as exc:
            raise TranslationError(
                "MALFORMED_RESPONSE", f"Response is not valid JSON: {exc}", self._provider_name
            ) from exc

    async def _iter_sse(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        extract_chunk: Callable[[Any], str],
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> AsyncIterator[str]:
        try:
            async with self._http() as client:
                async with client.stream(
                    "POST", url, json=payload, headers=headers, params=params
                ) as response:
                    if response.status_code >= 400:
                        await response.aread()
                        _raise_for_status(response, self._provider_name)
                    async for data in iter_sse_data(response.aiter_lines()):
                        if data == SSE_DONE:
                            break
                        chunk = _decode_sse_chunk(data, extract_chunk, self._provider_name)
                        if chunk:
                            yield chunk
        except httpx.TimeoutException as exc:
            raise TranslationError("TIMEOUT", f"Stream timed out: {exc}", self._provider_name) from exc
        except httpx.HTTPError as exc:
            raise TranslationError("TRANSPORT", f"Stream transport error: {exc}", self._provider_name) from exc

    async def _post_sse(
        self,
        url: str,
        *,
        payload: dict[str, Any],
        extract_chunk: Callable[[Any], str],
        headers: Optional[dict[str, str]] = None,
        params: Optional[dict[str, str]] = None,
    ) -> str:
        parts: list[str] = []
        async for chunk in self._iter_sse(
            url, payload=payload, extract_chunk=extract_chunk, headers=headers, params=params
        ):
            parts.append(chunk)
        return "".join(parts)


def _raise_for_status(response: httpx.Response, provider_name: str) -> None:
    if response.status_code < 400:
        return
    detail = ""
    try:
        body = response.json()
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                detail = str(err.get("message", "") or "")
            elif err:
                detail = str(err)
    except ValueError:
        detail = response.text[:200]
    code = "AUTH" if response.status_code in {401, 403} else "HTTP_STATUS"
    raise TranslationError(
        code,
        f"Provider returned HTTP {response.status_code}: {detail}".strip().rstrip(":"),
        provider_name,
        status_code=response.status_code,
    )


async def iter_sse_data(lines: AsyncIterator[str]) -> AsyncIterator[str]:
    """Yield the payload of each ``data:`` event; multi-line data is joined with newlines."""
    buffer: list[str] = []
    async for line in lines:
        line = line.rstrip("\r")
        if not line:
            if buffer:
                yield "\n".join(buffer)
                buffer = []
            continue
        if line.startswith(":"):
            continue
        if line.startswith("data:"):
            buffer.append(line[5:].lstrip(" "))
    if buffer:
        yield "\n".join(buffer)


def _decode_sse_chunk(data: str, extract_chunk: Callable[[Any], str], provider_name: str) -> str:
    try:
        payload = json.loads(data)
    except ValueError as exc:
        raise TranslationError(
            "MALFORMED_RESPONSE", f"Stream chunk is not valid JSON: {data[:80]}", provider_name
        ) from exc
    if isinstance(payload, dict) and payload.get("error"):
        raise TranslationError("PROVIDER_ERROR", str(payload.get("error")), provider_name)
    try:
        return str(extract_chunk(payload) or "")
    except (KeyError, IndexError, TypeError, AttributeError) as exc:
        raise TranslationError(
            "MALFORMED_RESPONSE", f"Unexpected stream chunk shape: {exc}", provider_name
        ) from exc
