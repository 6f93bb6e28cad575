from __future__ import annotations

from lingonotes.internal_core.config import AppConfig

from .base import TranslationError, TranslationProvider, TranslationResult
from .client import TranslationClient
from .gemini import GeminiTranslationProvider
from .libretranslate import LibreTranslationProvider
from .mock import MockTranslationProvider
from .openai_chat import OpenAIChatTranslationProvider
from .passthrough import PassthroughOnFailureProvider
from .proxy import ProxyTranslationProvider

PROVIDER_NAMES = ("mock", "gemini", "openai", "libretranslate", "proxy")


def build_translation_provider(cfg: AppConfig) -> TranslationProvider:
    name = cfg.LINGONOTES_TRANSLATION_PROVIDER
    timeout_sec = cfg.LINGONOTES_TRANSLATION_TIMEOUT_SEC
    provider: TranslationProvider
    if name == "mock":
        provider = MockTranslationProvider()
    elif name == "gemini":
        provider = GeminiTranslationProvider(
            cfg.GEMINI_API_KEY,
            model=cfg.LINGONOTES_GEMINI_MODEL,
            base_url=cfg.LINGONOTES_GEMINI_BASE_URL,
            temperature=cfg.LINGONOTES_TEMPERATURE,
            max_output_tokens=cfg.LINGONOTES_MAX_OUTPUT_TOKENS,
            stream=cfg.LINGONOTES_TRANSLATION_STREAM,
            timeout_sec=timeout_sec,
        )
    elif name == "openai":
        provider = OpenAIChatTranslationProvider(
            cfg.OPENAI_API_KEY,
            model=cfg.LINGONOTES_OPENAI_MODEL,
            base_url=cfg.LINGONOTES_OPENAI_BASE_URL,
            temperature=cfg.LINGONOTES_TEMPERATURE,
            max_output_tokens=cfg.LINGONOTES_MAX_OUTPUT_TOKENS,
            stream=cfg.LINGONOTES_TRANSLATION_STREAM,
            timeout_sec=timeout_sec,
        )
    elif name == "libretranslate":
        provider = LibreTranslationProvider(
            cfg.LINGONOTES_LIBRETRANSLATE_URL,
            api_key=cfg.LINGONOTES_LIBRETRANSLATE_API_KEY,
            timeout_sec=timeout_sec,
        )
    elif name == "proxy":
        provider = ProxyTranslationProvider(
            cfg.LINGONOTES_PROXY_URL,
            stream=cfg.LINGONOTES_TRANSLATION_STREAM,
            timeout_sec=timeout_sec,
        )
    else:
        raise ValueError(
            f"Unsupported translation provider: {name!r}. Expected one of {', '.join(PROVIDER_NAMES)}."
        )

    if cfg.LINGONOTES_TRANSLATION_PASSTHROUGH_ON_FAILURE:
        provider = PassthroughOnFailureProvider(provider)
    return provider


def build_translation_client(cfg: AppConfig) -> TranslationClient:
    return TranslationClient(
        build_translation_provider(cfg),
        timeout_sec=cfg.LINGONOTES_TRANSLATION_TIMEOUT_SEC,
        max_retries=cfg.LINGONOTES_TRANSLATION_MAX_RETRIES,
        retry_backoff_sec=cfg.LINGONOTES_TRANSLATION_RETRY_BACKOFF_SEC,
    )


__all__ = [
    "GeminiTranslationProvider",
    "LibreTranslationProvider",
    "MockTranslationProvider",
    "OpenAIChatTranslationProvider",
    "PassthroughOnFailureProvider",
    "ProxyTranslationProvider",
    "PROVIDER_NAMES",
    "TranslationClient",
    "TranslationError",
    "TranslationProvider",
    "TranslationResult",
    "build_translation_client",
    "build_translation_provider",
]
