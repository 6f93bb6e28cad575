from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


def _project_root() -> Path:
    # lingonotes/internal_core/config.py -> lingonotes -> repo root
    return Path(__file__).resolve().parents[2]


def _getenv_str(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None else value


def _getenv_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return int(value)


def _getenv_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _getenv_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return float(value)


def _getenv_opt_str(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


@dataclass(frozen=True)
class AppConfig:
    LINGONOTES_DATA_DIR: str
    LINGONOTES_STORE_FILE: str
    LINGONOTES_STORAGE_SLOT: str
    LINGONOTES_TRANSLATION_PROVIDER: str
    LINGONOTES_TRANSLATION_STREAM: bool
    LINGONOTES_TRANSLATION_PASSTHROUGH_ON_FAILURE: bool
    LINGONOTES_TRANSLATION_TIMEOUT_SEC: float
    LINGONOTES_TRANSLATION_MAX_RETRIES: int
    LINGONOTES_TRANSLATION_RETRY_BACKOFF_SEC: float
    LINGONOTES_TEMPERATURE: float
    LINGONOTES_MAX_OUTPUT_TOKENS: int
    GEMINI_API_KEY: Optional[str]
    LINGONOTES_GEMINI_MODEL: str
    LINGONOTES_GEMINI_BASE_URL: str
    OPENAI_API_KEY: Optional[str]
    LINGONOTES_OPENAI_MODEL: str
    LINGONOTES_OPENAI_BASE_URL: str
    LINGONOTES_LIBRETRANSLATE_URL: str
    LINGONOTES_LIBRETRANSLATE_API_KEY: Optional[str]
    LINGONOTES_PROXY_URL: str
    LINGONOTES_PROXY_UPSTREAM_PROVIDER: str
    LINGONOTES_DEFAULT_SOURCE_LANG: str
    LINGONOTES_DEFAULT_TARGET_LANG: str
    LINGONOTES_LOG_LEVEL: str

    def data_dir_path(self, repo_root: Optional[Path] = None) -> Path:
        base = repo_root or _project_root()
        return (base / self.LINGONOTES_DATA_DIR).expanduser().resolve()

    def store_path(self, repo_root: Optional[Path] = None) -> Path:
        return self.data_dir_path(repo_root) / self.LINGONOTES_STORE_FILE


def load_config() -> AppConfig:
    return AppConfig(
        LINGONOTES_DATA_DIR=_getenv_str("LINGONOTES_DATA_DIR", "./data"),
        LINGONOTES_STORE_FILE=_getenv_str("LINGONOTES_STORE_FILE", "lingonotes-history.json"),
        LINGONOTES_STORAGE_SLOT=_getenv_str("LINGONOTES_STORAGE_SLOT", "lingonotes-history"),
        LINGONOTES_TRANSLATION_PROVIDER=_getenv_str("LINGONOTES_TRANSLATION_PROVIDER", "mock")
        .strip()
        .lower(),
        LINGONOTES_TRANSLATION_STREAM=_getenv_bool("LINGONOTES_TRANSLATION_STREAM", False),
        LINGONOTES_TRANSLATION_PASSTHROUGH_ON_FAILURE=_getenv_bool(
            "LINGONOTES_TRANSLATION_PASSTHROUGH_ON_FAILURE", False
        ),
        LINGONOTES_TRANSLATION_TIMEOUT_SEC=_getenv_float("LINGONOTES_TRANSLATION_TIMEOUT_SEC", 30.0),
        LINGONOTES_TRANSLATION_MAX_RETRIES=_getenv_int("LINGONOTES_TRANSLATION_MAX_RETRIES", 1),
        LINGONOTES_TRANSLATION_RETRY_BACKOFF_SEC=_getenv_float(
            "LINGONOTES_TRANSLATION_RETRY_BACKOFF_SEC", 0.5
        ),
        LINGONOTES_TEMPERATURE=_getenv_float("LINGONOTES_TEMPERATURE", 0.1),
        LINGONOTES_MAX_OUTPUT_TOKENS=_getenv_int("LINGONOTES_MAX_OUTPUT_TOKENS", 256),
        GEMINI_API_KEY=_getenv_opt_str("GEMINI_API_KEY") or _getenv_opt_str("API_KEY"),
        LINGONOTES_GEMINI_MODEL=_getenv_str("LINGONOTES_GEMINI_MODEL", "gemini-1.5-flash-latest"),
        LINGONOTES_GEMINI_BASE_URL=_getenv_str(
            "LINGONOTES_GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
        ),
        OPENAI_API_KEY=_getenv_opt_str("OPENAI_API_KEY"),
        LINGONOTES_OPENAI_MODEL=_getenv_str("LINGONOTES_OPENAI_MODEL", "gpt-4o-mini"),
        LINGONOTES_OPENAI_BASE_URL=_getenv_str(
            "LINGONOTES_OPENAI_BASE_URL", "https://api.openai.com/v1"
        ),
        LINGONOTES_LIBRETRANSLATE_URL=_getenv_str(
            "LINGONOTES_LIBRETRANSLATE_URL", "http://localhost:5000"
        ),
        LINGONOTES_LIBRETRANSLATE_API_KEY=_getenv_opt_str("LINGONOTES_LIBRETRANSLATE_API_KEY"),
        LINGONOTES_PROXY_URL=_getenv_str(
            "LINGONOTES_PROXY_URL", "http://localhost:8000/api/translate"
        ),
        LINGONOTES_PROXY_UPSTREAM_PROVIDER=_getenv_str("LINGONOTES_PROXY_UPSTREAM_PROVIDER", "gemini")
        .strip()
        .lower(),
        LINGONOTES_DEFAULT_SOURCE_LANG=_getenv_str("LINGONOTES_DEFAULT_SOURCE_LANG", "English"),
        LINGONOTES_DEFAULT_TARGET_LANG=_getenv_str("LINGONOTES_DEFAULT_TARGET_LANG", "German"),
        LINGONOTES_LOG_LEVEL=_getenv_str("LINGONOTES_LOG_LEVEL", "INFO"),
    )
