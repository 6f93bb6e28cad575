from __future__ import annotations

"""
HTTP API surface for the LingoNotes backend.

Design intent:
- Keep API orchestration thin and typed.
- Delegate note state to the session controller held on app.state.
- Expose the translation proxy contract used by browser clients.
"""

import json
import logging
from contextlib import asynccontextmanager
from dataclasses import replace
from typing import Any, AsyncIterator, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel, Field, ValidationError

from lingonotes.export import NothingToExportError, export_notes
from lingonotes.internal_core.config import AppConfig, load_config
from lingonotes.internal_core.contracts import LANGUAGES, EditorSettings, NoteEntry
from lingonotes.internal_core.note_store import JsonFileNoteStore
from lingonotes.session.controller import NoteSessionController
from lingonotes.translation import (
    TranslationClient,
    TranslationError,
    build_translation_client,
)


class NoteItem(BaseModel):
    id: str
    original: str
    translation: str
    status: Literal["pending", "completed", "failed", "passthrough"]
    is_translating: bool


class NotesResponse(BaseModel):
    notes: list[NoteItem] = Field(default_factory=list)
    pending_count: int = 0


class NoteSubmitRequest(BaseModel):
    text: str = Field(default="", max_length=8000)
    source_lang: str | None = Field(default=None, min_length=1, max_length=64)
    target_lang: str | None = Field(default=None, min_length=1, max_length=64)
    wait: bool = False


class NoteSubmitResponse(BaseModel):
    accepted: bool
    entry: NoteItem | None = None


class NoteRemoveResponse(BaseModel):
    id: str
    removed: bool


class NotesClearResponse(BaseModel):
    removed_count: int


class SettingsResponse(BaseModel):
    font_family: Literal["sans", "serif", "mono"]
    font_family_name: str
    font_size: int
    is_bold: bool
    is_italic: bool
    source_lang: str
    target_lang: str


class SettingsUpdateRequest(BaseModel):
    font_family: Literal["sans", "serif", "mono"] | None = None
    font_size: int | None = None
    is_bold: bool | None = None
    is_italic: bool | None = None
    source_lang: str | None = Field(default=None, min_length=1, max_length=64)
    target_lang: str | None = Field(default=None, min_length=1, max_length=64)


class LanguageItem(BaseModel):
    code: str
    name: str


class LanguagesResponse(BaseModel):
    languages: list[LanguageItem] = Field(default_factory=list)


class ProxyTranslateRequest(BaseModel):
    text: str | None = None
    sourceLang: str | None = None
    targetLang: str | None = None
    stream: bool = False


logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    session = getattr(app.state, "note_session", None)
    if isinstance(session, NoteSessionController):
        await session.close()
    proxy_client = getattr(app.state, "proxy_translation_client", None)
    if isinstance(proxy_client, TranslationClient):
        await proxy_client.aclose()


app = FastAPI(title="lingonotes backend service", lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_config() -> AppConfig:
    existing = getattr(app.state, "config", None)
    if isinstance(existing, AppConfig):
        return existing
    created = load_config()
    logging.getLogger("lingonotes").setLevel(created.LINGONOTES_LOG_LEVEL.upper())
    setattr(app.state, "config", created)
    return created


def _get_note_session() -> NoteSessionController:
    existing = getattr(app.state, "note_session", None)
    if isinstance(existing, NoteSessionController):
        return existing
    cfg = _get_config()
    store = JsonFileNoteStore(cfg.store_path(), slot=cfg.LINGONOTES_STORAGE_SLOT)
    created = NoteSessionController(
        build_translation_client(cfg),
        store,
        settings=EditorSettings(
            source_lang=cfg.LINGONOTES_DEFAULT_SOURCE_LANG,
            target_lang=cfg.LINGONOTES_DEFAULT_TARGET_LANG,
        ),
    )
    created.restore()
    setattr(app.state, "note_session", created)
    return created


def _get_proxy_translation_client() -> TranslationClient:
    existing = getattr(app.state, "proxy_translation_client", None)
    if isinstance(existing, TranslationClient):
        return existing
    cfg = _get_config()
    upstream = cfg.LINGONOTES_PROXY_UPSTREAM_PROVIDER
    if upstream == "proxy":
        raise HTTPException(
            status_code=500,
            detail="Server configuration error: the proxy upstream cannot be the proxy itself.",
        )
    try:
        created = build_translation_client(replace(cfg, LINGONOTES_TRANSLATION_PROVIDER=upstream))
    except ValueError as exc:
        raise HTTPException(status_code=500, detail=f"Server configuration error: {exc}") from exc
    setattr(app.state, "proxy_translation_client", created)
    return created


def _to_note_item(entry: NoteEntry) -> NoteItem:
    return NoteItem(
        id=entry.id,
        original=entry.original,
        translation=entry.translation,
        status=entry.status,
        is_translating=entry.is_translating,
    )


def _to_settings_response(settings: EditorSettings) -> SettingsResponse:
    return SettingsResponse(
        font_family=settings.font_family,
        font_family_name=settings.font_family_name,
        font_size=settings.font_size,
        is_bold=settings.is_bold,
        is_italic=settings.is_italic,
        source_lang=settings.source_lang,
        target_lang=settings.target_lang,
    )


def _sse_event(payload: Any) -> str:
    data = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {data}\n\n"


async def _proxy_stream(
    client: TranslationClient, text: str, source_lang: str, target_lang: str
) -> AsyncIterator[str]:
    emitted = False
    try:
        async for chunk in client.stream(text, source_lang, target_lang):
            if chunk:
                emitted = True
                yield _sse_event({"chunk": chunk})
    except TranslationError as exc:
        fallback = None if emitted else client.provider.fallback_for(text, exc)
        if fallback is not None:
            yield _sse_event({"chunk": fallback.text, "passthrough": fallback.passthrough})
            yield _sse_event("[DONE]")
            return
        logger.warning(
            "proxy_stream_failed provider=%s code=%s error=%s",
            exc.provider_name,
            exc.code,
            exc.message,
        )
        yield _sse_event({"error": f"Translation failed: {exc.message}"})
        return
    yield _sse_event("[DONE]")


@app.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/languages", response_model=LanguagesResponse)
async def list_languages() -> LanguagesResponse:
    return LanguagesResponse(
        languages=[LanguageItem(code=item.code, name=item.name) for item in LANGUAGES]
    )


@app.get("/notes", response_model=NotesResponse)
async def list_notes() -> NotesResponse:
    session = _get_note_session()
    entries = session.list_entries()
    return NotesResponse(
        notes=[_to_note_item(entry) for entry in entries],
        pending_count=len(session.pending_ids()),
    )


@app.post("/notes", response_model=NoteSubmitResponse)
async def submit_note(payload: NoteSubmitRequest) -> NoteSubmitResponse:
    session = _get_note_session()
    entry = session.submit_line(payload.text, payload.source_lang, payload.target_lang)
    if entry is None:
        return NoteSubmitResponse(accepted=False, entry=None)

    if payload.wait:
        resolved = await session.wait_for(entry.id)
        if resolved is not None:
            entry = resolved
    return NoteSubmitResponse(accepted=True, entry=_to_note_item(entry))


@app.delete("/notes/{entry_id}", response_model=NoteRemoveResponse)
async def remove_note(entry_id: str) -> NoteRemoveResponse:
    normalized_id = str(entry_id or "").strip()
    if not normalized_id:
        raise HTTPException(status_code=400, detail="entry_id is required.")
    removed = _get_note_session().remove_entry(normalized_id)
    return NoteRemoveResponse(id=normalized_id, removed=removed)


@app.delete("/notes", response_model=NotesClearResponse)
async def clear_notes() -> NotesClearResponse:
    return NotesClearResponse(removed_count=_get_note_session().clear_all())


@app.get("/settings", response_model=SettingsResponse)
async def get_settings() -> SettingsResponse:
    return _to_settings_response(_get_note_session().settings)


@app.put("/settings", response_model=SettingsResponse)
async def update_settings(payload: SettingsUpdateRequest) -> SettingsResponse:
    changes = payload.model_dump(exclude_none=True)
    try:
        settings = _get_note_session().update_settings(**changes)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return _to_settings_response(settings)


@app.get("/export/{fmt}")
async def export_history(fmt: str) -> Response:
    session = _get_note_session()
    settings = session.settings
    try:
        artifact = export_notes(
            session.list_entries(),
            fmt,
            source_lang=settings.source_lang,
            target_lang=settings.target_lang,
        )
    except NothingToExportError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


@app.post("/api/translate")
async def proxy_translate(payload: ProxyTranslateRequest) -> Response:
    text = str(payload.text or "").strip()
    target_lang = str(payload.targetLang or "").strip()
    source_lang = str(payload.sourceLang or "").strip() or "auto"
    if not text or not target_lang:
        return JSONResponse(status_code=400, content={"error": "Missing text or target language"})

    client = _get_proxy_translation_client()
    logger.info(
        "proxy_translate chars=%s source=%s target=%s stream=%s",
        len(text),
        source_lang,
        target_lang,
        payload.stream,
    )

    if payload.stream:
        return StreamingResponse(
            _proxy_stream(client, text, source_lang, target_lang),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    try:
        result = await client.translate(text, source_lang, target_lang)
    except TranslationError as exc:
        logger.warning(
            "proxy_translate_failed provider=%s code=%s error=%s",
            exc.provider_name,
            exc.code,
            exc.message,
        )
        if exc.code == "CONFIG":
            return JSONResponse(
                status_code=500, content={"error": f"Server configuration error: {exc.message}"}
            )
        return JSONResponse(status_code=500, content={"error": f"Translation failed: {exc.message}"})

    return JSONResponse(content={"translation": result.text, "passthrough": result.passthrough})
