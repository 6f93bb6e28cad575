from __future__ import annotations

"""
Own the ordered note list and the per-line translation lifecycle.

Design intent:
- Append a pending entry synchronously, translate asynchronously.
- Reconcile each result by entry id in one serialized step; a missing id is a no-op.
- Mirror every list change to the note store as a full snapshot.
"""

import asyncio
import logging
import uuid
from dataclasses import dataclass
from functools import partial
from threading import RLock
from typing import Any, Callable, Optional, Protocol, Sequence

from lingonotes.internal_core.contracts import (
    TRANSLATION_ERROR_TEXT,
    EditorSettings,
    NoteEntry,
    NoteStatus,
)
from lingonotes.translation.base import TranslationError
from lingonotes.translation.client import TranslationClient

logger = logging.getLogger(__name__)


class NoteStore(Protocol):
    def load(self) -> list[NoteEntry]: ...

    def save(self, entries: Sequence[NoteEntry]) -> None: ...


@dataclass(frozen=True)
class TranslationOutcome:
    entry_id: str
    status: NoteStatus
    text: str
    error_code: str = ""


ChangeListener = Callable[[list[NoteEntry]], None]


class NoteSessionController:
    def __init__(
        self,
        client: TranslationClient,
        store: NoteStore,
        *,
        settings: Optional[EditorSettings] = None,
        on_change: Optional[ChangeListener] = None,
    ) -> None:
        self._client = client
        self._store = store
        self._settings = settings or EditorSettings()
        self._on_change = on_change
        self._lock = RLock()
        self._entries: list[NoteEntry] = []
        self._tasks: dict[str, asyncio.Task[TranslationOutcome]] = {}

    @property
    def client(self) -> TranslationClient:
        return self._client

    @property
    def settings(self) -> EditorSettings:
        with self._lock:
            return self._settings.model_copy()

    def update_settings(self, **changes: Any) -> EditorSettings:
        with self._lock:
            merged = {**self._settings.model_dump(), **changes}
            self._settings = EditorSettings.model_validate(merged)
            return self._settings.model_copy()

    def restore(self) -> int:
        """Load the stored history; entries saved mid-translation come back as failed."""
        loaded = self._store.load()
        stale = 0
        restored: list[NoteEntry] = []
        for entry in loaded:
            if entry.status == "pending":
                stale += 1
                entry = entry.model_copy(
                    update={"translation": TRANSLATION_ERROR_TEXT, "status": "failed"}
                )
            restored.append(entry)
        with self._lock:
            self._entries = restored
            if stale:
                self._changed_locked()
        logger.info("note_session_restored entries=%s stale_pending=%s", len(restored), stale)
        return len(restored)

    def list_entries(self) -> list[NoteEntry]:
        with self._lock:
            return [entry.model_copy() for entry in self._entries]

    def get_entry(self, entry_id: str) -> Optional[NoteEntry]:
        with self._lock:
            index = self._index_of(entry_id)
            return None if index is None else self._entries[index].model_copy()

    def pending_ids(self) -> list[str]:
        with self._lock:
            return list(self._tasks)

    def submit_line(
        self,
        raw_text: str,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = None,
    ) -> Optional[NoteEntry]:
        """
        Append a pending entry and start its translation on the running loop.

        Blank input is ignored and returns None. Must be called from inside a
        running event loop; the translation is not awaited here.
        """
        text = str(raw_text or "").strip()
        if not text:
            return None

        loop = asyncio.get_running_loop()
        with self._lock:
            source = str(source_lang or self._settings.source_lang)
            target = str(target_lang or self._settings.target_lang)
            entry = NoteEntry(id=uuid.uuid4().hex, original=text)
            self._entries.append(entry)
            task = loop.create_task(self._translate(entry.id, text, source, target))
            self._tasks[entry.id] = task
            task.add_done_callback(partial(self._on_task_done, entry.id))
            self._changed_locked()

        logger.info(
            "note_submitted id=%s chars=%s source=%s target=%s",
            entry.id,
            len(text),
            source,
            target,
        )
        return entry.model_copy()

    def remove_entry(self, entry_id: str) -> bool:
        with self._lock:
            index = self._index_of(entry_id)
            if index is None:
                return False
            del self._entries[index]
            self._changed_locked()
        logger.info("note_removed id=%s", entry_id)
        return True

    def clear_all(self) -> int:
        with self._lock:
            removed = len(self._entries)
            self._entries = []
            self._changed_locked()
        logger.info("notes_cleared removed=%s", removed)
        return removed

    def apply_outcome(self, outcome: TranslationOutcome) -> bool:
        with self._lock:
            index = self._index_of(outcome.entry_id)
            if index is None:
                logger.debug("translation_result_discarded id=%s", outcome.entry_id)
                return False
            current = self._entries[index]
            if current.status != "pending":
                return False
            self._entries[index] = current.model_copy(
                update={"translation": outcome.text, "status": outcome.status}
            )
            self._changed_locked()
        return True

    async def wait_for(self, entry_id: str) -> Optional[NoteEntry]:
        with self._lock:
            task = self._tasks.get(entry_id)
        if task is not None:
            await asyncio.wait({task})
        return self.get_entry(entry_id)

    async def drain(self) -> None:
        while True:
            with self._lock:
                tasks = set(self._tasks.values())
            if not tasks:
                return
            await asyncio.wait(tasks)

    async def close(self) -> None:
        with self._lock:
            tasks = list(self._tasks.values())
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self._client.aclose()

    async def _translate(
        self, entry_id: str, text: str, source_lang: str, target_lang: str
    ) -> TranslationOutcome:
        try:
            result = await self._client.translate(text, source_lang, target_lang)
        except TranslationError as exc:
            logger.warning(
                "translation_failed id=%s provider=%s code=%s error=%s",
                entry_id,
                exc.provider_name,
                exc.code,
                exc.message,
            )
            return TranslationOutcome(
                entry_id=entry_id,
                status="failed",
                text=TRANSLATION_ERROR_TEXT,
                error_code=exc.code,
            )
        except Exception as exc:
            logger.exception("translation_crashed id=%s error=%s", entry_id, exc)
            return TranslationOutcome(
                entry_id=entry_id,
                status="failed",
                text=TRANSLATION_ERROR_TEXT,
                error_code="UNEXPECTED",
            )

        status: NoteStatus = "passthrough" if result.passthrough else "completed"
        return TranslationOutcome(entry_id=entry_id, status=status, text=result.text)

    def _on_task_done(self, entry_id: str, task: "asyncio.Task[TranslationOutcome]") -> None:
        with self._lock:
            if self._tasks.get(entry_id) is task:
                del self._tasks[entry_id]
        if task.cancelled():
            return
        self.apply_outcome(task.result())

    def _index_of(self, entry_id: str) -> Optional[int]:
        for index, entry in enumerate(self._entries):
            if entry.id == entry_id:
                return index
        return None

    def _changed_locked(self) -> None:
        snapshot = [entry.model_copy() for entry in self._entries]
        self._store.save(snapshot)
        if self._on_change is None:
            return
        try:
            self._on_change(snapshot)
        except Exception:
            # Listeners must never break the note session.
            logger.exception("note_change_listener_failed")
