from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from threading import RLock
from typing import Any, Iterable, Optional, Sequence

from pydantic import ValidationError

from .contracts import TRANSLATION_ERROR_TEXT, NoteEntry

logger = logging.getLogger(__name__)

DEFAULT_SLOT = "lingonotes-history"


def _safe_unlink(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError:
        pass


def _status_from_record(record: dict[str, Any]) -> str:
    status = record.get("status")
    if isinstance(status, str) and status:
        return status
    # Older snapshots only carry the isTranslating flag.
    if bool(record.get("isTranslating", False)):
        return "pending"
    if str(record.get("translation", "")) == TRANSLATION_ERROR_TEXT:
        return "failed"
    return "completed"


def entries_from_records(records: Iterable[Any]) -> list[NoteEntry]:
    entries: list[NoteEntry] = []
    seen: set[str] = set()
    for record in records:
        if not isinstance(record, dict):
            raise ValueError(f"Note record must be an object, got {type(record).__name__}")
        entry = NoteEntry(
            id=str(record.get("id", "")),
            original=str(record.get("original", "")),
            translation=str(record.get("translation", "") or ""),
            status=_status_from_record(record),  # type: ignore[arg-type]
        )
        if entry.id in seen:
            raise ValueError(f"Duplicate note id in stored history: {entry.id}")
        seen.add(entry.id)
        entries.append(entry)
    return entries


def entries_to_records(entries: Sequence[NoteEntry]) -> list[dict[str, object]]:
    return [entry.to_record() for entry in entries]


class InMemoryNoteStore:
    def __init__(self, slot: str = DEFAULT_SLOT) -> None:
        self._slot = slot
        self._lock = RLock()
        self._payload: Optional[str] = None

    @property
    def slot(self) -> str:
        return self._slot

    def load(self) -> list[NoteEntry]:
        with self._lock:
            payload = self._payload
        if payload is None:
            return []
        try:
            return entries_from_records(json.loads(payload))
        except (ValueError, TypeError, ValidationError) as exc:
            logger.warning("note_store_load_failed slot=%s error=%s", self._slot, exc)
            return []

    def save(self, entries: Sequence[NoteEntry]) -> None:
        payload = json.dumps(entries_to_records(entries), ensure_ascii=False)
        with self._lock:
            self._payload = payload

    def write_raw(self, payload: str) -> None:
        with self._lock:
            self._payload = payload


class JsonFileNoteStore:
    """
    Local JSON-file persistence for the note history.

    The file holds a single named slot: ``{"slot": ..., "notes": [...]}``.
    A bare JSON array is also accepted on load.
    """

    def __init__(self, path: Path, slot: str = DEFAULT_SLOT) -> None:
        self._path = Path(path)
        self._slot = slot
        self._lock = RLock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def slot(self) -> str:
        return self._slot

    def load(self) -> list[NoteEntry]:
        with self._lock:
            if not self._path.exists():
                return []
            try:
                raw = self._path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as exc:
                logger.warning("note_store_read_failed path=%s error=%s", self._path, exc)
                return []

        try:
            data = json.loads(raw)
            if isinstance(data, dict):
                if str(data.get("slot", self._slot)) != self._slot:
                    logger.warning(
                        "note_store_slot_mismatch path=%s expected=%s found=%s",
                        self._path,
                        self._slot,
                        data.get("slot"),
                    )
                    return []
                data = data.get("notes", [])
            if not isinstance(data, list):
                raise ValueError("Stored history must be a list of notes.")
            return entries_from_records(data)
        except (ValueError, TypeError, ValidationError) as exc:
            logger.warning("note_store_parse_failed path=%s error=%s", self._path, exc)
            return []

    def save(self, entries: Sequence[NoteEntry]) -> None:
        payload = json.dumps(
            {"slot": self._slot, "notes": entries_to_records(entries)},
            ensure_ascii=False,
            indent=2,
        )
        with self._lock:
            tmp_path: Optional[Path] = None
            try:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                fd, tmp_name = tempfile.mkstemp(
                    prefix=f".{self._path.name}.", suffix=".tmp", dir=str(self._path.parent)
                )
                tmp_path = Path(tmp_name)
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_path, self._path)
                tmp_path = None
            except OSError as exc:
                # Persistence is best-effort; the in-memory list stays authoritative.
                logger.error("note_store_write_failed path=%s error=%s", self._path, exc)
            finally:
                if tmp_path is not None:
                    _safe_unlink(tmp_path)
