from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Sequence

from lingonotes.internal_core.contracts import NoteEntry

FILENAME_PREFIX = "lingonotes"
NO_NOTES_MESSAGE = "No notes to export!"
EMPTY_TRANSLATION_PLACEHOLDER = "..."


class NothingToExportError(RuntimeError):
    def __init__(self, message: str = NO_NOTES_MESSAGE):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


@dataclass(frozen=True)
class ExportHeader:
    title: str
    timestamp: str
    epoch_ms: int


def build_header(*, source_lang: str, target_lang: str, now: datetime) -> ExportHeader:
    return ExportHeader(
        title=f"LingoNotes AI - {target_lang} to {source_lang}",
        timestamp=now.strftime("%Y-%m-%d %H:%M:%S"),
        epoch_ms=int(now.timestamp() * 1000),
    )


def artifact_filename(header: ExportHeader, extension: str) -> str:
    return f"{FILENAME_PREFIX}_{header.epoch_ms}.{extension}"


def display_translation(entry: NoteEntry) -> str:
    return entry.translation or EMPTY_TRANSLATION_PLACEHOLDER


def ensure_exportable(entries: Sequence[NoteEntry]) -> None:
    if not entries:
        raise NothingToExportError()
