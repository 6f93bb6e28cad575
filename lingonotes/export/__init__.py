from __future__ import annotations

"""
Export boundary for LingoNotes backend.

Design intent:
- Render from an immutable snapshot of the note list.
- Refuse to produce an artifact when there is nothing to export.
- Name every artifact with a fixed prefix and a millisecond timestamp.
"""

import logging
from datetime import datetime
from typing import Callable, Literal, Optional, Sequence

from lingonotes.internal_core.contracts import NoteEntry

from .base import (
    ExportArtifact,
    ExportHeader,
    NO_NOTES_MESSAGE,
    NothingToExportError,
    build_header,
    ensure_exportable,
)
from .paginated import export_pdf, paginate_lines
from .plain_text import export_plain_text, render_plain_text
from .rich_document import export_rich_document, render_rich_document

logger = logging.getLogger(__name__)

ExportFormat = Literal["txt", "doc", "pdf"]

_EXPORTERS: dict[str, Callable[[Sequence[NoteEntry], ExportHeader], ExportArtifact]] = {
    "txt": export_plain_text,
    "doc": export_rich_document,
    "pdf": export_pdf,
}

EXPORT_FORMATS: tuple[str, ...] = tuple(_EXPORTERS)


def export_notes(
    entries: Sequence[NoteEntry],
    fmt: str,
    *,
    source_lang: str,
    target_lang: str,
    now: Optional[datetime] = None,
) -> ExportArtifact:
    normalized = str(fmt or "").strip().lower()
    exporter = _EXPORTERS.get(normalized)
    if exporter is None:
        raise ValueError(
            f"Unsupported export format: {fmt!r}. Expected one of {', '.join(EXPORT_FORMATS)}."
        )
    snapshot = [entry.model_copy() for entry in entries]
    ensure_exportable(snapshot)

    header = build_header(
        source_lang=source_lang,
        target_lang=target_lang,
        now=now or datetime.now(),
    )
    artifact = exporter(snapshot, header)
    logger.info(
        "notes_exported format=%s entries=%s bytes=%s filename=%s",
        normalized,
        len(snapshot),
        len(artifact.content),
        artifact.filename,
    )
    return artifact


__all__ = [
    "EXPORT_FORMATS",
    "ExportArtifact",
    "ExportFormat",
    "ExportHeader",
    "NO_NOTES_MESSAGE",
    "NothingToExportError",
    "export_notes",
    "paginate_lines",
    "render_plain_text",
    "render_rich_document",
]
