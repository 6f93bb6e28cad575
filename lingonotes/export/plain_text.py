from __future__ import annotations

from typing import Sequence

from lingonotes.internal_core.contracts import NoteEntry

from .base import ExportArtifact, ExportHeader, artifact_filename, display_translation


def render_plain_text(entries: Sequence[NoteEntry], header: ExportHeader) -> str:
    body = "\n".join(f"{entry.original} -> {display_translation(entry)}" for entry in entries)
    return f"{header.title}\nExported on: {header.timestamp}\n\n{body}"


def export_plain_text(entries: Sequence[NoteEntry], header: ExportHeader) -> ExportArtifact:
    return ExportArtifact(
        filename=artifact_filename(header, "txt"),
        media_type="text/plain; charset=utf-8",
        content=render_plain_text(entries, header).encode("utf-8"),
    )
