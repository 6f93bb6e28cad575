from __future__ import annotations

"""
Word-processor export as an Office-flavoured HTML document.

Word and LibreOffice both open this envelope when it is saved with a ``.doc``
extension; originals are bold, translations italic.
"""

from html import escape
from typing import Sequence

from lingonotes.internal_core.contracts import NoteEntry

from .base import ExportArtifact, ExportHeader, artifact_filename, display_translation

_ENVELOPE = """<html xmlns:o='urn:schemas-microsoft-com:office:office' xmlns:w='urn:schemas-microsoft-com:office:word' xmlns='http://www.w3.org/TR/REC-html40'>
<head><meta charset='utf-8'><title>{title}</title></head>
<body style="font-family: sans-serif;">
<h1>{title}</h1>
<p>Exported on: {timestamp}</p>
<hr/>
{content}
</body>
</html>
"""


def render_rich_document(entries: Sequence[NoteEntry], header: ExportHeader) -> str:
    content = "\n".join(
        f"<p><b>{escape(entry.original)}</b> &mdash; <i>{escape(display_translation(entry))}</i></p>"
        for entry in entries
    )
    return _ENVELOPE.format(
        title=escape(header.title),
        timestamp=escape(header.timestamp),
        content=content,
    )


def export_rich_document(entries: Sequence[NoteEntry], header: ExportHeader) -> ExportArtifact:
    return ExportArtifact(
        filename=artifact_filename(header, "doc"),
        media_type="application/msword",
        content=render_rich_document(entries, header).encode("utf-8"),
    )
