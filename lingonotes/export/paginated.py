from __future__ import annotations

"""
Paginated PDF export rendered with reportlab.

Layout offsets are millimetres measured from the top edge of an A4 page:
entries start at 40, advance 10 per line, and move to a new page (restarting
at 20) once the offset passes 270. Title and timestamp appear on page 1 only.
"""

import io
from typing import Sequence

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas

from lingonotes.internal_core.contracts import NoteEntry

from .base import ExportArtifact, ExportHeader, artifact_filename, display_translation

LEFT_MARGIN = 20.0
TITLE_OFFSET = 20.0
TIMESTAMP_OFFSET = 28.0
FIRST_LINE_OFFSET = 40.0
LINE_STEP = 10.0
PAGE_BREAK_OFFSET = 270.0
NEW_PAGE_OFFSET = 20.0

TITLE_FONT_SIZE = 20
TIMESTAMP_FONT_SIZE = 10
BODY_FONT_SIZE = 12
FONT_NAME = "Helvetica"


def numbered_lines(entries: Sequence[NoteEntry]) -> list[str]:
    return [
        f"{index}. {entry.original} -> {display_translation(entry)}"
        for index, entry in enumerate(entries, start=1)
    ]


def paginate_lines(lines: Sequence[str]) -> list[list[tuple[float, str]]]:
    """Assign each line a page and a vertical offset."""
    pages: list[list[tuple[float, str]]] = [[]]
    offset = FIRST_LINE_OFFSET
    for line in lines:
        if offset > PAGE_BREAK_OFFSET:
            pages.append([])
            offset = NEW_PAGE_OFFSET
        pages[-1].append((offset, line))
        offset += LINE_STEP
    return pages


def render_pdf(entries: Sequence[NoteEntry], header: ExportHeader) -> bytes:
    buffer = io.BytesIO()
    _, page_height = A4
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(header.title)

    def draw(offset: float, text: str, size: int) -> None:
        pdf.setFont(FONT_NAME, size)
        pdf.drawString(LEFT_MARGIN * mm, page_height - offset * mm, text)

    draw(TITLE_OFFSET, header.title, TITLE_FONT_SIZE)
    draw(TIMESTAMP_OFFSET, f"Exported on: {header.timestamp}", TIMESTAMP_FONT_SIZE)

    pages = paginate_lines(numbered_lines(entries))
    for page_index, page in enumerate(pages):
        if page_index:
            pdf.showPage()
        for offset, line in page:
            draw(offset, line, BODY_FONT_SIZE)
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def export_pdf(entries: Sequence[NoteEntry], header: ExportHeader) -> ExportArtifact:
    return ExportArtifact(
        filename=artifact_filename(header, "pdf"),
        media_type="application/pdf",
        content=render_pdf(entries, header),
    )
