"""
Module: output.pdf_exporter

Purpose:
    Assemble the final PDF from each page's active image using ReportLab.
    Every page becomes one sheet of exactly its own pixel size (1 px = 1 pt)
    with the image filling the sheet from the origin; orientation is taken
    per sheet.

Key Functions:
    - export_pdf(): Document -> PDF bytes
    - write_pdf(): Document -> PDF file
    - export_filename(): "<name>_modified.pdf"

Dependencies:
    - reportlab: PDF generation
    - PIL: Image decoding

Used By:
    - cli
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import landscape, portrait
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from notemod.core.errors import ExportOnEmptyDocumentError
from notemod.core.models import Document, Page

logger = logging.getLogger(__name__)


def export_pdf(document: Document) -> bytes:
    """
    Render the document to PDF bytes.

    Args:
        document: Snapshot to export (not modified)

    Returns:
        PDF file contents, one page per document page

    Raises:
        ExportOnEmptyDocumentError: If the document has no pages
        ValueError: If a page image cannot be decoded
    """
    if document.is_empty:
        raise ExportOnEmptyDocumentError("Cannot export a document with no pages")

    buf = io.BytesIO()
    first = document.pages[0]
    c = canvas.Canvas(buf, pagesize=_sheet_size(first))
    c.setTitle(_base_name(document.name) or "document")

    for page in document.pages:
        _render_page(c, page)
        c.showPage()

    c.save()
    logger.info(f"Exported {document.page_count} pages ({len(buf.getvalue())} bytes)")
    return buf.getvalue()


def write_pdf(document: Document, output_path: Optional[Path] = None) -> Path:
    """
    Export to a file.

    Args:
        document: Snapshot to export
        output_path: Destination (default: export_filename(document.name)
            in the working directory)

    Returns:
        Path written
    """
    if output_path is None:
        output_path = Path(export_filename(document.name))
    data = export_pdf(document)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(data)
    logger.info(f"Wrote {output_path}")
    return output_path


def export_filename(name: str) -> str:
    """Default export file name: "report.pdf" -> "report_modified.pdf"."""
    return f"{_base_name(name) or 'document'}_modified.pdf"


def _render_page(c: canvas.Canvas, page: Page) -> None:
    """
    Start a sheet sized to the page and draw its active image over it.

    Args:
        c: ReportLab canvas
        page: Page to draw
    """
    width, height = _sheet_size(page)
    c.setPageSize((width, height))

    # Decode first so a broken payload fails with a clear error
    image = page.active_image.to_pil()
    if image.mode not in ("RGB", "L"):
        image = image.convert("RGB")

    c.drawImage(
        ImageReader(image),
        0,
        0,
        width=width,
        height=height,
        preserveAspectRatio=False,
    )
    logger.debug(f"Rendered page {page.id} at {width:.0f}x{height:.0f}")


def _sheet_size(page: Page) -> tuple[float, float]:
    """(width, height) in points, orientation from the page's own shape."""
    size = (float(page.width), float(page.height))
    return landscape(size) if page.is_landscape else portrait(size)


def _base_name(name: str) -> str:
    if name.lower().endswith(".pdf"):
        return name[:-4]
    return name
