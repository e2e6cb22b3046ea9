"""
Module: loading.rasterizer

Purpose:
    Turn PDF bytes into page images with PyMuPDF. Every page is rendered at
    `scale` times 72 dpi and encoded as JPEG, and its pixel size becomes the
    page's fixed width and height. Loading is all-or-nothing: any failure
    raises LoadFailure and no pages are returned.

Key Functions:
    - rasterize_pdf(): PDF bytes -> list of RasterPage
    - document_from_pdf(): PDF path or bytes -> new Document

Dependencies:
    - fitz (PyMuPDF): PDF rendering
    - PIL.Image: JPEG encoding

Used By:
    - cli: import-pdf command
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import fitz
from PIL import Image

from notemod.core.errors import LoadFailure
from notemod.core.models import Document, ImageData, Page
from notemod.core.models.images import JPEG_QUALITY

logger = logging.getLogger(__name__)

DEFAULT_SCALE = 2.0


@dataclass(frozen=True)
class RasterPage:
    """
    One rendered PDF page.

    Attributes:
        image: Encoded page image
        width: Pixel width of the rendering
        height: Pixel height of the rendering
    """

    image: ImageData
    width: int
    height: int


def rasterize_pdf(
    data: bytes,
    *,
    scale: float = DEFAULT_SCALE,
    quality: int = JPEG_QUALITY,
) -> List[RasterPage]:
    """
    Render every page of a PDF.

    Args:
        data: PDF file contents
        scale: Zoom relative to 72 dpi. Defaults to 2.0.
        quality: JPEG quality for the page images

    Returns:
        One RasterPage per PDF page, in order

    Raises:
        LoadFailure: If the PDF cannot be opened, has no pages, or any page
            fails to render

    Example:
        >>> pages = rasterize_pdf(Path("notes.pdf").read_bytes())
        >>> pages[0].width, pages[0].height
        (1190, 1684)
    """
    if scale <= 0:
        raise ValueError(f"scale must be positive: {scale}")
    if not data:
        raise LoadFailure("PDF data is empty")

    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except Exception as e:  # fitz raises several unrelated types on bad input
        raise LoadFailure(f"Could not open PDF: {e}") from e

    try:
        if doc.needs_pass:
            raise LoadFailure("PDF is password protected")
        if doc.page_count == 0:
            raise LoadFailure("PDF has no pages")

        matrix = fitz.Matrix(scale, scale)
        pages: List[RasterPage] = []
        for index in range(doc.page_count):
            try:
                pages.append(_render_page(doc[index], matrix, quality))
            except Exception as e:
                raise LoadFailure(f"Failed to render page {index + 1}: {e}") from e
    finally:
        doc.close()

    logger.info(f"Rasterized {len(pages)} pages at {scale}x")
    return pages


def _render_page(page: fitz.Page, matrix: fitz.Matrix, quality: int) -> RasterPage:
    pix = page.get_pixmap(matrix=matrix, alpha=False)
    image = Image.frombytes("RGB", (pix.width, pix.height), pix.samples)
    logger.debug(f"Rendered page {page.number + 1}: {pix.width}x{pix.height}")
    return RasterPage(
        image=ImageData.from_pil(image, quality=quality),
        width=pix.width,
        height=pix.height,
    )


def document_from_pdf(
    source: Union[Path, bytes],
    name: Optional[str] = None,
    *,
    scale: float = DEFAULT_SCALE,
    quality: int = JPEG_QUALITY,
) -> Document:
    """
    Build a fresh Document from a PDF.

    Pages get new ids, no regions and no versions; the first page is active.

    Args:
        source: Path to a PDF file, or its bytes
        name: Document name (defaults to the file name for a path)
        scale: Rasterization zoom
        quality: JPEG quality

    Raises:
        LoadFailure: If the file cannot be read or rasterized
    """
    if isinstance(source, Path):
        try:
            data = source.read_bytes()
        except OSError as e:
            raise LoadFailure(f"Could not read {source}: {e}") from e
        if name is None:
            name = source.name
    else:
        data = source

    rendered = rasterize_pdf(data, scale=scale, quality=quality)
    pages = [Page.create(r.image, r.width, r.height) for r in rendered]
    return Document.from_pages(name or "", pages)
