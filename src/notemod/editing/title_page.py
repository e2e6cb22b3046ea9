"""
Module: editing.title_page

Purpose:
    Generate a cover page from user metadata and insert it as the first
    page. The active image of an optional reference page is sent along as a
    style reference.

Key Functions:
    - create_title_page(): Generate and insert the cover page

Dependencies:
    - generation.service: Request/unwrap
    - generation.prompts: TitlePageData, build_title_page_request
    - editing.pages: insert_page, DEFAULT_PAGE_SIZE

Used By:
    - cli
"""

from __future__ import annotations

import logging
from typing import Tuple

from notemod.core.models import Document, ImageData, Page
from notemod.generation.prompts import TitlePageData, build_title_page_request
from notemod.generation.service import GenerationService

from .pages import DEFAULT_PAGE_SIZE, insert_page

logger = logging.getLogger(__name__)


def title_page_references(document: Document, data: TitlePageData) -> list[ImageData]:
    """Active image of the 1-based reference page, when it exists."""
    number = data.reference_page_number
    if number is None or not 1 <= number <= document.page_count:
        return []
    return [document.pages[number - 1].active_image]


def title_page_size(
    document: Document,
    default: Tuple[int, int] = DEFAULT_PAGE_SIZE,
) -> Tuple[int, int]:
    """Cover pages take the first page's size so the export stays uniform."""
    if document.pages:
        return document.pages[0].size
    return default


async def create_title_page(
    service: GenerationService,
    data: TitlePageData,
    *,
    default_size: Tuple[int, int] = DEFAULT_PAGE_SIZE,
) -> Page:
    """
    Generate a title page and insert it at index 0 as the active page.

    Args:
        service: Generation service bound to the live store
        data: Cover page metadata
        default_size: Page size when the document is empty

    Returns:
        The inserted page

    Raises:
        GenerationFailure: If the service produced no image; the document is
            unchanged
    """
    document = service.store.snapshot()
    references = title_page_references(document, data)
    parts = build_title_page_request(data, references)

    logger.info(f"Generating title page {data.title!r} with {len(references)} reference(s)")
    image = await service.request_image(parts, resolution=document.resolution)

    width, height = title_page_size(service.store.snapshot(), default_size)
    page = Page.create(image, width, height)
    service.store.replace(lambda d: insert_page(d, 0, page))
    return page
