"""
Module: editing.pages

Purpose:
    Page array operations: insert a blank page, copy, delete, reorder and
    change the active page. All functions take a Document and return a new
    one; the active page is preserved by identity wherever the operation
    does not explicitly move it.

Key Functions:
    - insert_blank_page(): Blank white page, becomes active
    - insert_page(): Insert an existing Page at a position
    - copy_page(): Duplicate with fresh ids, placed after the source
    - delete_page(): Remove with active-index repair
    - reorder_pages(): Move one page, keep the active page active
    - set_active_page(): Select a page by position

Dependencies:
    - core.models: Document, Page, blank_page

Used By:
    - store.DocumentStore
    - editing.title_page
"""

from __future__ import annotations

import logging
from typing import Tuple

from notemod.core.models import Document, Page, blank_page
from notemod.core.models.images import JPEG_QUALITY

logger = logging.getLogger(__name__)

# A4 at twice the 72 dpi point size, used when there is no page to copy
DEFAULT_PAGE_SIZE: Tuple[int, int] = (1190, 1684)


def reference_page_size(
    document: Document,
    index: int,
    default: Tuple[int, int] = DEFAULT_PAGE_SIZE,
) -> Tuple[int, int]:
    """
    Size for a page inserted at `index`.

    Uses the page before the insertion point, else the page at it, else the
    first page, else `default`.
    """
    pages = document.pages
    if not pages:
        return default
    for candidate in (index - 1, index):
        if 0 <= candidate < len(pages):
            return pages[candidate].size
    return pages[0].size


def insert_page(document: Document, index: int, page: Page) -> Document:
    """
    Splice `page` in at `index` (clamped to [0, len]) and make it active.
    """
    index = max(0, min(index, len(document.pages)))
    pages = list(document.pages)
    pages.insert(index, page)
    return document.with_pages(pages, page.id)


def insert_blank_page(
    document: Document,
    index: int,
    *,
    default_size: Tuple[int, int] = DEFAULT_PAGE_SIZE,
    quality: int = JPEG_QUALITY,
) -> Document:
    """
    Insert a blank white page and jump to it.

    Args:
        document: Document to edit
        index: Insertion position
        default_size: (width, height) when the document is empty
        quality: JPEG quality of the blank image

    Returns:
        Document with the new page active at `index`
    """
    width, height = reference_page_size(document, index, default_size)
    page = Page.create(blank_page(width, height, quality=quality), width, height)
    logger.info(f"Inserting blank {width}x{height} page at {index}")
    return insert_page(document, index, page)


def copy_page(document: Document, index: int) -> Document:
    """
    Duplicate the page at `index` directly after it; the copy becomes active.

    Raises:
        IndexError: If index is out of range
    """
    source = document.page_at(index)
    duplicate = source.duplicate()
    pages = list(document.pages)
    pages.insert(index + 1, duplicate)
    return document.with_pages(pages, duplicate.id)


def delete_page(document: Document, index: int) -> Document:
    """
    Remove the page at `index`.

    Active page repair:
        - document becomes empty -> no active page (index 0)
        - deleted before the active page -> active page unchanged (its
          index drops by one)
        - deleted the active page -> the page now at the same index, or the
          last page when the deleted page was last
        - deleted after the active page -> unchanged

    Raises:
        IndexError: If index is out of range
    """
    document.page_at(index)
    active_index = document.active_page_index
    pages = list(document.pages)
    del pages[index]

    if not pages:
        return document.with_pages(pages, None)

    if index == active_index:
        new_active = pages[min(active_index, len(pages) - 1)].id
    else:
        new_active = document.active_page_id
    return document.with_pages(pages, new_active)


def reorder_pages(document: Document, from_index: int, to_index: int) -> Document:
    """
    Move the page at `from_index` so that it ends up at `to_index`.

    The active page stays the same page object; only its derived index
    changes.

    Raises:
        IndexError: If either index is out of range
    """
    document.page_at(from_index)
    document.page_at(to_index)
    if from_index == to_index:
        return document
    pages = list(document.pages)
    moved = pages.pop(from_index)
    pages.insert(to_index, moved)
    return document.with_pages(pages, document.active_page_id)


def set_active_page(document: Document, index: int) -> Document:
    return document.with_active_index(index)
