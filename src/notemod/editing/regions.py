"""
Module: editing.regions

Purpose:
    Region edits on a page: add, remove, change prompt, change reference
    image. Each function returns a new Page (or Document).

Key Functions:
    - add_region(): Append a drawn region (annotation mode)
    - remove_region(), update_prompt(), update_reference_image()
    - *_on_page(): Document-level variants addressed by page id

Dependencies:
    - core.models: Page, Region, Document, ImageData

Used By:
    - store.DocumentStore
"""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Callable, Optional

from notemod.core.models import Document, ImageData, MIN_REGION_SIZE, Page, Region

logger = logging.getLogger(__name__)


class EditMode(str, Enum):
    """What a draw gesture on the canvas means."""

    ANNOTATE = "annotate"  # region collects an AI edit instruction
    REMOVAL = "removal"  # region is inpainted on every page immediately


def add_region(
    page: Page,
    region: Region,
    *,
    mode: EditMode = EditMode.ANNOTATE,
    min_size: float = MIN_REGION_SIZE,
) -> Page:
    """
    Add a drawn region to a page.

    Regions below `min_size` on both axes are accidental clicks and are
    ignored. In annotation mode the selection is reset to the original
    image so new edits are drafted against it. Removal mode leaves the page
    untouched; the removal itself runs through `editing.removal`.

    Args:
        page: Page to edit
        region: Region to add
        mode: Current edit mode
        min_size: Minimum size gate in percent

    Returns:
        Updated page, or `page` itself when nothing changed
    """
    if region.is_degenerate(min_size):
        logger.debug(f"Ignoring degenerate region {region.w:.3f}x{region.h:.3f}%")
        return page
    if mode is EditMode.REMOVAL:
        return page
    if page.find_region(region.id) is not None:
        raise ValueError(f"Region {region.id} already exists on page {page.id}")
    return replace(
        page,
        regions=page.regions + (region,),
        selected_version_id=None,
    )


def remove_region(page: Page, region_id: str) -> Page:
    regions = tuple(r for r in page.regions if r.id != region_id)
    if len(regions) == len(page.regions):
        return page
    return replace(page, regions=regions)


def update_prompt(page: Page, region_id: str, text: str) -> Page:
    """Set the instruction of one region."""
    return _update_region(page, region_id, lambda r: r.with_prompt(text))


def update_reference_image(page: Page, region_id: str, image: Optional[ImageData]) -> Page:
    """Attach (or with None, detach) a reference image."""
    return _update_region(page, region_id, lambda r: r.with_reference_image(image))


def _update_region(page: Page, region_id: str, fn: Callable[[Region], Region]) -> Page:
    changed = False
    regions = []
    for region in page.regions:
        if region.id == region_id:
            region = fn(region)
            changed = True
        regions.append(region)
    if not changed:
        return page
    return replace(page, regions=tuple(regions))


# ─────────────────────────────────────────────────────────────────────────────
# Document-level helpers
# ─────────────────────────────────────────────────────────────────────────────

def add_region_on_page(
    document: Document,
    page_id: str,
    region: Region,
    *,
    mode: EditMode = EditMode.ANNOTATE,
) -> Document:
    return document.update_page(page_id, lambda p: add_region(p, region, mode=mode))


def remove_region_on_page(document: Document, page_id: str, region_id: str) -> Document:
    return document.update_page(page_id, lambda p: remove_region(p, region_id))


def update_prompt_on_page(document: Document, page_id: str, region_id: str, text: str) -> Document:
    return document.update_page(page_id, lambda p: update_prompt(p, region_id, text))


def update_reference_image_on_page(
    document: Document,
    page_id: str,
    region_id: str,
    image: Optional[ImageData],
) -> Document:
    return document.update_page(page_id, lambda p: update_reference_image(p, region_id, image))
