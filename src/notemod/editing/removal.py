"""
Module: editing.removal

Purpose:
    Batch watermark removal: inpaint the same normalized rect on every page
    and record each result as a new version. Each page's current active
    image is the source, so repeated removals chain.

Key Functions:
    - remove_watermark(): Run the batch, return the combined document

Key Classes:
    - RemovalOutcome: New document, per-page versions and failures

Dependencies:
    - concurrent.futures (std): Per-page inpaint runs in a thread pool
    - imaging.inpaint
    - editing.history: append_version

Used By:
    - store.DocumentStore.remove_watermark
    - cli
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

from notemod.core.errors import BatchRemovalError
from notemod.core.models import Document, GeneratedImage, ImageData, Page, Region
from notemod.core.models.images import JPEG_QUALITY
from notemod.imaging.inpaint import inpaint

from .history import append_version

logger = logging.getLogger(__name__)

# prompt_used recorded on versions produced by watermark removal
REMOVAL_PROMPT = "watermark removal"


@dataclass(frozen=True)
class RemovalOutcome:
    """
    Result of a batch removal (immutable).

    Attributes:
        document: Document with one new selected version per processed page
        versions: Page id -> version created for that page
        failures: Page id -> error message for pages left unchanged
    """

    document: Document
    versions: Dict[str, GeneratedImage] = field(default_factory=dict)
    failures: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def processed(self) -> tuple[str, ...]:
        return tuple(self.versions)

    def apply(self, document: Document) -> Document:
        """
        Append the new versions to `document` by page id.

        Used to merge the batch into a document that changed while the batch
        ran; pages deleted in the meantime are skipped.
        """
        for page_id, version in self.versions.items():
            document = document.update_page(page_id, lambda p, v=version: append_version(p, v))
        return document


def remove_watermark(
    document: Document,
    rect: Region,
    *,
    all_or_nothing: bool = False,
    max_workers: Optional[int] = None,
    quality: int = JPEG_QUALITY,
) -> RemovalOutcome:
    """
    Inpaint `rect` on every page of `document`.

    Pages are processed concurrently and joined before anything is applied;
    the caller installs `outcome.document` in a single replace. Regions are
    not modified.

    Args:
        document: Snapshot to process
        rect: Normalized rect drawn in removal mode
        all_or_nothing: Raise instead of applying partial results
        max_workers: Thread pool size (default: min(8, page count))
        quality: JPEG quality of the results

    Returns:
        RemovalOutcome with the combined document

    Raises:
        BatchRemovalError: If all_or_nothing is set and any page failed
    """
    if document.is_empty:
        return RemovalOutcome(document=document)

    workers = max_workers or min(8, document.page_count)
    logger.info(
        f"Removing rect ({rect.x:.1f}, {rect.y:.1f}, {rect.w:.1f}, {rect.h:.1f})% "
        f"on {document.page_count} pages with {workers} workers"
    )

    results: Dict[str, ImageData] = {}
    failures: Dict[str, str] = {}
    with ThreadPoolExecutor(max_workers=workers) as pool:
        future_map = {
            pool.submit(_inpaint_page, page, rect, quality): page.id
            for page in document.pages
        }
        for future, page_id in future_map.items():
            try:
                results[page_id] = future.result()
            except ValueError as e:
                logger.warning(f"Watermark removal failed on page {page_id}: {e}")
                failures[page_id] = str(e)

    if failures and all_or_nothing:
        raise BatchRemovalError(
            f"Watermark removal failed on {len(failures)} of {document.page_count} pages",
            failures=failures,
        )

    versions: Dict[str, GeneratedImage] = {}
    for page in document.pages:
        image = results.get(page.id)
        if image is not None:
            versions[page.id] = GeneratedImage.create(image, REMOVAL_PROMPT)

    outcome = RemovalOutcome(document=document, versions=versions, failures=failures)
    logger.info(f"Watermark removed on {len(versions)} pages, {len(failures)} failed")
    return replace(outcome, document=outcome.apply(document))


def _inpaint_page(page: Page, rect: Region, quality: int) -> ImageData:
    return inpaint(page.active_image, rect, quality=quality)
