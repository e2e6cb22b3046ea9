"""
Module: store

Purpose:
    Holds the one live Document. Documents are immutable, so the store is a
    single cell: every change computes a new Document from the current one
    and installs it under a lock. Readers take a snapshot and never see a
    half-applied change.

Key Classes:
    - DocumentStore: Atomic replace, snapshots and editor operations

Dependencies:
    - threading (std)
    - editing.*: Pure document operations
    - output.workspace / loading.rasterizer: Opening files atomically

Used By:
    - generation.service: Updates pages by id on completion
    - editing.title_page
    - cli
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Optional

from notemod.core.models import Document, ImageData, Region
from notemod.editing import history, pages, regions
from notemod.editing.regions import EditMode
from notemod.editing.removal import RemovalOutcome, remove_watermark
from notemod.loading.rasterizer import document_from_pdf
from notemod.output.workspace import read_workspace

logger = logging.getLogger(__name__)


class DocumentStore:
    """
    Single mutable reference to the current immutable Document.

    All editor actions act on the active page by its id as captured at the
    moment the action is applied, inside the lock.

    Example:
        >>> store = DocumentStore(document)
        >>> store.insert_blank_page(1)
        >>> store.snapshot().active_page_index
        1
    """

    def __init__(self, document: Optional[Document] = None, *, mode: EditMode = EditMode.ANNOTATE):
        self._document = document or Document.empty()
        self._lock = threading.Lock()
        self.mode = mode

    # ─────────────────────────────────────────────────────────────────────────
    # Core
    # ─────────────────────────────────────────────────────────────────────────

    def snapshot(self) -> Document:
        """Current document value."""
        with self._lock:
            return self._document

    def replace(self, fn: Callable[[Document], Document]) -> Document:
        """
        Atomically replace the document with `fn(current)`.

        If `fn` raises, the document is left unchanged and the error
        propagates.
        """
        with self._lock:
            self._document = fn(self._document)
            return self._document

    def set(self, document: Document) -> Document:
        """Install a whole new document (open file, new project)."""
        return self.replace(lambda _: document)

    def reset(self) -> Document:
        """Start a new empty project."""
        self.mode = EditMode.ANNOTATE
        return self.set(Document.empty())

    def open_workspace(self, path: Path) -> Document:
        """
        Replace the document with a saved workspace.

        The file is parsed completely before anything is installed, so a
        corrupt workspace leaves the current document untouched.

        Raises:
            FileNotFoundError, CorruptWorkspaceError
        """
        document = read_workspace(path)
        self.mode = EditMode.ANNOTATE
        return self.set(document)

    def open_pdf(self, path: Path, **kwargs) -> Document:
        """
        Replace the document with the rasterized pages of a PDF.

        Raises:
            LoadFailure: If the PDF cannot be rasterized; state is unchanged
        """
        document = document_from_pdf(path, **kwargs)
        self.mode = EditMode.ANNOTATE
        return self.set(document)

    def _on_active(
        self, fn: Callable[[Document, str], Document], page_id: Optional[str] = None
    ) -> Document:
        """Apply `fn` to `page_id`, or to the active page when no id is given."""
        def apply(document: Document) -> Document:
            target = page_id or document.active_page_id
            if target is None:
                return document
            return fn(document, target)
        return self.replace(apply)

    # ─────────────────────────────────────────────────────────────────────────
    # Settings
    # ─────────────────────────────────────────────────────────────────────────

    def set_settings(self, **changes) -> Document:
        """Change name, resolution or enhance_text."""
        allowed = {"name", "resolution", "enhance_text"}
        unknown = set(changes) - allowed
        if unknown:
            raise TypeError(f"Unknown document settings: {sorted(unknown)}")
        return self.replace(lambda d: d.evolve(**changes))

    # ─────────────────────────────────────────────────────────────────────────
    # Regions (active page)
    # ─────────────────────────────────────────────────────────────────────────

    def draw_region(self, region: Region) -> Optional[RemovalOutcome]:
        """
        Handle a finished draw gesture.

        Annotation mode adds the region to the active page. Removal mode
        runs batch watermark removal with the region instead and returns its
        outcome.
        """
        if self.mode is EditMode.REMOVAL:
            if region.is_degenerate():
                return None
            return self.remove_watermark(region)
        self._on_active(
            lambda d, page_id: regions.add_region_on_page(d, page_id, region, mode=self.mode)
        )
        return None

    def remove_region(self, region_id: str, page_id: Optional[str] = None) -> Document:
        return self._on_active(
            lambda d, pid: regions.remove_region_on_page(d, pid, region_id), page_id
        )

    def update_prompt(self, region_id: str, text: str) -> Document:
        return self._on_active(lambda d, pid: regions.update_prompt_on_page(d, pid, region_id, text))

    def update_reference_image(self, region_id: str, image: Optional[ImageData]) -> Document:
        return self._on_active(
            lambda d, pid: regions.update_reference_image_on_page(d, pid, region_id, image)
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Versions (active page unless a page id is given)
    # ─────────────────────────────────────────────────────────────────────────

    def select_version(self, version_id: Optional[str], page_id: Optional[str] = None) -> Document:
        return self._on_active(
            lambda d, pid: history.select_version_on_page(d, pid, version_id), page_id
        )

    def delete_version(self, version_id: str, page_id: Optional[str] = None) -> Document:
        return self._on_active(
            lambda d, pid: history.delete_version_on_page(d, pid, version_id), page_id
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Pages
    # ─────────────────────────────────────────────────────────────────────────

    def insert_blank_page(self, index: int, **kwargs) -> Document:
        return self.replace(lambda d: pages.insert_blank_page(d, index, **kwargs))

    def copy_page(self, index: int) -> Document:
        return self.replace(lambda d: pages.copy_page(d, index))

    def delete_page(self, index: int) -> Document:
        """Delete a page. Confirmation is the caller's responsibility."""
        return self.replace(lambda d: pages.delete_page(d, index))

    def reorder_pages(self, from_index: int, to_index: int) -> Document:
        return self.replace(lambda d: pages.reorder_pages(d, from_index, to_index))

    def set_active_page(self, index: int) -> Document:
        return self.replace(lambda d: pages.set_active_page(d, index))

    # ─────────────────────────────────────────────────────────────────────────
    # Batch Removal
    # ─────────────────────────────────────────────────────────────────────────

    def remove_watermark(self, rect: Region, **kwargs) -> RemovalOutcome:
        """
        Inpaint `rect` on every page and apply all results in one replace.

        Work runs on a snapshot outside the lock; the new versions are then
        merged by page id into whatever the document is at that point.

        Raises:
            BatchRemovalError: With all_or_nothing=True, when any page failed
        """
        outcome = remove_watermark(self.snapshot(), rect, **kwargs)
        if outcome.versions:
            self.replace(outcome.apply)
        return outcome
