"""
Module: editing.history

Purpose:
    Version history of a page and its generation state machine.

    History is newest-first. New versions are always prepended and
    auto-selected. Deleting the selected version falls back to the newest
    remaining version, or to the original when none remain; this is the
    only place selection changes implicitly.

    Generation state per page:  Idle --begin--> Generating --complete/fail--> Idle

Key Functions:
    - select_version(), append_version(), delete_version()
    - begin_generation(), complete_generation(), fail_generation()
    - *_on_page(): Document-level variants addressed by page id

Dependencies:
    - core.models: Page, GeneratedImage, Document

Used By:
    - editing.removal, editing.title_page
    - generation.service
    - store.DocumentStore
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from notemod.core.models import Document, GeneratedImage, Page

logger = logging.getLogger(__name__)


def select_version(page: Page, version_id: Optional[str]) -> Page:
    """
    Show a version (or the original with None).

    Raises:
        ValueError: If version_id is not a version of this page
    """
    if version_id is not None and page.find_version(version_id) is None:
        raise ValueError(f"Version {version_id!r} does not exist on page {page.id}")
    if version_id == page.selected_version_id:
        return page
    return replace(page, selected_version_id=version_id)


def append_version(page: Page, version: GeneratedImage) -> Page:
    """Prepend a version and select it."""
    return replace(
        page,
        versions=(version,) + page.versions,
        selected_version_id=version.id,
    )


def delete_version(page: Page, version_id: str) -> Page:
    """
    Remove a version.

    If it was selected, the newest remaining version is selected, or the
    original when the history is now empty. Unknown ids are ignored.
    """
    versions = tuple(v for v in page.versions if v.id != version_id)
    if len(versions) == len(page.versions):
        return page

    selected = page.selected_version_id
    if selected == version_id:
        selected = versions[0].id if versions else None
    return replace(page, versions=versions, selected_version_id=selected)


# ─────────────────────────────────────────────────────────────────────────────
# Generation State Machine
# ─────────────────────────────────────────────────────────────────────────────

def begin_generation(page: Page) -> Page:
    """Idle -> Generating."""
    if page.is_generating:
        raise ValueError(f"Page {page.id} is already generating")
    return replace(page, is_generating=True)


def complete_generation(page: Page, version: GeneratedImage) -> Page:
    """Generating -> Idle with a new, selected version."""
    return replace(append_version(page, version), is_generating=False)


def fail_generation(page: Page) -> Page:
    """Generating -> Idle without touching the history."""
    if not page.is_generating:
        return page
    return replace(page, is_generating=False)


# ─────────────────────────────────────────────────────────────────────────────
# Document-level helpers
# ─────────────────────────────────────────────────────────────────────────────

def _on_page(document: Document, page_id: str, fn, action: str) -> Document:
    if document.find_page(page_id) is None:
        logger.warning(f"Page {page_id} no longer exists, ignoring {action}")
        return document
    return document.update_page(page_id, fn)


def select_version_on_page(document: Document, page_id: str, version_id: Optional[str]) -> Document:
    return _on_page(document, page_id, lambda p: select_version(p, version_id), "version select")


def append_version_on_page(document: Document, page_id: str, version: GeneratedImage) -> Document:
    return _on_page(document, page_id, lambda p: append_version(p, version), "version append")


def delete_version_on_page(document: Document, page_id: str, version_id: str) -> Document:
    return _on_page(document, page_id, lambda p: delete_version(p, version_id), "version delete")


def begin_generation_on_page(document: Document, page_id: str) -> Document:
    return _on_page(document, page_id, begin_generation, "generation start")


def complete_generation_on_page(
    document: Document,
    page_id: str,
    version: GeneratedImage,
) -> Document:
    return _on_page(
        document, page_id, lambda p: complete_generation(p, version), "generation result"
    )


def fail_generation_on_page(document: Document, page_id: str) -> Document:
    return _on_page(document, page_id, fail_generation, "generation failure")
