"""
Module: document

Purpose:
    Provides the Document dataclass - the whole editing state: ordered pages,
    the active page, and generation settings. The active page is tracked by
    page id; its numeric index is derived, so inserts, deletes and reorders
    never silently change which page the user is looking at.

Key Functions:
    - Document.empty(name): Document with no pages
    - Document.active_page_index / Document.active_page
    - Document.page_index(page_id) / Document.find_page(page_id)
    - Document.with_active_index(index)
    - Document.update_page(page_id, fn): Apply fn to one page by identity

Dependencies:
    - dataclasses (std)
    - enum (std)
    - .pages.Page

Used By:
    - editing.*
    - store.DocumentStore
    - output.workspace, output.pdf_exporter
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Iterable, Optional

from .pages import Page


class ResolutionSetting(str, Enum):
    """Output resolution requested from the generation service."""

    STANDARD = "1k"
    HIGH = "2k"


@dataclass(frozen=True)
class Document:
    """
    Complete document state (immutable).

    Attributes:
        name: Source file name, e.g. "notes.pdf"
        pages: Pages in display order
        active_page_id: Id of the page being viewed, None when empty
        resolution: Generation resolution setting
        enhance_text: Ask the generator to sharpen text

    Invariants:
        - page ids are unique
        - active_page_id is None iff pages is empty
        - otherwise active_page_id is the id of one of the pages
    """

    name: str = ""
    pages: tuple[Page, ...] = ()
    active_page_id: Optional[str] = None
    resolution: ResolutionSetting = ResolutionSetting.STANDARD
    enhance_text: bool = False

    def __post_init__(self) -> None:
        """Validate document on construction."""
        ids = [p.id for p in self.pages]
        if len(set(ids)) != len(ids):
            raise ValueError("Duplicate page ids in document")
        if not self.pages:
            if self.active_page_id is not None:
                raise ValueError("Empty document cannot have an active page")
        elif self.active_page_id not in ids:
            raise ValueError(f"Active page {self.active_page_id!r} is not in the document")

    # ─────────────────────────────────────────────────────────────────────────
    # Factory Methods
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def empty(cls, name: str = "") -> Document:
        return cls(name=name)

    @classmethod
    def from_pages(
        cls,
        name: str,
        pages: Iterable[Page],
        *,
        active_index: int = 0,
        resolution: ResolutionSetting = ResolutionSetting.STANDARD,
        enhance_text: bool = False,
    ) -> Document:
        """Build a document, activating the page at `active_index`."""
        pages = tuple(pages)
        active_id = None
        if pages:
            active_id = pages[max(0, min(active_index, len(pages) - 1))].id
        return cls(
            name=name,
            pages=pages,
            active_page_id=active_id,
            resolution=resolution,
            enhance_text=enhance_text,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def is_empty(self) -> bool:
        return not self.pages

    @property
    def active_page_index(self) -> int:
        """Index of the active page; 0 for an empty document."""
        if self.active_page_id is None:
            return 0
        return self.page_index(self.active_page_id)

    @property
    def active_page(self) -> Optional[Page]:
        if self.active_page_id is None:
            return None
        return self.find_page(self.active_page_id)

    # ─────────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────────

    def page_index(self, page_id: str) -> int:
        """
        Current position of a page.

        Raises:
            KeyError: If no page has this id
        """
        for i, page in enumerate(self.pages):
            if page.id == page_id:
                return i
        raise KeyError(page_id)

    def find_page(self, page_id: str) -> Optional[Page]:
        for page in self.pages:
            if page.id == page_id:
                return page
        return None

    def page_at(self, index: int) -> Page:
        """
        Page at a position.

        Raises:
            IndexError: If index is out of range (negative indices included)
        """
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page index {index} out of range (0..{len(self.pages) - 1})")
        return self.pages[index]

    # ─────────────────────────────────────────────────────────────────────────
    # Copies
    # ─────────────────────────────────────────────────────────────────────────

    def evolve(self, **changes) -> Document:
        return replace(self, **changes)

    def with_active_index(self, index: int) -> Document:
        return replace(self, active_page_id=self.page_at(index).id)

    def with_pages(self, pages: Iterable[Page], active_page_id: Optional[str]) -> Document:
        return replace(self, pages=tuple(pages), active_page_id=active_page_id)

    def update_page(self, page_id: str, fn: Callable[[Page], Page]) -> Document:
        """
        Apply `fn` to the page with `page_id`.

        Returns self unchanged when the page no longer exists, so late
        updates for deleted pages are harmless.
        """
        pages = list(self.pages)
        for i, page in enumerate(pages):
            if page.id == page_id:
                updated = fn(page)
                if updated is page:
                    return self
                pages[i] = updated
                return replace(self, pages=tuple(pages))
        return self

    def __repr__(self) -> str:
        return (
            f"Document({self.name!r}, pages={len(self.pages)}, "
            f"active={self.active_page_index})"
        )
