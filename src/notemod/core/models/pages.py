"""
Module: pages

Purpose:
    Provides the Page dataclass - one document page: its source image,
    fixed pixel dimensions, regions, newest-first version history and the
    selected version. Every change produces a new Page.

Key Functions:
    - Page.create(original_image, width, height): New page with a fresh id
    - Page.active_image: Selected version's image, or the original
    - Page.find_version(id) / Page.find_region(id): Lookups
    - Page.duplicate(): Deep copy with new ids and remapped selection

Dependencies:
    - dataclasses (std)
    - .images, .regions, .versions

Used By:
    - core.models.document.Document
    - editing.*
    - output.pdf_exporter, core.utils.serialization
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from .images import ImageData
from .regions import Region, new_id
from .versions import GeneratedImage


@dataclass(frozen=True)
class Page:
    """
    One document page (immutable).

    Attributes:
        id: Stable identifier, independent of the page's position
        original_image: Rasterized (or blank/title) source image
        width: Page width in pixels, fixed at creation
        height: Page height in pixels, fixed at creation
        regions: Regions in drawing order
        versions: Generated versions, newest first
        selected_version_id: Shown version, None means the original
        is_generating: True while a generation request is in flight

    Invariants:
        - width > 0 and height > 0
        - selected_version_id is None or the id of a version in `versions`
        - region ids and version ids are unique within the page
    """

    id: str
    original_image: ImageData
    width: int
    height: int
    regions: tuple[Region, ...] = ()
    versions: tuple[GeneratedImage, ...] = ()
    selected_version_id: Optional[str] = None
    is_generating: bool = False

    def __post_init__(self) -> None:
        """Validate page on construction."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Page size must be positive: {self.width}x{self.height}")
        version_ids = [v.id for v in self.versions]
        if len(set(version_ids)) != len(version_ids):
            raise ValueError(f"Duplicate version ids on page {self.id}")
        region_ids = [r.id for r in self.regions]
        if len(set(region_ids)) != len(region_ids):
            raise ValueError(f"Duplicate region ids on page {self.id}")
        if self.selected_version_id is not None and self.selected_version_id not in version_ids:
            raise ValueError(
                f"selected_version_id {self.selected_version_id!r} "
                f"is not a version of page {self.id}"
            )

    @classmethod
    def create(
        cls,
        original_image: ImageData,
        width: int,
        height: int,
        *,
        page_id: Optional[str] = None,
    ) -> Page:
        """Create an unedited page with a fresh id."""
        return cls(
            id=page_id or new_id(),
            original_image=original_image,
            width=width,
            height=height,
        )

    # ─────────────────────────────────────────────────────────────────────────
    # Properties
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def selected_version(self) -> Optional[GeneratedImage]:
        if self.selected_version_id is None:
            return None
        return self.find_version(self.selected_version_id)

    @property
    def active_image(self) -> ImageData:
        """Image shown and exported for this page."""
        version = self.selected_version
        return version.image if version is not None else self.original_image

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    # ─────────────────────────────────────────────────────────────────────────
    # Lookups
    # ─────────────────────────────────────────────────────────────────────────

    def find_version(self, version_id: str) -> Optional[GeneratedImage]:
        for version in self.versions:
            if version.id == version_id:
                return version
        return None

    def find_region(self, region_id: str) -> Optional[Region]:
        for region in self.regions:
            if region.id == region_id:
                return region
        return None

    def has_instructions(self) -> bool:
        """True when at least one region carries a non-blank prompt."""
        return any(r.prompt.strip() for r in self.regions)

    # ─────────────────────────────────────────────────────────────────────────
    # Copies
    # ─────────────────────────────────────────────────────────────────────────

    def evolve(self, **changes) -> Page:
        """Return a copy with the given fields replaced (validated)."""
        return replace(self, **changes)

    def duplicate(self) -> Page:
        """
        Deep copy with a new page id and new ids for every region and version.

        The selection is remapped by position to the copied version, so the
        copy shows the same image as the source.
        """
        regions = tuple(r.with_new_id() for r in self.regions)
        versions = tuple(v.with_new_id() for v in self.versions)

        selected_id = None
        if self.selected_version_id is not None:
            for old, new in zip(self.versions, versions):
                if old.id == self.selected_version_id:
                    selected_id = new.id
                    break

        return replace(
            self,
            id=new_id(),
            regions=regions,
            versions=versions,
            selected_version_id=selected_id,
            is_generating=False,
        )

    def __repr__(self) -> str:
        return (
            f"Page({self.id[:8]}, {self.width}x{self.height}, "
            f"regions={len(self.regions)}, versions={len(self.versions)})"
        )
