"""
Module: regions

Purpose:
    Provides the Region dataclass - a rectangular selection on a page in
    percentage coordinates, carrying an edit instruction and an optional
    reference image. Percentages keep regions valid at any render size.

Key Functions:
    - Region.create(x, y, w, h): Clamp coordinates and assign a fresh id
    - Region.to_pixel_box(width, height): Convert to pixel coordinates
    - Region.is_degenerate(): Minimum-size gate for accidental gestures
    - Region.with_prompt() / Region.with_reference_image(): Edited copies

Dependencies:
    - dataclasses (std)
    - math (std)
    - uuid (std)
    - .images.ImageData

Used By:
    - core.models.pages.Page
    - editing.regions
    - imaging.inpaint
    - generation.prompts
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, replace
from typing import Optional

from .images import ImageData

# Regions smaller than this (percent of the page) on both axes are ignored
MIN_REGION_SIZE = 0.1


def new_id() -> str:
    """Opaque random identifier used for regions, versions and pages."""
    return str(uuid.uuid4())


def clamp_percent(value: float) -> float:
    """Clamp a coordinate to the [0, 100] percentage range."""
    return max(0.0, min(100.0, float(value)))


@dataclass(frozen=True, slots=True)
class PixelBox:
    """
    Pixel rectangle as (left, top, width, height).

    Not clamped: may extend past the image or be empty. Callers that touch
    pixels clamp it with `clamp_to()`.
    """

    left: int
    top: int
    width: int
    height: int

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def clamp_to(self, image_width: int, image_height: int) -> PixelBox:
        """Intersect with [0, image_width) x [0, image_height)."""
        left = max(0, self.left)
        top = max(0, self.top)
        right = min(image_width, self.right)
        bottom = min(image_height, self.bottom)
        return PixelBox(left, top, max(0, right - left), max(0, bottom - top))

    def as_tuple(self) -> tuple[int, int, int, int]:
        """(left, top, right, bottom) for PIL."""
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True, slots=True)
class Region:
    """
    Normalized rectangular selection on a page.

    Attributes:
        id: Unique identifier
        x: Left edge, percent of page width
        y: Top edge, percent of page height
        w: Width, percent of page width
        h: Height, percent of page height
        prompt: Edit instruction for this region
        reference_image: Optional image the generator should use as reference

    Note:
        Coordinates are clamped to [0, 100] by `create()` only. `x + w` may
        exceed 100; consumers clamp when converting to pixels.

    Example:
        >>> r = Region.create(10, 10, 20, 10)
        >>> r.to_pixel_box(200, 100)
        PixelBox(left=20, top=10, width=40, height=10)
    """

    id: str
    x: float
    y: float
    w: float
    h: float
    prompt: str = ""
    reference_image: Optional[ImageData] = None

    @classmethod
    def create(
        cls,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        prompt: str = "",
        reference_image: Optional[ImageData] = None,
        region_id: Optional[str] = None,
    ) -> Region:
        """Build a region with clamped coordinates and a fresh id."""
        return cls(
            id=region_id or new_id(),
            x=clamp_percent(x),
            y=clamp_percent(y),
            w=clamp_percent(w),
            h=clamp_percent(h),
            prompt=prompt,
            reference_image=reference_image,
        )

    def is_degenerate(self, threshold: float = MIN_REGION_SIZE) -> bool:
        """True when both sides are below the minimum size."""
        return self.w < threshold and self.h < threshold

    def to_pixel_box(self, width: int, height: int) -> PixelBox:
        """
        Convert to pixels: origin floored, extent ceiled.

        Args:
            width: Image width in pixels
            height: Image height in pixels
        """
        return PixelBox(
            left=math.floor(self.x / 100 * width),
            top=math.floor(self.y / 100 * height),
            width=math.ceil(self.w / 100 * width),
            height=math.ceil(self.h / 100 * height),
        )

    def with_prompt(self, prompt: str) -> Region:
        return replace(self, prompt=prompt)

    def with_reference_image(self, image: Optional[ImageData]) -> Region:
        return replace(self, reference_image=image)

    def with_new_id(self) -> Region:
        return replace(self, id=new_id())
