"""
Module: imaging.inpaint

Purpose:
    Border-sampling inpaint used for watermark removal. Fills a region with
    the average colour of the one-pixel strip surrounding it.

Key Functions:
    - inpaint(): ImageData in, ImageData out (JPEG, same size)
    - inpaint_image(): Same algorithm on a Pillow image
    - border_fill_color(): Average colour around a pixel box

Dependencies:
    - numpy: Pixel sampling and fill
    - PIL: Decode/encode
    - core.models: ImageData, Region, PixelBox

Used By:
    - editing.removal: Batch watermark removal
"""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from PIL import Image

from notemod.core.models.images import ImageData, JPEG_QUALITY
from notemod.core.models.regions import PixelBox, Region

logger = logging.getLogger(__name__)

WHITE = (255, 255, 255)

RGB = Tuple[int, int, int]


def inpaint(image: ImageData, rect: Region, *, quality: int = JPEG_QUALITY) -> ImageData:
    """
    Fill a normalized rect with the average colour of its border.

    Args:
        image: Source image (any format Pillow decodes)
        rect: Region in percent of the image size
        quality: JPEG quality for the re-encoded result

    Returns:
        JPEG ImageData with exactly the source dimensions

    Raises:
        ValueError: If the source image cannot be decoded

    Example:
        >>> result = inpaint(page.active_image, Region.create(10, 10, 20, 10))
        >>> result.size == page.active_image.size
        True
    """
    source = image.to_pil()
    filled = inpaint_image(source, rect)
    return ImageData.from_pil(filled, format="JPEG", quality=quality)


def inpaint_image(image: Image.Image, rect: Region) -> Image.Image:
    """
    Pillow-level inpaint. Returns a new RGB image; alpha is discarded.

    Args:
        image: Source image
        rect: Region in percent of the image size
    """
    rgb = image.convert("RGB")
    width, height = rgb.size
    box = rect.to_pixel_box(width, height).clamp_to(width, height)

    pixels = np.array(rgb, dtype=np.uint8)
    color = border_fill_color(pixels, box)

    if not box.is_empty:
        pixels[box.top:box.bottom, box.left:box.right] = color

    logger.debug(f"Inpainted {box} of {width}x{height} with rgb{color}")
    return Image.fromarray(pixels)


def border_fill_color(pixels: np.ndarray, box: PixelBox) -> RGB:
    """
    Average RGB of the one-pixel strip just outside `box`.

    Samples the row above and the row below across the box's width, and the
    column left and the column right across its height. Strips that fall
    outside the image are skipped. With no samples at all the result is
    white.

    Args:
        pixels: HxWx3 uint8 array
        box: Clamped pixel box

    Returns:
        (r, g, b) rounded half up
    """
    height, width = pixels.shape[:2]
    strips = []

    if box.width > 0:
        if box.top - 1 >= 0:
            strips.append(pixels[box.top - 1, box.left:box.right])
        if box.bottom < height:
            strips.append(pixels[box.bottom, box.left:box.right])
    if box.height > 0:
        if box.left - 1 >= 0:
            strips.append(pixels[box.top:box.bottom, box.left - 1])
        if box.right < width:
            strips.append(pixels[box.top:box.bottom, box.right])

    samples = [s.reshape(-1, 3) for s in strips if s.size]
    if not samples:
        return WHITE

    stacked = np.concatenate(samples).astype(np.int64)
    count = stacked.shape[0]
    totals = stacked.sum(axis=0)
    # Integer round-half-up of totals / count
    r, g, b = ((2 * totals + count) // (2 * count)).tolist()
    return (int(r), int(g), int(b))
