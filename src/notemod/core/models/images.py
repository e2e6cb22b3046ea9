"""
Module: images

Purpose:
    Provides the ImageData dataclass - an encoded image payload (bytes plus
    MIME type) as stored on pages, versions and regions. Pixel work happens
    on Pillow images; the models only ever hold the encoded form so that
    equality and serialization are exact.

Key Functions:
    - ImageData.from_pil(image): Encode a Pillow image
    - ImageData.to_pil(): Decode to a Pillow image
    - ImageData.from_data_url(url): Parse a base64 data URL
    - ImageData.data_url: Render as a base64 data URL
    - blank_page(width, height): White JPEG page

Dependencies:
    - base64 (std)
    - PIL.Image

Used By:
    - core.models.regions, core.models.versions, core.models.pages
    - imaging.inpaint
    - core.utils.serialization
"""

from __future__ import annotations

import base64
import binascii
import io
from dataclasses import dataclass
from typing import Optional

from PIL import Image

# Encoding used for rasterized pages, blank pages and inpainted results
JPEG_QUALITY = 80

_FORMAT_TO_MIME = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "GIF": "image/gif",
}


@dataclass(frozen=True, slots=True)
class ImageData:
    """
    Encoded image payload.

    Attributes:
        data: Encoded image bytes (JPEG, PNG, ...)
        mime_type: MIME type of `data`, e.g. "image/jpeg"

    Invariants:
        - data is non-empty
        - mime_type starts with "image/"
    """

    data: bytes
    mime_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        if not self.data:
            raise ValueError("image data must not be empty")
        if not self.mime_type.startswith("image/"):
            raise ValueError(f"Invalid image mime type: {self.mime_type!r}")

    # ─────────────────────────────────────────────────────────────────────────
    # Pillow Conversion
    # ─────────────────────────────────────────────────────────────────────────

    @classmethod
    def from_pil(
        cls,
        image: Image.Image,
        *,
        format: str = "JPEG",
        quality: int = JPEG_QUALITY,
    ) -> ImageData:
        """
        Encode a Pillow image.

        JPEG output drops any alpha channel (flattened to RGB).

        Args:
            image: Image to encode
            format: Pillow format name (default JPEG)
            quality: JPEG quality, ignored by lossless formats

        Returns:
            ImageData holding the encoded bytes
        """
        format = format.upper()
        buf = io.BytesIO()
        if format == "JPEG":
            if image.mode != "RGB":
                image = image.convert("RGB")
            image.save(buf, format="JPEG", quality=quality)
        else:
            image.save(buf, format=format)
        mime_type = _FORMAT_TO_MIME.get(format, f"image/{format.lower()}")
        return cls(data=buf.getvalue(), mime_type=mime_type)

    def to_pil(self) -> Image.Image:
        """
        Decode to a fully loaded Pillow image.

        Raises:
            ValueError: If the bytes are not a decodable image
        """
        try:
            image = Image.open(io.BytesIO(self.data))
            image.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise ValueError(f"Cannot decode image ({self.mime_type}): {e}") from e
        return image

    @property
    def size(self) -> tuple[int, int]:
        """Pixel (width, height) of the encoded image."""
        with Image.open(io.BytesIO(self.data)) as image:
            return image.size

    # ─────────────────────────────────────────────────────────────────────────
    # Data URLs
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def data_url(self) -> str:
        """Base64 data URL, e.g. "data:image/jpeg;base64,/9j/..."."""
        payload = base64.b64encode(self.data).decode("ascii")
        return f"data:{self.mime_type};base64,{payload}"

    @property
    def base64_payload(self) -> str:
        """Bare base64 payload without the data URL prefix."""
        return base64.b64encode(self.data).decode("ascii")

    @classmethod
    def from_data_url(cls, url: str, *, default_mime: str = "image/jpeg") -> ImageData:
        """
        Parse a base64 data URL (or a bare base64 string).

        Args:
            url: "data:<mime>;base64,<payload>" or just "<payload>"
            default_mime: MIME type used when `url` carries no prefix

        Raises:
            ValueError: If the string is not valid base64 image data
        """
        mime_type = default_mime
        payload = url
        if url.startswith("data:"):
            header, sep, payload = url.partition(",")
            if not sep or ";base64" not in header:
                raise ValueError("Data URL is not base64 encoded")
            mime_type = header[len("data:"):].split(";", 1)[0] or default_mime
        try:
            data = base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ValueError(f"Invalid base64 image payload: {e}") from e
        return cls(data=data, mime_type=mime_type)

    def __repr__(self) -> str:
        return f"ImageData({self.mime_type}, {len(self.data)} bytes)"


def blank_page(width: int, height: int, *, quality: int = JPEG_QUALITY) -> ImageData:
    """
    Create a white page image.

    Args:
        width: Page width in pixels
        height: Page height in pixels
        quality: JPEG quality

    Returns:
        JPEG-encoded white image of exactly width x height
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Page size must be positive: {width}x{height}")
    image = Image.new("RGB", (width, height), color=(255, 255, 255))
    return ImageData.from_pil(image, format="JPEG", quality=quality)


def optional_image_from_data_url(url: Optional[str]) -> Optional[ImageData]:
    """Parse a data URL, mapping None/empty to None."""
    if not url:
        return None
    return ImageData.from_data_url(url)
