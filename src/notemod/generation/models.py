"""
Module: generation.models

Purpose:
    Closed request and response variants for the image generation service.

    A request is an ordered tuple of parts: one TextPart instruction, the
    main page ImagePart, then zero or more reference ImageParts. A response
    is exactly one of ImageResult, EmptyResult or FailureResult.

Dependencies:
    - dataclasses (std)
    - core.models.ImageData
    - core.errors.FailureKind

Used By:
    - generation.prompts: Builds requests
    - generation.client / gemini_client: Sends requests
    - generation.service: Interprets responses
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union

from notemod.core.errors import FailureKind
from notemod.core.models import ImageData


@dataclass(frozen=True, slots=True)
class TextPart:
    text: str


@dataclass(frozen=True, slots=True)
class ImagePart:
    data: bytes
    mime_type: str = "image/jpeg"

    @classmethod
    def from_image(cls, image: ImageData) -> ImagePart:
        return cls(data=image.data, mime_type=image.mime_type)


RequestPart = Union[TextPart, ImagePart]
GenerationRequest = Tuple[RequestPart, ...]


@dataclass(frozen=True, slots=True)
class ImageResult:
    """The service returned an image."""

    image: ImageData


@dataclass(frozen=True, slots=True)
class EmptyResult:
    """The service answered but produced no image."""

    reason: str = "No image generated in response"


@dataclass(frozen=True, slots=True)
class FailureResult:
    """The request failed."""

    kind: FailureKind
    message: str


GenerationResponse = Union[ImageResult, EmptyResult, FailureResult]
