"""
Module: generation

Purpose:
    Boundary to the generative image backend: closed request/response
    types, prompt builders, the abstract client, the Gemini client and the
    async service that applies results to the live document.

Key Functions:
    - build_page_edit_request(), build_title_page_request()

Key Classes:
    - GenerationService: Page generation over a DocumentStore
    - BaseImageClient / GeminiImageClient
"""

from .models import (
    EmptyResult,
    FailureResult,
    GenerationRequest,
    GenerationResponse,
    ImagePart,
    ImageResult,
    TextPart,
)
from .prompts import TitlePageData, build_page_edit_request, build_title_page_request
from .client import BaseImageClient
from .gemini_client import GeminiImageClient
from .service import GenerationService

__all__ = [
    "EmptyResult",
    "FailureResult",
    "GenerationRequest",
    "GenerationResponse",
    "ImagePart",
    "ImageResult",
    "TextPart",
    "TitlePageData",
    "build_page_edit_request",
    "build_title_page_request",
    "BaseImageClient",
    "GeminiImageClient",
    "GenerationService",
]
