"""
Module: generation.service

Purpose:
    Run AI page edits against the live document. A request is built from a
    snapshot, the page is flagged as generating, and when the response
    arrives only that page (looked up by id, not by index) is updated. A
    page deleted while its request was in flight makes the update a no-op.

Key Classes:
    - GenerationService: Async orchestration over a DocumentStore

Dependencies:
    - asyncio (std): Concurrent requests for several pages
    - generation.client: BaseImageClient
    - generation.prompts: Request building
    - editing.history: Generation state machine

Used By:
    - editing.title_page
    - cli
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Dict, Iterable, Optional, Union

from notemod.core.errors import FailureKind, GenerationFailure
from notemod.core.models import GeneratedImage, ImageData, ResolutionSetting
from notemod.editing import history
from notemod.store import DocumentStore

from .client import BaseImageClient
from .models import EmptyResult, FailureResult, GenerationRequest, ImageResult
from .prompts import build_page_edit_request, summarize_prompts

logger = logging.getLogger(__name__)


class GenerationService:
    """
    Sends page edit requests and records results as new versions.

    Per-page failures are isolated: a failing page only has its generating
    flag cleared; other pages' requests and results are unaffected.
    Failures are never retried automatically.
    """

    def __init__(self, store: DocumentStore, client: BaseImageClient):
        self.store = store
        self.client = client

    async def request_image(
        self,
        parts: GenerationRequest,
        *,
        resolution: ResolutionSetting = ResolutionSetting.STANDARD,
        page_id: Optional[str] = None,
    ) -> ImageData:
        """
        Send one request and unwrap the response.

        Raises:
            GenerationFailure: On EmptyResult, FailureResult or a client error
        """
        try:
            response = await self.client.generate(parts, resolution=resolution)
        except Exception as e:
            raise GenerationFailure(f"Generation request failed: {e}", page_id=page_id) from e

        if isinstance(response, ImageResult):
            return response.image
        if isinstance(response, FailureResult):
            raise GenerationFailure(response.message, kind=response.kind, page_id=page_id)
        if isinstance(response, EmptyResult):
            raise GenerationFailure(response.reason, kind=FailureKind.GENERIC, page_id=page_id)
        raise GenerationFailure(f"Unexpected response: {response!r}", page_id=page_id)

    async def generate_page(self, page_id: str) -> Optional[GeneratedImage]:
        """
        Generate a new version of one page from its regions.

        Args:
            page_id: Stable id of the page to edit

        Returns:
            The new version, or None when the page was deleted before the
            response arrived

        Raises:
            KeyError: If the page does not exist when the request starts
            NothingToGenerateError: If no region has an instruction
            ValueError: If the page is already generating
            GenerationFailure: If the service returned no image
        """
        document = self.store.snapshot()
        page = document.find_page(page_id)
        if page is None:
            raise KeyError(page_id)

        parts = build_page_edit_request(page, enhance_text=document.enhance_text)
        prompt_used = summarize_prompts(page)

        self.store.replace(lambda d: history.begin_generation_on_page(d, page_id))
        logger.info(f"Generating page {page_id} ({len(page.regions)} regions)")
        start = time.perf_counter()

        try:
            image = await self.request_image(
                parts, resolution=document.resolution, page_id=page_id
            )
        except GenerationFailure as e:
            self.store.replace(lambda d: history.fail_generation_on_page(d, page_id))
            if e.requires_reauth:
                logger.error(f"Permission denied generating page {page_id}: {e}")
            else:
                logger.error(f"Error generating page {page_id}: {e}")
            raise

        version = GeneratedImage.create(image, prompt_used)
        updated = self.store.replace(
            lambda d: history.complete_generation_on_page(d, page_id, version)
        )
        elapsed = time.perf_counter() - start
        if updated.find_page(page_id) is None:
            logger.warning(f"Page {page_id} was deleted during generation, result dropped")
            return None

        logger.info(f"Generated version {version.id} for page {page_id} in {elapsed:.1f}s")
        return version

    async def generate_active_page(self) -> Optional[GeneratedImage]:
        """Generate the page currently being viewed."""
        page = self.store.snapshot().active_page
        if page is None:
            raise KeyError("Document has no pages")
        return await self.generate_page(page.id)

    async def generate_pages(
        self,
        page_ids: Iterable[str],
    ) -> Dict[str, Union[Optional[GeneratedImage], BaseException]]:
        """
        Generate several pages concurrently.

        Returns:
            Page id -> new version (or None) on success, or the exception
            raised for that page
        """
        ids = list(page_ids)
        results = await asyncio.gather(
            *(self.generate_page(page_id) for page_id in ids),
            return_exceptions=True,
        )
        return dict(zip(ids, results))
