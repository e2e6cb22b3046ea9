"""
Base abstract class for image generation clients.

This defines the interface that every generation backend implements. The
service layer only depends on this class, so tests substitute an in-memory
fake and alternative backends can be added without touching the editor.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from notemod.core.models import ResolutionSetting

from .models import GenerationRequest, GenerationResponse


class BaseImageClient(ABC):
    """
    Abstract base class for image generation clients.

    Implementations never raise for service-side failures; they return a
    FailureResult or EmptyResult so callers handle every outcome through the
    same closed set of response types.
    """

    def __init__(self, model: str, **kwargs):
        """
        Initialize the client.

        Args:
            model: Model name/identifier
            **kwargs: Additional provider-specific configuration
        """
        self.model = model
        self.config = kwargs

    @abstractmethod
    async def generate(
        self,
        parts: GenerationRequest,
        *,
        resolution: ResolutionSetting = ResolutionSetting.STANDARD,
    ) -> GenerationResponse:
        """
        Send one generation request.

        Args:
            parts: Text instruction followed by image parts
            resolution: Requested output resolution

        Returns:
            ImageResult, EmptyResult or FailureResult
        """

    async def close(self) -> None:
        """Release network resources. Default: nothing to release."""

    async def __aenter__(self) -> BaseImageClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
