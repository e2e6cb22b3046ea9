"""
Gemini image client implementation.

Talks to the Gemini `generateContent` REST endpoint with httpx and
implements the BaseImageClient interface.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from notemod.core.errors import FailureKind
from notemod.core.models import ImageData, ResolutionSetting

from .client import BaseImageClient
from .models import (
    EmptyResult,
    FailureResult,
    GenerationRequest,
    GenerationResponse,
    ImagePart,
    ImageResult,
    TextPart,
)

if TYPE_CHECKING:
    from notemod.config import EditorConfig

logger = logging.getLogger(__name__)

_IMAGE_SIZES = {
    ResolutionSetting.STANDARD: "1K",
    ResolutionSetting.HIGH: "2K",
}


class GeminiImageClient(BaseImageClient):
    """
    Image client for the Gemini API.
    """

    def __init__(
        self,
        model: str,
        api_key: str,
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        **kwargs,
    ):
        """
        Initialize Gemini client.

        Args:
            model: Image model name (e.g. 'gemini-3-pro-image-preview')
            api_key: API key sent in the x-goog-api-key header
            base_url: API root (default: public v1beta endpoint)
            timeout: Request timeout in seconds (default: 300)
            transport: Optional httpx transport (tests pass a MockTransport)
            **kwargs: Additional configuration
        """
        super().__init__(model, **kwargs)
        if not api_key:
            raise ValueError("API key is missing")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"x-goog-api-key": api_key},
            transport=transport,
        )

    @classmethod
    def from_config(cls, config: EditorConfig, **kwargs) -> GeminiImageClient:
        return cls(
            model=config.model,
            api_key=config.api_key or "",
            base_url=config.base_url,
            timeout=config.request_timeout,
            **kwargs,
        )

    async def generate(
        self,
        parts: GenerationRequest,
        *,
        resolution: ResolutionSetting = ResolutionSetting.STANDARD,
    ) -> GenerationResponse:
        """
        Call the generateContent endpoint.

        Returns:
            ImageResult with the first inline image of the first candidate,
            EmptyResult when the answer carries no image, FailureResult on
            transport or HTTP errors (403 / PERMISSION_DENIED map to
            FailureKind.PERMISSION)
        """
        payload = self._build_payload(parts, resolution)
        url = f"/models/{self.model}:generateContent"

        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Gemini request failed: {e}")
            return FailureResult(FailureKind.GENERIC, f"Could not reach {self.base_url}: {e}")

        if response.status_code >= 400:
            return self._failure_from_response(response)

        try:
            body = response.json()
        except json.JSONDecodeError:
            return FailureResult(
                FailureKind.GENERIC, f"Invalid JSON response from Gemini: {response.text[:200]}"
            )
        return self._parse_body(body)

    def _build_payload(
        self,
        parts: GenerationRequest,
        resolution: ResolutionSetting,
    ) -> Dict[str, Any]:
        wire_parts = []
        for part in parts:
            if isinstance(part, TextPart):
                wire_parts.append({"text": part.text})
            elif isinstance(part, ImagePart):
                wire_parts.append({
                    "inline_data": {
                        "mime_type": part.mime_type,
                        "data": base64.b64encode(part.data).decode("ascii"),
                    }
                })
            else:
                raise TypeError(f"Unsupported request part: {part!r}")

        return {
            "contents": [{"role": "user", "parts": wire_parts}],
            "generationConfig": {
                "responseModalities": ["TEXT", "IMAGE"],
                "imageConfig": {"imageSize": _IMAGE_SIZES[resolution]},
            },
        }

    def _parse_body(self, body: Dict[str, Any]) -> GenerationResponse:
        candidates = body.get("candidates") or []
        if not candidates:
            reason = (body.get("promptFeedback") or {}).get("blockReason")
            if reason:
                return EmptyResult(f"No candidates returned (blockReason={reason})")
            return EmptyResult()

        for part in (candidates[0].get("content") or {}).get("parts") or []:
            inline = part.get("inlineData") or part.get("inline_data")
            if not inline or not inline.get("data"):
                continue
            mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
            try:
                data = base64.b64decode(inline["data"], validate=True)
                return ImageResult(ImageData(data=data, mime_type=mime_type))
            except (binascii.Error, ValueError) as e:
                return FailureResult(FailureKind.GENERIC, f"Malformed image payload: {e}")

        return EmptyResult()

    def _failure_from_response(self, response: httpx.Response) -> FailureResult:
        status = ""
        message = response.text[:500]
        try:
            error = response.json().get("error", {})
            status = error.get("status", "")
            message = error.get("message", message)
        except (json.JSONDecodeError, AttributeError):
            pass

        kind = FailureKind.GENERIC
        if response.status_code == 403 or status == "PERMISSION_DENIED":
            kind = FailureKind.PERMISSION
        logger.error(f"Gemini returned {response.status_code} {status}: {message}")
        return FailureResult(kind, f"{response.status_code} {status}: {message}".strip())

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
