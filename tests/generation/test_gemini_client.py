"""
Unit Tests for GeminiImageClient

HTTP is faked with httpx.MockTransport.
"""

import asyncio
import base64
import json

import httpx
import pytest

from conftest import make_image
from notemod.config import EditorConfig
from notemod.core.errors import FailureKind
from notemod.core.models import ResolutionSetting
from notemod.generation.gemini_client import GeminiImageClient
from notemod.generation.models import EmptyResult, FailureResult, ImagePart, ImageResult, TextPart


def run_generate(handler, parts=None, resolution=ResolutionSetting.STANDARD):
    """Run one generate() call against a mock handler."""
    async def go():
        client = GeminiImageClient(
            model="test-model",
            api_key="secret",
            base_url="https://example.test/v1beta",
            transport=httpx.MockTransport(handler),
        )
        async with client:
            return await client.generate(parts or (TextPart("hi"),), resolution=resolution)
    return asyncio.run(go())


def image_body(data: bytes, mime: str = "image/png") -> dict:
    return {
        "candidates": [{
            "content": {"parts": [
                {"text": "Here you go"},
                {"inlineData": {"mimeType": mime, "data": base64.b64encode(data).decode()}},
            ]}
        }]
    }


class TestGeminiImageClient:
    """Tests for request building and response parsing."""

    def test_init_when_no_api_key_then_raises(self):
        """A key is required."""
        with pytest.raises(ValueError, match="API key"):
            GeminiImageClient(model="m", api_key="")

    def test_generate_when_called_then_posts_parts_and_settings(self):
        """The request carries the key, parts in order and the image size."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["key"] = request.headers["x-goog-api-key"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=image_body(b"png"))

        image = make_image(4, 4)
        run_generate(handler, (TextPart("edit"), ImagePart.from_image(image)), ResolutionSetting.HIGH)

        assert seen["url"] == "https://example.test/v1beta/models/test-model:generateContent"
        assert seen["key"] == "secret"
        wire = seen["body"]["contents"][0]["parts"]
        assert wire[0] == {"text": "edit"}
        assert wire[1]["inline_data"]["mime_type"] == "image/png"
        assert base64.b64decode(wire[1]["inline_data"]["data"]) == image.data
        assert seen["body"]["generationConfig"]["imageConfig"]["imageSize"] == "2K"

    def test_generate_when_image_returned_then_image_result(self):
        """The first inline image becomes an ImageResult."""
        result = run_generate(lambda r: httpx.Response(200, json=image_body(b"\x89PNG")))
        assert isinstance(result, ImageResult)
        assert result.image.data == b"\x89PNG"
        assert result.image.mime_type == "image/png"

    def test_generate_when_text_only_then_empty_result(self):
        """Answers without an image are EmptyResult."""
        body = {"candidates": [{"content": {"parts": [{"text": "no"}]}}]}
        assert isinstance(run_generate(lambda r: httpx.Response(200, json=body)), EmptyResult)

    def test_generate_when_blocked_then_empty_result_with_reason(self):
        """Blocked prompts report their block reason."""
        body = {"promptFeedback": {"blockReason": "SAFETY"}}
        result = run_generate(lambda r: httpx.Response(200, json=body))
        assert isinstance(result, EmptyResult)
        assert "SAFETY" in result.reason

    def test_generate_when_403_then_permission_failure(self):
        """Permission errors are flagged for re-authentication."""
        body = {"error": {"status": "PERMISSION_DENIED", "message": "Billing required"}}
        result = run_generate(lambda r: httpx.Response(403, json=body))
        assert isinstance(result, FailureResult)
        assert result.kind is FailureKind.PERMISSION
        assert "Billing required" in result.message

    def test_generate_when_500_then_generic_failure(self):
        """Other HTTP errors are generic failures."""
        result = run_generate(lambda r: httpx.Response(500, text="boom"))
        assert isinstance(result, FailureResult)
        assert result.kind is FailureKind.GENERIC

    def test_generate_when_transport_error_then_generic_failure(self):
        """Connection errors do not raise."""
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        result = run_generate(handler)
        assert isinstance(result, FailureResult)
        assert result.kind is FailureKind.GENERIC

    def test_from_config_when_called_then_uses_settings(self):
        """Model and endpoint come from the config."""
        config = EditorConfig(api_key="k", model="m2", base_url="https://x.test/api/")
        client = GeminiImageClient.from_config(config)
        try:
            assert client.model == "m2"
            assert client.base_url == "https://x.test/api"
        finally:
            asyncio.run(client.close())
