"""
Unit Tests for GenerationService

The image backend is replaced by a scripted fake client.
"""

import asyncio

import pytest

from conftest import make_image, make_page
from notemod.core.errors import FailureKind, GenerationFailure, NothingToGenerateError
from notemod.core.models import Document, Region, ResolutionSetting
from notemod.editing.title_page import create_title_page, title_page_size
from notemod.generation.client import BaseImageClient
from notemod.generation.models import EmptyResult, FailureResult, ImageResult, TextPart
from notemod.generation.prompts import TitlePageData
from notemod.generation.service import GenerationService
from notemod.output.workspace import load_workspace, save_workspace
from notemod.store import DocumentStore


class FakeClient(BaseImageClient):
    """Returns queued responses; optionally runs a hook before answering."""

    def __init__(self, *responses, before_answer=None):
        super().__init__("fake")
        self.responses = list(responses)
        self.requests = []
        self.before_answer = before_answer

    async def generate(self, parts, *, resolution=ResolutionSetting.STANDARD):
        self.requests.append((parts, resolution))
        await asyncio.sleep(0)
        if self.before_answer is not None:
            self.before_answer()
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def instructed_page(prompt: str = "fix"):
    return make_page(regions=(Region.create(0, 0, 10, 10, prompt=prompt),))


def store_with(*pages) -> DocumentStore:
    return DocumentStore(Document.from_pages("x", pages))


class TestGeneratePage:
    """Tests for GenerationService.generate_page()."""

    def test_generate_when_image_then_new_selected_version(self):
        """A returned image becomes the selected version, flag cleared."""
        page = instructed_page("make it blue")
        store = store_with(page)
        result_image = make_image(40, 20, (0, 0, 255))
        service = GenerationService(store, FakeClient(ImageResult(result_image)))

        version = asyncio.run(service.generate_page(page.id))

        updated = store.snapshot().pages[0]
        assert updated.versions == (version,)
        assert updated.selected_version_id == version.id
        assert updated.active_image == result_image
        assert version.prompt_used == "make it blue"
        assert not updated.is_generating

    def test_generate_when_in_flight_then_page_flagged(self):
        """The page is marked generating while the request runs."""
        page = instructed_page()
        store = store_with(page)
        seen = []
        client = FakeClient(
            ImageResult(make_image()),
            before_answer=lambda: seen.append(store.snapshot().pages[0].is_generating),
        )
        asyncio.run(GenerationService(store, client).generate_page(page.id))
        assert seen == [True]

    def test_generate_when_settings_then_sent_with_request(self):
        """Resolution and enhance-text settings reach the client."""
        page = instructed_page()
        store = DocumentStore(Document.from_pages(
            "x", [page], resolution=ResolutionSetting.HIGH, enhance_text=True
        ))
        client = FakeClient(ImageResult(make_image()))
        asyncio.run(GenerationService(store, client).generate_page(page.id))
        parts, resolution = client.requests[0]
        assert resolution is ResolutionSetting.HIGH
        assert isinstance(parts[0], TextPart)
        assert "legibly" in parts[0].text

    def test_generate_when_permission_failure_then_raises_reauth_and_clears_flag(self):
        """Permission failures require re-authentication; history untouched."""
        page = instructed_page()
        store = store_with(page)
        client = FakeClient(FailureResult(FailureKind.PERMISSION, "403"))
        with pytest.raises(GenerationFailure) as exc:
            asyncio.run(GenerationService(store, client).generate_page(page.id))
        assert exc.value.requires_reauth
        assert exc.value.page_id == page.id
        updated = store.snapshot().pages[0]
        assert not updated.is_generating
        assert updated.versions == ()

    def test_generate_when_empty_result_then_generic_failure(self):
        """No image in the answer is a generic failure."""
        page = instructed_page()
        store = store_with(page)
        with pytest.raises(GenerationFailure) as exc:
            asyncio.run(GenerationService(store, FakeClient(EmptyResult())).generate_page(page.id))
        assert not exc.value.requires_reauth

    def test_generate_when_client_raises_then_wrapped(self):
        """Unexpected client errors surface as GenerationFailure."""
        page = instructed_page()
        store = store_with(page)
        client = FakeClient(RuntimeError("socket closed"))
        with pytest.raises(GenerationFailure, match="socket closed"):
            asyncio.run(GenerationService(store, client).generate_page(page.id))
        assert not store.snapshot().pages[0].is_generating

    def test_generate_when_no_instructions_then_raises_without_request(self):
        """Nothing is sent for a page without prompts."""
        page = make_page()
        store = store_with(page)
        client = FakeClient()
        with pytest.raises(NothingToGenerateError):
            asyncio.run(GenerationService(store, client).generate_page(page.id))
        assert client.requests == []
        assert not store.snapshot().pages[0].is_generating

    def test_generate_when_page_deleted_mid_flight_then_result_dropped(self):
        """A completion for a deleted page does not touch the document."""
        page, other = instructed_page(), make_page()
        store = store_with(page, other)
        client = FakeClient(
            ImageResult(make_image()),
            before_answer=lambda: store.delete_page(0),
        )
        result = asyncio.run(GenerationService(store, client).generate_page(page.id))
        assert result is None
        doc = store.snapshot()
        assert [p.id for p in doc.pages] == [other.id]
        assert doc.pages[0].versions == ()

    def test_generate_when_page_moved_mid_flight_then_updated_by_id(self):
        """Results follow page identity across reorders."""
        page, other = instructed_page(), make_page()
        store = store_with(page, other)
        client = FakeClient(
            ImageResult(make_image()),
            before_answer=lambda: store.reorder_pages(0, 1),
        )
        asyncio.run(GenerationService(store, client).generate_page(page.id))
        doc = store.snapshot()
        assert doc.pages[1].id == page.id
        assert len(doc.pages[1].versions) == 1
        assert doc.pages[0].versions == ()

    def test_generate_when_unknown_page_then_key_error(self):
        """Requests for missing pages fail immediately."""
        store = store_with(make_page())
        with pytest.raises(KeyError):
            asyncio.run(GenerationService(store, FakeClient()).generate_page("nope"))

    def test_generate_when_page_reloaded_mid_generation_then_generates(self):
        """A workspace saved during a request can be generated again after loading."""
        page = instructed_page().evolve(is_generating=True)
        data = save_workspace(Document.from_pages("x", [page]))
        store = DocumentStore(load_workspace(data))
        client = FakeClient(ImageResult(make_image()))

        version = asyncio.run(GenerationService(store, client).generate_page(page.id))

        assert store.snapshot().pages[0].selected_version_id == version.id


class TestGeneratePages:
    """Tests for concurrent generation."""

    def test_generate_pages_when_one_fails_then_others_succeed(self):
        """Failures are isolated per page."""
        a, b = instructed_page("a"), instructed_page("b")
        store = store_with(a, b)
        client = FakeClient(
            ImageResult(make_image()),
            FailureResult(FailureKind.GENERIC, "nope"),
        )
        results = asyncio.run(GenerationService(store, client).generate_pages([a.id, b.id]))
        doc = store.snapshot()
        assert sum(isinstance(r, GenerationFailure) for r in results.values()) == 1
        assert sum(len(p.versions) for p in doc.pages) == 1
        assert not any(p.is_generating for p in doc.pages)


class TestCreateTitlePage:
    """Tests for editing.title_page.create_title_page()."""

    def test_create_when_image_then_inserted_first_and_active(self):
        """The cover page goes first, sized like the first page."""
        first = make_page(60, 80)
        store = store_with(first, make_page(60, 80))
        cover = make_image(60, 80, (10, 20, 30))
        service = GenerationService(store, FakeClient(ImageResult(cover)))

        page = asyncio.run(create_title_page(service, TitlePageData(title="Report")))

        doc = store.snapshot()
        assert doc.page_count == 3
        assert doc.pages[0].id == page.id
        assert doc.active_page_id == page.id
        assert page.size == (60, 80)
        assert page.original_image == cover

    def test_create_when_reference_page_then_its_active_image_sent(self):
        """The 1-based reference page's active image is attached."""
        ref = make_page(color=(9, 9, 9))
        store = store_with(make_page(), ref)
        client = FakeClient(ImageResult(make_image()))
        service = GenerationService(store, client)
        asyncio.run(create_title_page(service, TitlePageData(title="T", reference_page_number=2)))
        parts, _ = client.requests[0]
        assert parts[1].data == ref.active_image.data

    def test_create_when_failure_then_document_unchanged(self):
        """A failed cover generation inserts nothing."""
        store = store_with(make_page())
        before = store.snapshot()
        service = GenerationService(store, FakeClient(EmptyResult()))
        with pytest.raises(GenerationFailure):
            asyncio.run(create_title_page(service, TitlePageData(title="T")))
        assert store.snapshot() is before

    def test_title_page_size_when_empty_then_default(self):
        """Empty documents use the default size."""
        assert title_page_size(Document.empty(), (11, 22)) == (11, 22)
