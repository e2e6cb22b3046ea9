"""
Unit Tests for the PDF Rasterizer
"""

from pathlib import Path

import pytest

from notemod.core.errors import LoadFailure
from notemod.loading.rasterizer import document_from_pdf, rasterize_pdf


class TestRasterizePdf:
    """Tests for rasterize_pdf()."""

    def test_rasterize_when_scale_two_then_double_point_size(self, sample_pdf_bytes):
        """Pages render at 2x their point size."""
        pages = rasterize_pdf(sample_pdf_bytes)
        assert [(p.width, p.height) for p in pages] == [(200, 400), (600, 300)]

    def test_rasterize_when_rendered_then_image_matches_size_and_is_jpeg(self, sample_pdf_bytes):
        """The encoded image has exactly the page dimensions."""
        page = rasterize_pdf(sample_pdf_bytes, scale=1.0)[1]
        assert page.image.mime_type == "image/jpeg"
        assert page.image.size == (page.width, page.height) == (300, 150)

    def test_rasterize_when_garbage_then_load_failure(self):
        """Unreadable input produces no pages."""
        with pytest.raises(LoadFailure):
            rasterize_pdf(b"not a pdf at all")

    def test_rasterize_when_empty_then_load_failure(self):
        with pytest.raises(LoadFailure, match="empty"):
            rasterize_pdf(b"")

    def test_rasterize_when_page_fails_then_no_partial_result(self, sample_pdf_bytes, monkeypatch):
        """Any page failure fails the whole load."""
        from notemod.loading import rasterizer

        calls = []

        def flaky(page, matrix, quality):
            calls.append(page.number)
            if page.number == 1:
                raise RuntimeError("render error")
            return original(page, matrix, quality)

        original = rasterizer._render_page
        monkeypatch.setattr(rasterizer, "_render_page", flaky)
        with pytest.raises(LoadFailure, match="page 2"):
            rasterize_pdf(sample_pdf_bytes)
        assert calls == [0, 1]


class TestDocumentFromPdf:
    """Tests for document_from_pdf()."""

    def test_from_path_when_loaded_then_named_after_file(self, tmp_path: Path, sample_pdf_bytes):
        """Path sources are named after the file; the first page is active."""
        path = tmp_path / "lecture.pdf"
        path.write_bytes(sample_pdf_bytes)
        doc = document_from_pdf(path)
        assert doc.name == "lecture.pdf"
        assert doc.page_count == 2
        assert doc.active_page_index == 0
        assert all(p.versions == () and p.regions == () for p in doc.pages)

    def test_from_bytes_when_loaded_then_uses_given_name(self, sample_pdf_bytes):
        doc = document_from_pdf(sample_pdf_bytes, "given.pdf")
        assert doc.name == "given.pdf"

    def test_from_path_when_missing_then_load_failure(self, tmp_path: Path):
        with pytest.raises(LoadFailure):
            document_from_pdf(tmp_path / "missing.pdf")
