"""
Unit Tests for DocumentStore

Tests for atomic replacement and the editor operations routed through it.
"""

import threading

import pytest

from conftest import make_document, make_page, make_version
from notemod.core.errors import CorruptWorkspaceError, LoadFailure
from notemod.core.models import Document, Region, ResolutionSetting
from notemod.editing.regions import EditMode
from notemod.output.workspace import write_workspace
from notemod.store import DocumentStore


class TestCore:
    """Tests for snapshot/replace."""

    def test_replace_when_fn_raises_then_document_unchanged(self):
        """A failing update leaves the document as it was."""
        store = DocumentStore(make_document(2))
        before = store.snapshot()

        def boom(doc):
            raise ValueError("nope")

        with pytest.raises(ValueError):
            store.replace(boom)
        assert store.snapshot() is before

    def test_replace_when_concurrent_then_no_update_lost(self):
        """Concurrent replaces are serialized."""
        page = make_page()
        store = DocumentStore(Document.from_pages("x", [page]))
        versions = [make_version(str(i)) for i in range(20)]

        def add(version):
            store.replace(lambda d: d.update_page(
                page.id, lambda p: p.evolve(versions=(version,) + p.versions)
            ))

        threads = [threading.Thread(target=add, args=(v,)) for v in versions]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(store.snapshot().pages[0].versions) == 20

    def test_reset_when_called_then_empty_annotate(self):
        store = DocumentStore(make_document(2), mode=EditMode.REMOVAL)
        store.reset()
        assert store.snapshot().is_empty
        assert store.mode is EditMode.ANNOTATE

    def test_set_settings_when_unknown_key_then_type_error(self):
        """Only document settings can be changed this way."""
        store = DocumentStore(make_document(1))
        with pytest.raises(TypeError):
            store.set_settings(pages=())
        store.set_settings(resolution=ResolutionSetting.HIGH)
        assert store.snapshot().resolution is ResolutionSetting.HIGH


class TestEditorOperations:
    """Tests for operations on the active page."""

    def test_draw_region_when_annotate_then_added_to_active_page(self):
        store = DocumentStore(make_document(3, active_index=1))
        region = Region.create(10, 10, 20, 20)
        assert store.draw_region(region) is None
        doc = store.snapshot()
        assert doc.pages[1].regions == (region,)
        assert doc.pages[0].regions == ()

    def test_draw_region_when_removal_mode_then_every_page_inpainted(self):
        """In removal mode a drawn rect runs batch removal instead."""
        store = DocumentStore(make_document(2), mode=EditMode.REMOVAL)
        outcome = store.draw_region(Region.create(10, 10, 20, 20))
        assert outcome is not None and outcome.ok
        doc = store.snapshot()
        assert all(len(p.versions) == 1 and p.regions == () for p in doc.pages)

    def test_draw_region_when_removal_mode_and_degenerate_then_ignored(self):
        store = DocumentStore(make_document(1), mode=EditMode.REMOVAL)
        before = store.snapshot()
        assert store.draw_region(Region.create(1, 1, 0.01, 0.01)) is None
        assert store.snapshot() is before

    def test_region_edits_when_active_page_then_applied(self):
        store = DocumentStore(make_document(1))
        region = Region.create(0, 0, 10, 10)
        store.draw_region(region)
        store.update_prompt(region.id, "caption")
        assert store.snapshot().pages[0].regions[0].prompt == "caption"
        store.remove_region(region.id)
        assert store.snapshot().pages[0].regions == ()

    def test_version_ops_when_active_page_then_applied(self):
        v1, v2 = make_version(), make_version()
        page = make_page(versions=(v1, v2), selected_version_id=v1.id)
        store = DocumentStore(Document.from_pages("x", [page]))
        store.select_version(v2.id)
        assert store.snapshot().pages[0].selected_version_id == v2.id
        store.delete_version(v2.id)
        assert store.snapshot().pages[0].selected_version_id == v1.id

    def test_version_ops_when_page_id_given_then_active_page_untouched(self):
        """Operations can address a page other than the active one."""
        v1 = make_version()
        other = make_page(versions=(v1,), selected_version_id=v1.id)
        store = DocumentStore(Document.from_pages("x", [make_page(), other]))
        store.select_version(None, other.id)
        doc = store.snapshot()
        assert doc.pages[1].selected_version_id is None
        assert doc.active_page_index == 0

    def test_operations_when_empty_document_then_noop(self):
        """Active-page operations on an empty document do nothing."""
        store = DocumentStore()
        before = store.snapshot()
        store.draw_region(Region.create(0, 0, 10, 10))
        store.update_prompt("x", "y")
        assert store.snapshot() is before

    def test_page_ops_when_called_then_applied(self):
        store = DocumentStore(make_document(2))
        store.insert_blank_page(1)
        assert store.snapshot().page_count == 3
        store.copy_page(0)
        assert store.snapshot().page_count == 4
        store.delete_page(3)
        store.reorder_pages(0, 2)
        store.set_active_page(0)
        assert store.snapshot().page_count == 3
        assert store.snapshot().active_page_index == 0


class TestOpen:
    """Tests for opening files."""

    def test_open_workspace_when_valid_then_installed(self, tmp_path):
        doc = make_document(2)
        path = write_workspace(doc, tmp_path / "w.nmw")
        store = DocumentStore(mode=EditMode.REMOVAL)
        store.open_workspace(path)
        assert store.snapshot() == doc
        assert store.mode is EditMode.ANNOTATE

    def test_open_workspace_when_corrupt_then_state_unchanged(self, tmp_path):
        """A failed load leaves the current document in place."""
        path = tmp_path / "bad.nmw"
        path.write_bytes(b"junk")
        store = DocumentStore(make_document(1))
        before = store.snapshot()
        with pytest.raises(CorruptWorkspaceError):
            store.open_workspace(path)
        assert store.snapshot() is before

    def test_open_pdf_when_valid_then_pages_loaded(self, tmp_path, sample_pdf_bytes):
        path = tmp_path / "in.pdf"
        path.write_bytes(sample_pdf_bytes)
        store = DocumentStore()
        store.open_pdf(path, scale=1.0)
        doc = store.snapshot()
        assert doc.name == "in.pdf"
        assert [p.size for p in doc.pages] == [(100, 200), (300, 150)]

    def test_open_pdf_when_broken_then_state_unchanged(self, tmp_path):
        path = tmp_path / "bad.pdf"
        path.write_bytes(b"%PDF-garbage")
        store = DocumentStore(make_document(1))
        before = store.snapshot()
        with pytest.raises(LoadFailure):
            store.open_pdf(path)
        assert store.snapshot() is before
