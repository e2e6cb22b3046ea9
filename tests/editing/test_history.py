"""
Unit Tests for Version History

Tests for selecting, appending and deleting versions and for the
generation state machine.
"""

import pytest

from conftest import make_document, make_page, make_version
from notemod.editing.history import (
    append_version,
    begin_generation,
    complete_generation,
    complete_generation_on_page,
    delete_version,
    fail_generation,
    select_version,
)


class TestSelectAndAppend:
    """Tests for select_version() and append_version()."""

    def test_append_when_called_then_prepended_and_selected(self):
        """New versions go first and become the shown image."""
        v1, v2 = make_version("a"), make_version("b")
        page = append_version(append_version(make_page(), v1), v2)
        assert [v.id for v in page.versions] == [v2.id, v1.id]
        assert page.selected_version_id == v2.id

    def test_append_when_called_then_dimensions_unchanged(self):
        """Page size is fixed across versions."""
        page = make_page(40, 20)
        updated = append_version(page, make_version(width=80, height=40))
        assert updated.size == (40, 20)

    def test_select_when_none_then_original_shown(self):
        """Selecting None shows the original image."""
        v = make_version()
        page = append_version(make_page(), v)
        assert select_version(page, None).active_image == page.original_image

    def test_select_when_unknown_id_then_raises(self):
        """Unknown version ids are rejected."""
        with pytest.raises(ValueError, match="does not exist"):
            select_version(make_page(), "missing")


class TestDeleteVersion:
    """Tests for delete_version()."""

    def test_delete_when_selected_repeatedly_then_falls_back_to_newest_then_original(self):
        """Deleting v1 selects v2; deleting down to empty shows the original."""
        v1, v2, v3 = make_version("1"), make_version("2"), make_version("3")
        page = make_page(versions=(v1, v2, v3), selected_version_id=v1.id)

        page = delete_version(page, v1.id)
        assert page.selected_version_id == v2.id

        page = delete_version(page, v2.id)
        assert page.selected_version_id == v3.id

        page = delete_version(page, v3.id)
        assert page.versions == ()
        assert page.selected_version_id is None

    def test_delete_when_not_selected_then_selection_kept(self):
        """Deleting another version leaves the selection alone."""
        v1, v2 = make_version(), make_version()
        page = make_page(versions=(v1, v2), selected_version_id=v1.id)
        assert delete_version(page, v2.id).selected_version_id == v1.id

    def test_delete_when_unknown_id_then_page_unchanged(self):
        """Unknown ids are ignored."""
        page = make_page(versions=(make_version(),))
        assert delete_version(page, "missing") is page


class TestGenerationState:
    """Tests for the per-page generation state machine."""

    def test_begin_when_idle_then_generating(self):
        """Idle -> Generating."""
        assert begin_generation(make_page()).is_generating

    def test_begin_when_already_generating_then_raises(self):
        """A page runs at most one request at a time."""
        with pytest.raises(ValueError, match="already generating"):
            begin_generation(make_page(is_generating=True))

    def test_complete_when_generating_then_idle_with_new_selected_version(self):
        """Completion appends and selects the result."""
        v = make_version()
        page = complete_generation(begin_generation(make_page()), v)
        assert not page.is_generating
        assert page.selected_version_id == v.id

    def test_fail_when_generating_then_idle_history_untouched(self):
        """Failure only clears the flag."""
        v = make_version()
        page = make_page(versions=(v,), selected_version_id=v.id, is_generating=True)
        failed = fail_generation(page)
        assert not failed.is_generating
        assert failed.versions == page.versions
        assert failed.selected_version_id == v.id

    def test_complete_on_page_when_page_deleted_then_noop(self):
        """Results for a page that no longer exists are dropped."""
        doc = make_document(2)
        assert complete_generation_on_page(doc, "gone", make_version()) is doc
