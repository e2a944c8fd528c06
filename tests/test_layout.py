"""Tests for the layout strategies."""

import pytest

from notion_pull.exceptions import ConfigurationError
from notion_pull.layout import (
    FlatGuidLayoutStrategy,
    HierarchicalNamedLayoutStrategy,
    create_layout_strategy,
    path_segment,
)


@pytest.fixture
def root(tmp_path):
    path = tmp_path / "docs"
    path.mkdir()
    return path.resolve()


class TestHierarchicalNamedLayout:
    """Tests for nested, title-named output."""

    def test_path_follows_outline_levels(self, root):
        layout = HierarchicalNamedLayoutStrategy(root)
        context = layout.new_level(layout.new_level((), "Guides"), "Setup")

        assert layout.get_path_for_page(context, "id-1", "Install") == root / "Guides" / "Setup" / "Install.md"

    def test_new_level_does_not_change_the_parent_context(self, root):
        layout = HierarchicalNamedLayoutStrategy(root)
        parent = ("Guides",)

        child = layout.new_level(parent, "Setup")

        assert parent == ("Guides",)
        assert child == ("Guides", "Setup")

    def test_titles_are_sanitised(self, root):
        """Slashes and dot segments can't escape the output directory."""
        layout = HierarchicalNamedLayoutStrategy(root)
        context = layout.new_level((), "..")

        path = layout.get_path_for_page(context, "id", "Input/Output: basics")

        assert path == root / "__" / "Input_Output_ basics.md"

    def test_page_paths_never_leave_the_root(self, root):
        layout = HierarchicalNamedLayoutStrategy(root)

        path = layout.get_path_for_page(layout.new_level((), "a/../../b"), "id", "..")

        assert path == root / "a_.._.._b" / "__.md"
        assert root in path.resolve().parents

    def test_path_computation_has_no_side_effects(self, root):
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.get_path_for_page(("A",), "id", "Page")

        assert list(root.iterdir()) == []

    def test_cleanup_removes_unseen_files_and_empty_directories(self, root):
        (root / "Old").mkdir()
        (root / "Old" / "Gone.md").write_text("old")
        (root / "Kept").mkdir()
        (root / "Kept" / "Page.md").write_text("kept")
        (root / "notes.txt").write_text("not markdown")
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.page_was_seen(("Kept",), "id", "Page")
        removed = layout.cleanup_old_files()

        assert removed == [root / "Old" / "Gone.md"]
        assert not (root / "Old").exists()
        assert (root / "Kept" / "Page.md").exists()
        assert (root / "notes.txt").exists()
        assert root.exists()

    def test_cleanup_with_everything_seen_removes_nothing(self, root):
        (root / "A.md").write_text("a")
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.page_was_seen((), "id", "A")

        assert layout.cleanup_old_files() == []

    def test_withdrawn_page_is_removed_during_cleanup(self, root):
        """A page that is seen but not published loses its old file."""
        (root / "Draft.md").write_text("published earlier")
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.page_was_seen((), "id", "Draft")
        layout.page_was_withdrawn((), "id", "Draft")
        assert (root / "Draft.md").exists()

        assert layout.cleanup_old_files() == [root / "Draft.md"]

    def test_withdrawal_is_cancelled_by_a_later_write(self, root):
        (root / "Same.md").write_text("x")
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.page_was_seen((), "id-1", "Same")
        layout.page_was_withdrawn((), "id-1", "Same")
        layout.page_was_written(layout.get_path_for_page((), "id-2", "Same"))

        assert layout.cleanup_old_files() == []
        assert (root / "Same.md").exists()

    def test_withdrawal_does_not_remove_a_path_written_earlier(self, root):
        """A draft sharing a path with a page published earlier in the pull keeps the file."""
        layout = HierarchicalNamedLayoutStrategy(root)
        path = layout.get_path_for_page(("Docs",), "id-1", "FAQ")
        path.parent.mkdir()
        path.write_text("published")

        layout.page_was_seen(("Docs",), "id-1", "FAQ")
        layout.page_was_written(path)
        layout.page_was_seen(("Docs",), "id-2", "FAQ")
        layout.page_was_withdrawn(("Docs",), "id-2", "FAQ")

        assert layout.stale_files() == []
        assert layout.cleanup_old_files() == []
        assert path.exists()

    def test_seeing_a_draft_again_keeps_it_withdrawn(self, root):
        (root / "Draft.md").write_text("x")
        layout = HierarchicalNamedLayoutStrategy(root)

        layout.page_was_withdrawn((), "id-1", "Draft")
        layout.page_was_seen((), "id-2", "Draft")

        assert layout.cleanup_old_files() == [root / "Draft.md"]


class TestFlatGuidLayout:
    """Tests for flat, id-named output."""

    def test_path_ignores_outline_levels(self, root):
        layout = FlatGuidLayoutStrategy(root)
        context = layout.new_level(layout.new_level((), "Guides"), "Setup")

        assert layout.get_path_for_page(context, "abc123", "Install") == root / "abc123.md"

    def test_written_paths_are_never_stale(self, root):
        (root / "abc.md").write_text("old")
        layout = FlatGuidLayoutStrategy(root)

        layout.page_was_written(layout.get_path_for_page((), "abc", "Whatever"))

        assert layout.stale_files() == []

    def test_only_top_level_files_are_tracked(self, root):
        (root / "old-id.md").write_text("old")
        (root / "sub").mkdir()
        (root / "sub" / "other.md").write_text("not ours")
        layout = FlatGuidLayoutStrategy(root)

        assert layout.cleanup_old_files() == [root / "old-id.md"]
        assert (root / "sub" / "other.md").exists()


class TestCreateLayoutStrategy:
    def test_known_names(self, root):
        assert isinstance(create_layout_strategy("hierarchical", root), HierarchicalNamedLayoutStrategy)
        assert isinstance(create_layout_strategy("flat", root), FlatGuidLayoutStrategy)

    def test_unknown_name(self, root):
        with pytest.raises(ConfigurationError, match="Unknown layout"):
            create_layout_strategy("nested", root)

    def test_missing_root_directory(self, tmp_path):
        """A root that doesn't exist yet has nothing to clean up."""
        layout = create_layout_strategy("hierarchical", tmp_path / "not-yet")

        assert layout.cleanup_old_files() == []


class TestPathSegment:
    """Tests for turning titles into file and directory names."""

    def test_readable_titles_are_kept(self):
        assert path_segment("Getting Started") == "Getting Started"
        assert path_segment("  Padded  ") == "Padded"
        assert path_segment(".hidden") == ".hidden"

    def test_separators_and_reserved_characters(self):
        assert path_segment("What is a/b?") == "What is a_b_"
        assert path_segment('C:\\temp <"x"> | y*') == "C__temp __x__ _ y_"

    def test_dot_only_names(self):
        assert path_segment(".") == "_"
        assert path_segment("..") == "__"

    def test_windows_device_names(self):
        assert path_segment("CON") == "_CON"
        assert path_segment("com1.notes") == "_com1.notes"
        assert path_segment("Console") == "Console"

    def test_empty_titles(self):
        assert path_segment("") == "untitled"
        assert path_segment("   ") == "untitled"
        assert path_segment(None) == "untitled"

    def test_length_leaves_room_for_the_extension(self):
        assert len(path_segment("x" * 300) + ".md") <= 255
