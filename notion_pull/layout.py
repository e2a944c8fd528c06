"""
Layout strategies: where a page from the outline ends up on disk.

A strategy turns an outline context (the tuple of levels above a page) plus
the page's id and title into a file path. It also remembers which markdown
files existed before the pull, so that files for pages that are gone from
Notion can be removed once the whole outline has been walked.
"""

import re
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterable, List, Tuple
from rich.console import Console

from .constants import MARKDOWN_EXTENSION
from .exceptions import ConfigurationError

console = Console()

OutlineContext = Tuple[str, ...]

# Characters that are path separators or illegal in file names on some OS
_UNSAFE_CHARACTERS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
_WINDOWS_DEVICE_NAMES = frozenset(
    ["CON", "PRN", "AUX", "NUL"]
    + [f"COM{n}" for n in range(1, 10)]
    + [f"LPT{n}" for n in range(1, 10)]
)
# Leaves room for the extension within the usual 255 byte limit
_MAX_NAME_LENGTH = 240


def path_segment(title: str) -> str:
    """
    Turn a page or level title into a single file or directory name.

    Page titles are written as-is where possible, so ``Getting Started``
    stays readable on disk. Separators and characters Windows rejects become
    ``_``, names made only of dots (``.``, ``..``) can't climb out of the
    output directory, and an empty title becomes ``untitled``.
    """
    segment = _UNSAFE_CHARACTERS.sub("_", (title or "").strip())
    if not segment:
        return "untitled"
    if not segment.strip("."):
        segment = "_" * len(segment)
    if segment.split(".")[0].upper() in _WINDOWS_DEVICE_NAMES:
        segment = f"_{segment}"
    return segment[:_MAX_NAME_LENGTH]


class LayoutStrategy(ABC):
    """Maps outline positions to paths under one root directory."""

    def __init__(self, root_directory):
        self.root = Path(root_directory).resolve()
        self._not_seen_yet = set(self._existing_files())
        # seen this pull but not publishable
        self._withdrawn = set()
        # written this pull; never removed by cleanup
        self._written = set()

    @abstractmethod
    def _existing_files(self) -> Iterable[Path]:
        """Markdown files this strategy could have written in an earlier pull."""

    @abstractmethod
    def new_level(self, context: OutlineContext, title: str) -> OutlineContext:
        """Return the context for the children of a container titled ``title``."""

    @abstractmethod
    def get_path_for_page(self, context: OutlineContext, page_id: str, title: str,
                          extension: str = MARKDOWN_EXTENSION) -> Path:
        """Return the path of a page's file. Has no side effects."""

    def _under_root(self, *segments: str) -> Path:
        path = self.root.joinpath(*segments)
        if self.root not in path.resolve().parents:
            raise ValueError(f"Page path {path} is outside {self.root}")
        return path

    def page_was_seen(self, context: OutlineContext, page_id: str, title: str) -> None:
        """Keep the page's file: it still has a place in the outline."""
        self._not_seen_yet.discard(self.get_path_for_page(context, page_id, title))

    def page_was_written(self, path: Path) -> None:
        """Record that this pull produced ``path``; cleanup will leave it alone."""
        self._written.add(path)
        self._not_seen_yet.discard(path)
        self._withdrawn.discard(path)

    def page_was_withdrawn(self, context: OutlineContext, page_id: str, title: str) -> None:
        """
        Remove the page's file during cleanup, even though the page was seen.

        Used for pages that are in the outline but not ready to publish. If
        another page writes the same path in this pull, before or after this
        call, the file is kept.
        """
        path = self.get_path_for_page(context, page_id, title)
        if path not in self._written:
            self._withdrawn.add(path)

    def stale_files(self) -> List[Path]:
        return sorted((self._not_seen_yet | self._withdrawn) - self._written)

    def cleanup_old_files(self) -> List[Path]:
        """
        Delete every file that was not seen during the pull.

        Must only be called once the whole outline has been walked.
        """
        removed = []
        for path in self.stale_files():
            if not path.exists():
                continue
            console.print(f"[yellow]Removing old doc:[/yellow] {path}")
            path.unlink()
            removed.append(path)
            self._prune_empty_parents(path)
        self._not_seen_yet.clear()
        self._withdrawn.clear()
        self._written.clear()
        return removed

    def _prune_empty_parents(self, path: Path) -> None:
        parent = path.parent
        while parent != self.root and self.root in parent.parents:
            if any(parent.iterdir()):
                break
            parent.rmdir()
            parent = parent.parent


class HierarchicalNamedLayoutStrategy(LayoutStrategy):
    """Nested directories named after the outline levels, files named after page titles.

    Example: ``docs/Getting Started/Install.md``
    """

    def _existing_files(self):
        if not self.root.is_dir():
            return []
        return (p.resolve() for p in self.root.rglob(f"*{MARKDOWN_EXTENSION}") if p.is_file())

    def new_level(self, context, title):
        return context + (path_segment(title),)

    def get_path_for_page(self, context, page_id, title, extension=MARKDOWN_EXTENSION):
        return self._under_root(*context, path_segment(title) + extension)


class FlatGuidLayoutStrategy(LayoutStrategy):
    """Every page in the root directory, named by its Notion id.

    Example: ``docs/1a2b3c4d-....md``
    """

    def _existing_files(self):
        if not self.root.is_dir():
            return []
        return (p.resolve() for p in self.root.glob(f"*{MARKDOWN_EXTENSION}") if p.is_file())

    def new_level(self, context, title):
        # Levels still show up in log messages, even though they don't affect paths
        return context + (title,)

    def get_path_for_page(self, context, page_id, title, extension=MARKDOWN_EXTENSION):
        return self._under_root(path_segment(page_id) + extension)


LAYOUT_STRATEGIES = {
    "hierarchical": HierarchicalNamedLayoutStrategy,
    "flat": FlatGuidLayoutStrategy,
}


def create_layout_strategy(name: str, root_directory) -> LayoutStrategy:
    """Build the layout strategy registered under ``name``."""
    try:
        strategy_class = LAYOUT_STRATEGIES[name]
    except KeyError:
        choices = ", ".join(sorted(LAYOUT_STRATEGIES))
        raise ConfigurationError(f"Unknown layout '{name}' (choose from: {choices})")
    return strategy_class(root_directory)
