"""
Recursive walk of the Notion outline.

The outline is a tree of ordinary Notion pages. A page with sub-pages or
links to other pages is a container and becomes a level (a directory, in the
hierarchical layout). Links point at pages that live in a database: the
database gives them metadata and a publishing workflow, while the link gives
them a place in the navigation order. An ordinary page with no sub-pages or
links is written out as it is.
"""

import json
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.markup import escape

from .constants import (
    NAME_PROPERTY,
    OUTLINE_CHILD_TYPES,
    OUTLINE_TITLE,
    PUBLISH_STATUS,
    SLUG_PROPERTY,
    STATUS_PROPERTY,
)
from .markdown_converter import MarkdownConverter
from .properties import get_page_title, get_plain_text_property, get_select_property

console = Console()


class NodeKind(Enum):
    OUTLINE_CONTAINER = "outline_container"
    DATABASE_PAGE = "database_page"
    PLAIN_CONTENT_PAGE = "plain_content_page"


def is_outline_child(block: dict) -> bool:
    return block.get("type") in OUTLINE_CHILD_TYPES


def classify_node(page: dict, children: List[dict], reached_via_link: bool = False) -> Optional[NodeKind]:
    """
    Decide what a page is from its properties, its children and how we got to it.

    Returns None for pages that can't be placed in the outline: anything
    without a properties record or with an empty title.
    """
    if "properties" not in page or not get_page_title(page):
        return None
    if any(is_outline_child(child) for child in children):
        return NodeKind.OUTLINE_CONTAINER
    if reached_via_link:
        return NodeKind.DATABASE_PAGE
    return NodeKind.PLAIN_CONTENT_PAGE


# Plain scalars that YAML reads back as the same string
_PLAIN_SCALAR = re.compile(r"^[A-Za-z][A-Za-z0-9_ ./()'-]*$")
_YAML_KEYWORDS = {"true", "false", "yes", "no", "on", "off", "null"}


def front_matter_value(value) -> str:
    """Render a front matter value, double-quoting strings YAML would misread."""
    if not isinstance(value, str):
        return str(value)
    if _PLAIN_SCALAR.match(value) and not value.endswith(" ") and value.lower() not in _YAML_KEYWORDS:
        return value
    # a JSON string is also a valid YAML double-quoted scalar
    return json.dumps(value, ensure_ascii=False)


def render_document(front_matter: dict, body: str) -> str:
    lines = ["---"]
    lines.extend(f"{key}: {front_matter_value(value)}" for key, value in front_matter.items())
    lines.append("---")
    return "\n".join(lines) + "\n\n" + body


class PageTreeWalker:
    """Walks the outline depth-first and writes one markdown file per page."""

    def __init__(self, downloader, layout, images, converter=None):
        self.downloader = downloader
        self.layout = layout
        self.images = images
        self.converter = converter or MarkdownConverter()
        # Docusaurus-style ordering hint, in the order pages are visited
        self.sidebar_position = 0
        self.pages_written: List[Path] = []
        self.pages_skipped: List[str] = []
        self.pages_changed: List[Path] = []

    def walk(self, root_page_id: str) -> None:
        self.visit((), root_page_id, hide_this_level=True)

    def visit(self, context, page_id, hide_this_level=False, reached_via_link=False):
        """Classify one page and handle it according to its kind."""
        page = self.downloader.get_page_metadata(page_id)
        blocks = self.downloader.get_block_children(page_id)
        kind = classify_node(page, blocks, reached_via_link)
        if kind is None:
            console.print(f"[dim]Skipping {page_id}: no title[/dim]")
            return

        title = get_page_title(page)

        if kind is NodeKind.OUTLINE_CONTAINER:
            console.print(f"Reading Outline Page [bold blue]{_label(context, title)}[/bold blue]")
            self._visit_container(context, title, blocks, hide_this_level)
        elif kind is NodeKind.DATABASE_PAGE:
            self._write_database_page(context, page_id, page, blocks)
        elif kind is NodeKind.PLAIN_CONTENT_PAGE:
            self._write_content_page(context, page_id, title, blocks)

    def _visit_container(self, context, title, blocks, hide_this_level):
        if not hide_this_level and title != OUTLINE_TITLE:
            context = self.layout.new_level(context, title)

        for block in blocks:
            block_type = block.get("type")
            if block_type == "child_page":
                self.visit(context, block["id"])
            elif block_type == "link_to_page" and "page_id" in block["link_to_page"]:
                self.visit(context, block["link_to_page"]["page_id"], reached_via_link=True)
            # anything else in an outline page is ignored

    def _write_database_page(self, context, page_id, page, blocks):
        self.images.process_blocks(blocks)
        self.sidebar_position += 1

        title = get_plain_text_property(page, NAME_PROPERTY) or get_page_title(page) or "missing title"
        slug = get_plain_text_property(page, SLUG_PROPERTY)
        status = get_select_property(page, STATUS_PROPERTY) or ""

        console.print(f"Reading Database Page [bold green]{_label(context, title)}[/bold green]")

        if not status:
            console.print(
                f'[bold yellow]Warning:[/bold yellow] The page "{escape(title)}" was missing a '
                f"{STATUS_PROPERTY} property. It will not be published."
            )

        path = self.layout.get_path_for_page(context, page_id, title)
        self.layout.page_was_seen(context, page_id, title)

        if status == PUBLISH_STATUS:
            front_matter = {
                "title": title,
                "sidebar_position": self.sidebar_position,
                "slug": slug or page_id,
            }
            self._write(path, front_matter, blocks)
        else:
            console.print(f'[dim]Skipping {escape(title)} because its status is "{status}"[/dim]')
            self.pages_skipped.append(title)
            self.layout.page_was_withdrawn(context, page_id, title)

    def _write_content_page(self, context, page_id, title, blocks):
        console.print(f"Reading Raw Content Page [bold blue]{_label(context, title)}[/bold blue]")

        self.images.process_blocks(blocks)
        self.sidebar_position += 1

        front_matter = {
            "sidebar_position": self.sidebar_position,
            "slug": page_id,
        }
        path = self.layout.get_path_for_page(context, page_id, title)
        self._write(path, front_matter, blocks)
        self.layout.page_was_seen(context, page_id, title)

    def _write(self, path: Path, front_matter: dict, blocks: List[dict]) -> None:
        markdown_blocks = self.converter.blocks_to_markdown(blocks)
        document = render_document(front_matter, self.converter.to_markdown_string(markdown_blocks))

        data = document.encode("utf-8")
        self.layout.page_was_written(path)
        self.pages_written.append(path)

        # Unchanged pages keep their modification time
        if path.is_file() and path.read_bytes() == data:
            return

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        self.pages_changed.append(path)


def _label(context, title):
    return escape("/".join(context + (title,)))
