"""
Main module for orchestrating a pull from Notion to markdown.
"""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from rich.console import Console

from .config import PullOptions, load_config, ensure_directories
from .exceptions import ConfigurationError, NotionPullError
from .images import ImageAssetCache
from .layout import create_layout_strategy
from .notion_client import NotionDownloader
from .walker import PageTreeWalker

console = Console()


@dataclass
class PullSummary:
    """What a pull did to the output directories."""

    pages_written: List[Path] = field(default_factory=list)
    pages_changed: List[Path] = field(default_factory=list)
    pages_skipped: List[str] = field(default_factory=list)
    removed_pages: List[Path] = field(default_factory=list)
    removed_images: List[Path] = field(default_factory=list)
    images_downloaded: int = 0


def pull(options: PullOptions, client=None, session=None, converter=None) -> PullSummary:
    """
    Mirror the outline under ``options.root_page`` into markdown files and images.

    Args:
        options: Where to read from and write to
        client: Notion client to use instead of one built from the token
        session: HTTP session used for image downloads
        converter: Block to markdown converter (default: MarkdownConverter)

    Returns:
        PullSummary of the files written and removed

    Raises:
        Any error from the Notion API; files already written stay on disk.
    """
    console.print("[bold cyan]Notion Pull[/bold cyan]")
    # Useful when troubleshooting CI secrets and environment variables
    console.print_json(data=options.for_logging())

    ensure_directories(options)

    downloader = NotionDownloader(options.notion_token, client=client)
    layout = create_layout_strategy(options.layout, options.markdown_output_path)
    # The image directory is never emptied: an image whose content changes gets
    # a new id, so existing files can be reused across pulls.
    images = ImageAssetCache(options.img_output_path, options.img_prefix_in_markdown, session=session)
    walker = PageTreeWalker(downloader, layout, images, converter=converter)

    console.print("[bold cyan]Connecting...[/bold cyan]")
    try:
        walker.walk(options.root_page)
        images.wait_for_pending()
    finally:
        images.close()

    console.print("[bold cyan]Cleaning up...[/bold cyan]")
    summary = PullSummary(
        pages_written=walker.pages_written,
        pages_changed=walker.pages_changed,
        pages_skipped=walker.pages_skipped,
        removed_pages=layout.cleanup_old_files(),
        removed_images=images.cleanup_old_images(),
        images_downloaded=images.download_count,
    )

    console.print(
        f"[bold green]Pull completed.[/bold green] {len(summary.pages_written)} pages written "
        f"({len(summary.pages_changed)} changed), {len(summary.pages_skipped)} skipped, "
        f"{len(summary.removed_pages)} old pages and {len(summary.removed_images)} old images removed."
    )
    return summary


def main():
    """Main function for pulling Notion content."""
    try:
        options = load_config()
        pull(options)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration Error:[/bold red] {e}")
        sys.exit(1)
    except (HTTPResponseError, RequestTimeoutError) as e:
        console.print(f"[bold red]Notion API Error:[/bold red] {e}")
        sys.exit(1)
    except NotionPullError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        sys.exit(1)
    except Exception as e:
        console.print(f"[bold red]Unexpected Error:[/bold red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
