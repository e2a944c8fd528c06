"""
Module for reading pages and blocks from Notion via the API.
"""

from notion_client import Client
from rich.console import Console

from .constants import PAGE_SIZE
from .performance import RateLimiter

console = Console()


class NotionDownloader:
    """Class for reading Notion content, one rate-limited request at a time.

    Errors raised by the Notion client (``APIResponseError``,
    ``RequestTimeoutError``...) are not caught here: a failed request aborts
    the pull.
    """

    def __init__(self, notion_token=None, client=None, rate_limiter=None, page_size=PAGE_SIZE):
        """Initialize the Notion client."""
        self.notion = client or Client(auth=notion_token)
        self.rate_limiter = rate_limiter or RateLimiter()
        self.page_size = page_size

    def get_page_metadata(self, page_id):
        """Retrieve a page object (properties, parent, ...) without its content."""
        self.rate_limiter.acquire()
        return self.notion.pages.retrieve(page_id=page_id)

    def get_block_children(self, block_id):
        """
        Retrieve every child block of a page or block, in order.

        The API returns at most ``page_size`` children per request, so this
        keeps following ``next_cursor`` until the server reports no more.
        """
        blocks = []
        start_cursor = None
        while True:
            self.rate_limiter.acquire()

            request = {"block_id": block_id, "page_size": self.page_size}
            if start_cursor:
                request["start_cursor"] = start_cursor
            response = self.notion.blocks.children.list(**request)

            blocks.extend(response.get("results", []))
            start_cursor = response.get("next_cursor")
            if not start_cursor:
                break
        return blocks
