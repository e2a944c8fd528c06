"""Shared fakes and builders for Notion pages, blocks, HTTP and time."""

import copy
from types import SimpleNamespace

import pytest
import requests

from notion_pull.performance import RateLimiter

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17
JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 20


# --- Notion object builders ---

def rich_text(text):
    return [{"type": "text", "plain_text": text}]


def outline_page(page_id, title):
    """A plain Notion page, as returned by pages.retrieve."""
    return {
        "object": "page",
        "id": page_id,
        "properties": {"title": {"id": "title", "type": "title", "title": rich_text(title)}},
    }


def database_page(page_id, name, slug=None, status=None):
    """A page living in a database, with Name / slug / Status properties."""
    properties = {"Name": {"id": "title", "type": "title", "title": rich_text(name)}}
    if slug is not None:
        properties["slug"] = {"id": "s", "type": "rich_text", "rich_text": rich_text(slug)}
    if status is not None:
        properties["Status"] = {"id": "st", "type": "select", "select": {"id": "1", "name": status}}
    return {"object": "page", "id": page_id, "properties": properties}


def child_page_block(page_id, title="child"):
    return {"object": "block", "id": page_id, "type": "child_page", "child_page": {"title": title}}


def link_block(page_id, block_id=None):
    return {
        "object": "block",
        "id": block_id or f"link-{page_id}",
        "type": "link_to_page",
        "link_to_page": {"type": "page_id", "page_id": page_id},
    }


def paragraph_block(text, block_id=None):
    return {
        "object": "block",
        "id": block_id or f"para-{text}",
        "type": "paragraph",
        "paragraph": {"rich_text": rich_text(text)},
    }


def image_block(url, hosted=True, block_id=None):
    source = "file" if hosted else "external"
    return {
        "object": "block",
        "id": block_id or f"img-{url}",
        "type": "image",
        "image": {"type": source, source: {"url": url}, "caption": []},
    }


# --- Fakes ---

class FakeNotionClient:
    """In-memory stand-in for notion_client.Client, paginating like the real API."""

    def __init__(self, pages=None, children=None, fail_on=None):
        self.page_objects = pages or {}
        self.children = children or {}
        self.fail_on = fail_on or {}
        self.list_calls = []
        self.retrieve_calls = []
        self.pages = SimpleNamespace(retrieve=self._retrieve_page)
        self.blocks = SimpleNamespace(children=SimpleNamespace(list=self._list_children))

    def _retrieve_page(self, page_id, **kwargs):
        self.retrieve_calls.append(page_id)
        if page_id in self.fail_on:
            raise self.fail_on[page_id]
        return copy.deepcopy(self.page_objects[page_id])

    def _list_children(self, block_id, page_size=100, start_cursor=None, **kwargs):
        self.list_calls.append((block_id, page_size, start_cursor))
        items = self.children.get(block_id, [])
        start = int(start_cursor) if start_cursor else 0
        end = start + page_size
        more = end < len(items)
        return {
            "object": "list",
            "results": copy.deepcopy(items[start:end]),
            "next_cursor": str(end) if more else None,
            "has_more": more,
        }


class FakeResponse:
    def __init__(self, content, status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class FakeSession:
    """Serves canned bytes per URL and counts requests."""

    def __init__(self, responses=None):
        self.responses = responses or {}
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append(url)
        if url not in self.responses:
            return FakeResponse(b"", status_code=404)
        return FakeResponse(self.responses[url])


class FakeClock:
    """Monotonic clock whose sleep just moves time forward."""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_limiter(clock):
    return RateLimiter(clock=clock, sleep=clock.sleep)
