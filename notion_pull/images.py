"""
Local cache of the images embedded in Notion pages.

Most images come from pasted screenshots and have no useful filename, so each
one is stored as ``<hash>.<ext>``, where the hash comes from the part of the
URL that identifies the upload and the extension is detected from the bytes.
"""

import re
from pathlib import Path
from typing import Dict, List, Optional
from urllib.parse import urlparse

import requests
from filetype import guess
from rich.console import Console

from .constants import (
    IMAGE_DOWNLOAD_TIMEOUT,
    IMAGE_ERROR_SENTINEL,
    SECURE_STORAGE_PATTERNS,
)
from .exceptions import ImageDownloadError
from .performance import BackgroundWriter

console = Console()

# Only files named like the ones this cache creates take part in cleanup
_CACHED_NAME = re.compile(r"^\d+\.[A-Za-z0-9]+$")


def hash_of_string(s: str) -> int:
    """31-multiplier rolling hash, wrapped to a signed 32-bit int, made positive."""
    h = 0
    for ch in s:
        h = (31 * h + ord(ch)) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def image_key(url: str) -> str:
    """
    Return the part of an image URL that stays stable between pulls.

    Files stored by Notion come back as signed S3 URLs that change every hour,
    e.g. ``https://s3.us-west-2.amazonaws.com/secure.notion-static.com/<uuid>/Untitled.png?X-Amz-...``;
    the ``<uuid>`` is what identifies the image. Any other URL is its own key.
    """
    parsed = urlparse(url)
    location = f"{parsed.netloc}{parsed.path}"
    for pattern in SECURE_STORAGE_PATTERNS:
        match = pattern.search(location)
        if match:
            return match.group(1)
    return url


def detect_image_extension(data: bytes) -> Optional[str]:
    """Detect the image type from its signature; returns a lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


class ImageAssetCache:
    """Downloads images once per key and remembers which files a pull used."""

    def __init__(self, image_dir, image_prefix: str, session=None, writer=None):
        self.image_dir = Path(image_dir)
        self.image_prefix = image_prefix.rstrip("/")
        self.session = session or requests.Session()
        self.writer = writer or BackgroundWriter()
        self.download_count = 0

        # hash -> filename, for everything on disk or fetched during this pull
        self._known: Dict[str, str] = {}
        # filenames that existed before the pull and have not been referenced yet
        self._not_seen_yet = set()

        if self.image_dir.is_dir():
            for existing in self.image_dir.iterdir():
                if existing.is_file() and _CACHED_NAME.match(existing.name):
                    self._known[existing.stem] = existing.name
                    self._not_seen_yet.add(existing.name)

    def _image_was_seen(self, filename: str) -> None:
        self._not_seen_yet.discard(filename)

    def _download(self, url: str):
        try:
            response = self.session.get(url, timeout=IMAGE_DOWNLOAD_TIMEOUT)
            response.raise_for_status()
        except requests.RequestException as e:
            raise ImageDownloadError(url, f"Download failed: {e}")
        self.download_count += 1

        data = response.content
        ext = detect_image_extension(data)
        if not ext:
            raise ImageDownloadError(
                url, "Something wrong with the filetype extension on the blob we got"
            )
        return data, ext

    def save_image(self, url: str) -> str:
        """
        Make sure the image at ``url`` is in the cache.

        Returns:
            The cached filename, or the error sentinel if the image could not
            be stored. Failures are reported but never raised.
        """
        file_hash = str(hash_of_string(image_key(url)))

        filename = self._known.get(file_hash)
        if filename:
            self._image_was_seen(filename)
            return filename

        try:
            data, ext = self._download(url)
        except ImageDownloadError as e:
            console.print(f"[bold red]Image error:[/bold red] {e}")
            return IMAGE_ERROR_SENTINEL

        filename = f"{file_hash}.{ext}"
        self._image_was_seen(filename)
        self._known[file_hash] = filename
        path = self.image_dir / filename
        if not path.exists():
            console.print(f"Adding image [dim]{path}[/dim]")
            self.writer.submit(path, data)
        return filename

    def resolve(self, url: str) -> str:
        """Return the reference to use in markdown for the image at ``url``."""
        return f"{self.image_prefix}/{self.save_image(url)}"

    def process_image_block(self, block: dict) -> None:
        """Download the image of an ``image`` block and point the block at our copy."""
        image = block["image"]
        # "file" images are hosted by Notion, "external" ones anywhere else
        source = image.get("file") if "file" in image else image.get("external")
        if not source or not source.get("url"):
            return
        source["url"] = self.resolve(source["url"])

    def process_blocks(self, blocks: List[dict]) -> None:
        for block in blocks:
            if "image" in block:
                self.process_image_block(block)

    def wait_for_pending(self) -> List[Path]:
        """Wait for image writes still in flight."""
        return self.writer.wait()

    def close(self) -> None:
        self.writer.close()

    def stale_images(self) -> List[Path]:
        return sorted(self.image_dir / name for name in self._not_seen_yet)

    def cleanup_old_images(self) -> List[Path]:
        """Delete cached images that no page referenced during this pull."""
        removed = []
        for path in self.stale_images():
            console.print(f"[yellow]Removing old image:[/yellow] {path}")
            path.unlink(missing_ok=True)
            removed.append(path)
        self._not_seen_yet.clear()
        return removed
