"""
Custom exceptions for the Notion pull.
"""


class NotionPullError(Exception):
    """Base exception for Notion pull operations."""
    pass


class ConfigurationError(NotionPullError):
    """Raised when configuration is invalid or missing."""
    pass


class ImageDownloadError(NotionPullError):
    """Raised when an image cannot be fetched or its type cannot be detected."""

    def __init__(self, url, reason):
        super().__init__(f"{reason} (from {url})")
        self.url = url
        self.reason = reason
