"""
Constants and configuration values for the Notion pull.
"""

import re

# Notion allows roughly three requests per second per integration
RATE_LIMIT_CALLS = 3
RATE_LIMIT_PERIOD_SECONDS = 1.0

# Largest page size accepted by blocks.children.list
PAGE_SIZE = 100

# Database page workflow
PUBLISH_STATUS = "Publish"
NAME_PROPERTY = "Name"
SLUG_PROPERTY = "slug"
STATUS_PROPERTY = "Status"

# Title of the synthetic top-level container that never becomes a directory
OUTLINE_TITLE = "Outline"

# Block types that make a page an outline container
OUTLINE_CHILD_TYPES = {"child_page", "link_to_page"}

# Files uploaded to Notion come back as signed, expiring URLs. These patterns
# pick out the part of the path that stays the same between pulls.
SECURE_STORAGE_PATTERNS = (
    re.compile(r"secure\.notion-static\.com/(.+)/[^/]*$"),
    re.compile(r"prod-files-secure\.s3\.[^/]+\.amazonaws\.com/(.+)/[^/]*$"),
)

# Returned in place of a filename when an image could not be stored
IMAGE_ERROR_SENTINEL = "error"
IMAGE_DOWNLOAD_TIMEOUT = 30
IMAGE_WRITER_THREADS = 3

MARKDOWN_EXTENSION = ".md"
