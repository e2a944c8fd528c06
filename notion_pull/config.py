"""
Module for managing project configuration.
"""

import json
import os
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional
from .exceptions import ConfigurationError

# --- Configuration ---
CONFIG_FILE = os.getenv("NOTION_CONFIG_FILE", "config.json")
DEFAULT_MARKDOWN_OUTPUT = "docs"
DEFAULT_IMG_OUTPUT = "static/notion_images"
DEFAULT_LAYOUT = "hierarchical"

# 32 hex digits, optionally dashed 8-4-4-4-12 as in page URLs and the API
_NOTION_ID = re.compile(r"^[0-9a-f]{8}(-?)[0-9a-f]{4}\1[0-9a-f]{4}\1[0-9a-f]{4}\1[0-9a-f]{12}$")

# field name -> (environment variable, key in the JSON file)
_SOURCES = {
    "notion_token": ("NOTION_TOKEN", "notion_token"),
    "root_page": ("NOTION_ROOT_PAGE_ID", "root_page_id"),
    "markdown_output_path": ("NOTION_MARKDOWN_OUTPUT", "markdown_output_path"),
    "img_output_path": ("NOTION_IMG_OUTPUT", "img_output_path"),
    "img_prefix_in_markdown": ("NOTION_IMG_PREFIX", "img_prefix_in_markdown"),
    "layout": ("NOTION_LAYOUT", "layout"),
}


@dataclass
class PullOptions:
    """Everything a pull needs to know about where to read and write."""

    notion_token: str
    root_page: str
    markdown_output_path: str = DEFAULT_MARKDOWN_OUTPUT
    img_output_path: str = DEFAULT_IMG_OUTPUT
    img_prefix_in_markdown: Optional[str] = None
    layout: str = DEFAULT_LAYOUT

    def __post_init__(self):
        # Callers may or may not want a leading slash, but the trailing one
        # is added back when image references are built.
        prefix = self.img_prefix_in_markdown or self.img_output_path
        self.img_prefix_in_markdown = prefix.rstrip("/")

    def for_logging(self) -> dict:
        """Options as a dict, with only the first letters of the token visible."""
        options = asdict(self)
        options["notion_token"] = (self.notion_token or "")[:3] + "..."
        return options


def is_valid_notion_id(notion_id) -> bool:
    """True for a lowercase Notion id, compact or dashed."""
    return isinstance(notion_id, str) and bool(_NOTION_ID.match(notion_id))


def _read_config_file(config_path: Path) -> dict:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Error parsing JSON file: {e}")
    except OSError as e:
        raise ConfigurationError(f"Error loading configuration: {e}")

    if not isinstance(config, dict):
        raise ConfigurationError(f"'{config_path}' must contain a JSON object.")
    return config


def load_config(config_file: Optional[str] = None) -> PullOptions:
    """
    Load configuration from environment variables, falling back to a JSON file.

    Environment variables win over values in the file. The file is only
    required when the token or root page are missing from the environment.

    Args:
        config_file: Path of the JSON file (default: NOTION_CONFIG_FILE or config.json)

    Returns:
        PullOptions: the resolved options

    Raises:
        ConfigurationError: If configuration is invalid or missing
    """
    config_path = Path(config_file or CONFIG_FILE)

    file_values = {}
    if config_path.exists():
        file_values = _read_config_file(config_path)

    values = {}
    for field_name, (env_name, json_key) in _SOURCES.items():
        value = os.getenv(env_name) or file_values.get(json_key)
        if value:
            values[field_name] = value

    if not values.get("notion_token") or not values.get("root_page"):
        if not config_path.exists():
            raise ConfigurationError(
                f"Configuration file '{config_path}' not found and environment "
                "variables NOTION_TOKEN/NOTION_ROOT_PAGE_ID not set."
            )
        raise ConfigurationError(
            "Notion token or root page ID not configured correctly."
        )

    root_page = values["root_page"].strip().lower()
    if not is_valid_notion_id(root_page):
        raise ConfigurationError(f"'{values['root_page']}' is not a valid Notion page ID.")
    values["root_page"] = root_page

    return PullOptions(**values)


def ensure_directories(options: PullOptions) -> None:
    """Create the markdown and image output directories if they don't exist."""
    try:
        Path(options.markdown_output_path).mkdir(parents=True, exist_ok=True)
        Path(options.img_output_path).mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Unable to create directories: {e}")
