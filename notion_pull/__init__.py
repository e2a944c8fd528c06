"""
Package for pulling a Notion outline into markdown files.
"""

from .config import PullOptions, load_config, ensure_directories
from .images import ImageAssetCache
from .layout import (
    LayoutStrategy,
    HierarchicalNamedLayoutStrategy,
    FlatGuidLayoutStrategy,
    create_layout_strategy,
)
from .markdown_converter import MarkdownConverter, convert_block_to_markdown
from .notion_client import NotionDownloader
from .performance import RateLimiter
from .walker import NodeKind, PageTreeWalker, classify_node
from .main import PullSummary, pull

__all__ = [
    'PullOptions',
    'load_config',
    'ensure_directories',
    'ImageAssetCache',
    'LayoutStrategy',
    'HierarchicalNamedLayoutStrategy',
    'FlatGuidLayoutStrategy',
    'create_layout_strategy',
    'MarkdownConverter',
    'convert_block_to_markdown',
    'NotionDownloader',
    'RateLimiter',
    'NodeKind',
    'PageTreeWalker',
    'classify_node',
    'PullSummary',
    'pull'
]
