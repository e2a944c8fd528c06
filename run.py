#!/usr/bin/env python3
"""
Pull the Notion outline into markdown files.

Configuration comes from environment variables (NOTION_TOKEN,
NOTION_ROOT_PAGE_ID, ...) or from config.json; see README.md.
"""

from notion_pull.main import main

if __name__ == "__main__":
    main()
