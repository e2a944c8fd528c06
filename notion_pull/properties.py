"""
Helpers for reading values out of Notion page properties.

Text properties look like this::

    "properties": {
        "slug": {"type": "rich_text", "rich_text": [{"plain_text": "intro", ...}]},
        "Name": {"type": "title", "title": [{"plain_text": "Intro", ...}]},
        "Status": {"type": "select", "select": {"name": "Publish", ...}}
    }
"""

from typing import Optional


def get_plain_text_property(page: dict, property_name: str) -> Optional[str]:
    """Return the concatenated plain text of a title or rich text property."""
    prop = (page.get("properties") or {}).get(property_name)
    if not prop:
        return None
    text_array = prop.get(prop.get("type")) or []
    if not isinstance(text_array, list):
        return None
    text = "".join(item.get("plain_text", "") for item in text_array)
    return text or None


def get_select_property(page: dict, property_name: str) -> Optional[str]:
    """Return the name of the selected option, or None if nothing is selected."""
    prop = (page.get("properties") or {}).get(property_name)
    if not prop:
        return None
    # "status" properties have the same shape as "select" ones
    selected = prop.get("select") or prop.get("status")
    if not selected:
        return None
    return selected.get("name") or None


def get_page_title(page: dict) -> Optional[str]:
    """
    Return the text of the page's title property, whatever it is called.

    Plain pages call it "title"; database pages name it after the database's
    title column (usually "Name").
    """
    for name, prop in (page.get("properties") or {}).items():
        if prop.get("type") == "title":
            return get_plain_text_property(page, name)
    return None
