"""
Module for converting Notion blocks to Markdown.

The walker only needs an object with ``blocks_to_markdown`` and
``to_markdown_string``; ``MarkdownConverter`` is the one used by default.
"""


def _plain_text(rich_text):
    return "".join(text.get("plain_text", "") for text in rich_text or [])


def _file_url(value):
    return (value.get("file") or {}).get("url") or (value.get("external") or {}).get("url", "")


def convert_block_to_markdown(block):
    """Convert a single Notion block to Markdown."""
    block_type = block.get("type")
    if not block_type or block_type not in block:
        return ""
    value = block[block_type]
    markdown = ""
    if block_type == "paragraph":
        markdown = _plain_text(value.get("rich_text"))
    elif block_type == "heading_1":
        markdown = "# " + _plain_text(value.get("rich_text"))
    elif block_type == "heading_2":
        markdown = "## " + _plain_text(value.get("rich_text"))
    elif block_type == "heading_3":
        markdown = "### " + _plain_text(value.get("rich_text"))
    elif block_type == "bulleted_list_item":
        markdown = "* " + _plain_text(value.get("rich_text"))
    elif block_type == "numbered_list_item":
        markdown = "1. " + _plain_text(value.get("rich_text"))
    elif block_type == "to_do":
        mark = "x" if value.get("checked") else " "
        markdown = f"- [{mark}] " + _plain_text(value.get("rich_text"))
    elif block_type == "toggle":
        markdown = _plain_text(value.get("rich_text"))
    elif block_type == "quote":
        markdown = "> " + _plain_text(value.get("rich_text"))
    elif block_type == "code":
        language = value.get("language", "")
        markdown = f"```{language}\n{_plain_text(value.get('rich_text'))}\n```"
    elif block_type == "divider":
        markdown = "---"
    elif block_type == "image":
        caption = _plain_text(value.get("caption"))
        markdown = f"![{caption}]({_file_url(value)})"
    elif block_type == "callout":
        emoji = (value.get("icon") or {}).get("emoji", "")
        text = _plain_text(value.get("rich_text"))
        markdown = f"> {emoji} {text}" if emoji else f"> {text}"
    elif block_type == "bookmark":
        url = value.get("url", "")
        caption = _plain_text(value.get("caption"))
        markdown = f"[{caption}]({url})" if caption else f"[{url}]({url})"
    elif block_type == "equation":
        markdown = f"$$\n{value.get('expression', '')}\n$$"
    elif block_type == "file":
        caption = _plain_text(value.get("caption"))
        markdown = f"[{caption or 'Attachment'}]({_file_url(value)})"
    return markdown


class MarkdownConverter:
    """Turns a list of blocks into a markdown document body."""

    def blocks_to_markdown(self, blocks):
        """Convert each block, dropping the ones that produce no text."""
        markdown_blocks = []
        for block in blocks:
            markdown_block = convert_block_to_markdown(block)
            if markdown_block:
                markdown_blocks.append(markdown_block)
        return markdown_blocks

    def to_markdown_string(self, markdown_blocks):
        if not markdown_blocks:
            return ""
        return "\n\n".join(markdown_blocks) + "\n"
