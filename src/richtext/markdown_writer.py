"""Converts CMS rich-text blocks into Markdown."""

import json
from typing import Any, Dict, List

from richtext.html_generator import heading_level, image_alt, image_source, is_ordered


def _children(block: Dict[str, Any]) -> List[Any]:
    children = block.get("children")
    return children if isinstance(children, list) else []


def _join_children(block: Dict[str, Any], separator: str = "") -> str:
    return separator.join(block_to_markdown(child) for child in _children(block))


def _text_to_markdown(block: Dict[str, Any]) -> str:
    text = block.get("text") or ""
    if not text.strip():
        return text
    if block.get("code"):
        text = f"`{text}`"
    if block.get("bold"):
        text = f"**{text}**"
    if block.get("italic"):
        text = f"*{text}*"
    if block.get("strikethrough"):
        text = f"~~{text}~~"
    return text


def block_to_markdown(block: Any) -> str:
    """
    Convert a single block to Markdown.

    :param block: Rich-text block
    :return: Markdown text, empty for blocks with nothing to show
    """
    if not isinstance(block, dict):
        return ""

    block_type = block.get("type")
    children = block.get("children")
    has_children = isinstance(children, list)

    if block_type == "text":
        return _text_to_markdown(block)

    if block_type == "paragraph":
        if not has_children:
            return ""
        parts = (block_to_markdown(child) for child in children)
        return "".join(part for part in parts if part.strip())

    if block_type == "heading" and block.get("level"):
        if not has_children:
            return ""
        return f"{'#' * heading_level(block)} {_join_children(block)}"

    if block_type == "list":
        if not has_children:
            return ""
        ordered = is_ordered(block)
        lines = []
        for index, item in enumerate(children, start=1):
            prefix = f"{index}." if ordered else "-"
            item_text = _join_children(item) if isinstance(item, dict) else ""
            lines.append(f"{prefix} {item_text}")
        return "\n".join(lines)

    if block_type == "list-item":
        return _join_children(block)

    if block_type == "code":
        return f"```{block.get('language') or ''}\n{_join_children(block)}\n```"

    if block_type in ("code-inline", "inlineCode"):
        return f"`{_join_children(block)}`"

    if block_type == "link":
        return f"[{_join_children(block)}]({block.get('url') or '#'})"

    if block_type in ("bold", "strong"):
        return f"**{_join_children(block)}**"

    if block_type in ("italic", "emphasis"):
        return f"*{_join_children(block)}*"

    if block_type in ("blockquote", "quote"):
        if not has_children:
            return ""
        text = _join_children(block, "\n")
        return "\n".join(f"> {line}" for line in text.split("\n"))

    if block_type in ("hr", "horizontal-rule"):
        return "---"

    if block_type == "image":
        return f"![{image_alt(block)}]({image_source(block)})"

    if has_children:
        return _join_children(block)

    return block.get("text") or ""


def blocks_to_markdown(content: Any) -> str:
    """
    Convert post content to a Markdown string.

    Strings are returned untouched, block lists are converted block by block
    with blank lines between non-empty results, and any other value is
    serialized as JSON.
    """
    if isinstance(content, str):
        return content

    if isinstance(content, list):
        converted = (block_to_markdown(block) for block in content)
        return "\n\n".join(text for text in converted if text.strip())

    return json.dumps(content)
