"""HTML generator for CMS rich-text blocks.

Walks the block tree recursively and produces HTML. The tree is loosely typed:
unknown block types with children render their children, anything else
renders nothing, so content written by a newer CMS degrades instead of failing.
"""

from typing import Any, Dict, List, Optional

from markupsafe import Markup

from common.base.logging_config import get_logger
from richtext.htmlblocks import (
    create_blockquote,
    create_code_block,
    create_heading,
    create_hr,
    create_image,
    create_inline_code,
    create_link,
    create_list,
    create_paragraph,
    create_text,
    escape,
)

logger = get_logger(__name__)

Block = Dict[str, Any]

# Alternate type names used by different editors for the same block
TYPE_ALIASES = {
    "strong": "bold",
    "emphasis": "italic",
    "quote": "blockquote",
    "inlineCode": "code_inline",
    "code-inline": "code_inline",
    "list-item": "list_item",
    "horizontal-rule": "hr",
}

TEXT_MARK_FIELDS = ("bold", "italic", "underline", "strikethrough", "code")


def image_source(block: Block) -> str:
    """Image URL from ``url``, ``src``, or a nested media ``image`` object."""
    image = block.get("image") if isinstance(block.get("image"), dict) else {}
    return block.get("url") or block.get("src") or image.get("url") or ""


def image_alt(block: Block) -> str:
    image = block.get("image") if isinstance(block.get("image"), dict) else {}
    return block.get("alt") or image.get("alternativeText") or ""


def heading_level(block: Block) -> int:
    """Heading level clamped to 1..6; missing or malformed levels become 1."""
    try:
        level = int(block.get("level") or 1)
    except (TypeError, ValueError):
        level = 1
    return max(1, min(level, 6))


def is_ordered(block: Block) -> bool:
    return block.get("format") == "ordered" or block.get("ordered") is True


def _children(block: Block) -> Optional[List[Any]]:
    children = block.get("children")
    return children if isinstance(children, list) else None


def _plain_text(children: List[Any]) -> str:
    """Concatenated text of the direct text children; other nodes contribute nothing."""
    return "".join(
        child.get("text") or ""
        for child in children
        if isinstance(child, dict) and child.get("type") == "text"
    )


class BlocksHTMLGenerator:
    """Converts a list of rich-text blocks into HTML."""

    def render(self, blocks: List[Any]) -> str:
        return "".join(self.generate(block) for block in blocks)

    def generate(self, block: Any) -> str:
        """Generate HTML for a single block."""
        if not isinstance(block, dict):
            return ""

        block_type = str(block.get("type") or "")
        name = TYPE_ALIASES.get(block_type, block_type).replace("-", "_")
        method = getattr(self, f"_generate_{name}", self._generate_unknown)
        return method(block)

    def _render_children(self, block: Block) -> str:
        return "".join(self.generate(child) for child in _children(block) or [])

    def _generate_unknown(self, block: Block) -> str:
        """Fallback for unknown types: render the children, or nothing."""
        if _children(block) is not None:
            return self._render_children(block)
        logger.warning(f"Unknown block type: {block.get('type')!r}")
        return ""

    def _generate_text(self, block: Block) -> str:
        marks = [field for field in TEXT_MARK_FIELDS if block.get(field)]
        return create_text(block.get("text") or "", marks)

    def _generate_paragraph(self, block: Block) -> str:
        if _children(block) is None:
            return "<br />"
        return create_paragraph(self._render_children(block))

    def _generate_heading(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        level = heading_level(block)
        return create_heading(level, self._render_children(block))

    def _generate_list(self, block: Block) -> str:
        children = _children(block)
        if children is None:
            return ""
        items = [
            self._render_children(item) if isinstance(item, dict) else ""
            for item in children
        ]
        return create_list(items, is_ordered(block))

    def _generate_list_item(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        return self._render_children(block)

    def _generate_link(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        return create_link(block.get("url"), self._render_children(block))

    def _generate_bold(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        return f"<strong>{self._render_children(block)}</strong>"

    def _generate_italic(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        return f"<em>{self._render_children(block)}</em>"

    def _generate_blockquote(self, block: Block) -> str:
        if _children(block) is None:
            return ""
        return create_blockquote(self._render_children(block))

    def _generate_code(self, block: Block) -> str:
        children = _children(block)
        if children is None:
            return ""
        return create_code_block(_plain_text(children), block.get("language"))

    def _generate_code_inline(self, block: Block) -> str:
        children = _children(block)
        if children is None:
            return ""
        return create_inline_code(_plain_text(children))

    def _generate_image(self, block: Block) -> str:
        return create_image(image_source(block), image_alt(block))

    def _generate_hr(self, block: Block) -> str:
        return create_hr()


def render_blocks(blocks: Any, css_class: str = "") -> str:
    """
    Render a block list inside a wrapping div.

    :param blocks: Rich-text block list
    :param css_class: Class for the wrapping div
    :return: HTML string
    """
    class_attr = f' class="{escape(css_class)}"' if css_class else ""
    if not isinstance(blocks, list):
        logger.warning(f"Blocks content is not a list: {type(blocks).__name__}")
        return f"<div{class_attr}>No content available</div>"
    return f"<div{class_attr}>{BlocksHTMLGenerator().render(blocks)}</div>"


def render_post_content(content: Any) -> Markup:
    """
    Render a post's content field, whichever shape the CMS stored it in.

    Block lists and ``{"type": "doc", "content": [...]}`` documents go through
    the blocks renderer; plain strings are shown as preformatted text.
    """
    if content is None or content == "":
        return Markup('<div class="text-gray-400 italic">No content</div>')
    if isinstance(content, list):
        return Markup(render_blocks(content))
    if isinstance(content, dict) and content.get("type") == "doc" and isinstance(content.get("content"), list):
        return Markup(render_blocks(content["content"]))
    if isinstance(content, str):
        return Markup(f'<div class="whitespace-pre-wrap">{escape(content)}</div>')
    return Markup('<div class="text-gray-400 italic">Content format not supported</div>')
