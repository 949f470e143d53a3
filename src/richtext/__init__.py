"""Richtext - Conversion between CMS rich-text blocks, HTML and Markdown."""

from .html_generator import BlocksHTMLGenerator, render_blocks, render_post_content
from .markdown_writer import block_to_markdown, blocks_to_markdown
from .markdown_reader import markdown_to_blocks

__all__ = [
    'BlocksHTMLGenerator', 'render_blocks', 'render_post_content',
    'block_to_markdown', 'blocks_to_markdown', 'markdown_to_blocks',
]
