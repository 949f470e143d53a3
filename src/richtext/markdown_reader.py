"""Converts the writer's Markdown into CMS rich-text blocks.

Covers the subset the post editor produces: ATX headings, fenced code,
blockquotes, flat ordered and unordered lists, thematic breaks, standalone
images and paragraphs, with bold, italic, strikethrough, inline code and
links inside them.
"""

import re
from typing import Any, Dict, FrozenSet, List, Optional

Block = Dict[str, Any]

_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)(?:\s+#+)?\s*$")
_FENCE_RE = re.compile(r"^(```|~~~)\s*([\w+-]*)\s*$")
_HR_RE = re.compile(r"^\s{0,3}(?:(?:\*\s*){3,}|(?:-\s*){3,}|(?:_\s*){3,})$")
_QUOTE_RE = re.compile(r"^\s{0,3}>\s?(.*)$")
_LIST_RE = re.compile(r"^\s{0,3}([-*+]|\d+[.)])\s+(.*)$")
_IMAGE_RE = re.compile(r'^!\[([^\]]*)\]\(\s*([^)\s]+)(?:\s+"[^"]*")?\s*\)$')

# Inline constructs, tried left to right at each position
_INLINE_RE = re.compile(
    r"`(?P<code>[^`]+)`"
    r"|\[(?P<label>[^\]]+)\]\((?P<url>[^)\s]+)\)"
    r"|\*\*(?P<bold>.+?)\*\*"
    r"|__(?P<bold_alt>.+?)__"
    r"|~~(?P<strike>.+?)~~"
    r"|\*(?P<italic>[^*]+)\*"
    r"|(?<!\w)_(?P<italic_alt>[^_]+)_(?!\w)"
)


def _text_node(text: str, marks: FrozenSet[str] = frozenset()) -> Block:
    node: Block = {"type": "text", "text": text}
    for mark in sorted(marks):
        node[mark] = True
    return node


def parse_inline(text: str, marks: FrozenSet[str] = frozenset()) -> List[Block]:
    """
    Parse inline Markdown into text and link nodes.

    :param text: Inline Markdown
    :param marks: Marks inherited from enclosing emphasis
    :return: Child nodes; never empty, as the CMS rejects empty children
    """
    nodes: List[Block] = []
    position = 0
    for match in _INLINE_RE.finditer(text):
        if match.start() > position:
            nodes.append(_text_node(text[position:match.start()], marks))
        position = match.end()

        if match.group("code") is not None:
            nodes.append(_text_node(match.group("code"), marks | {"code"}))
        elif match.group("url") is not None:
            nodes.append({
                "type": "link",
                "url": match.group("url"),
                "children": parse_inline(match.group("label"), marks),
            })
        elif match.group("bold") is not None or match.group("bold_alt") is not None:
            inner = match.group("bold") or match.group("bold_alt")
            nodes.extend(parse_inline(inner, marks | {"bold"}))
        elif match.group("strike") is not None:
            nodes.extend(parse_inline(match.group("strike"), marks | {"strikethrough"}))
        else:
            inner = match.group("italic") or match.group("italic_alt")
            nodes.extend(parse_inline(inner, marks | {"italic"}))

    if position < len(text):
        nodes.append(_text_node(text[position:], marks))
    return nodes or [_text_node("", marks)]


def _list_kind(marker: str) -> str:
    return "unordered" if marker in "-*+" else "ordered"


class MarkdownReader:
    """Line-oriented Markdown to blocks converter."""

    def __init__(self, text: str):
        self.lines = (text or "").replace("\r\n", "\n").replace("\r", "\n").split("\n")
        self.index = 0
        self.blocks: List[Block] = []

    def read(self) -> List[Block]:
        while self.index < len(self.lines):
            line = self.lines[self.index]
            if not line.strip():
                self.index += 1
            elif _FENCE_RE.match(line.strip()):
                self._read_code()
            elif _HEADING_RE.match(line):
                self._read_heading()
            elif _HR_RE.match(line):
                # The CMS has no divider block; keep the marker as text
                self.blocks.append({"type": "paragraph", "children": [_text_node("---")]})
                self.index += 1
            elif _QUOTE_RE.match(line):
                self._read_quote()
            elif _LIST_RE.match(line):
                self._read_list()
            elif _IMAGE_RE.match(line.strip()):
                self._read_image()
            else:
                self._read_paragraph()
        return self.blocks

    def _starts_block(self, line: str) -> bool:
        stripped = line.strip()
        return bool(
            not stripped
            or _FENCE_RE.match(stripped)
            or _HEADING_RE.match(line)
            or _HR_RE.match(line)
            or _QUOTE_RE.match(line)
            or _LIST_RE.match(line)
            or _IMAGE_RE.match(stripped)
        )

    def _read_code(self) -> None:
        opening = _FENCE_RE.match(self.lines[self.index].strip())
        fence, language = opening.group(1), opening.group(2)
        self.index += 1
        code_lines = []
        while self.index < len(self.lines) and self.lines[self.index].strip() != fence:
            code_lines.append(self.lines[self.index])
            self.index += 1
        # Skip the closing fence; an unclosed fence runs to the end
        self.index += 1

        block: Block = {"type": "code", "children": [_text_node("\n".join(code_lines))]}
        if language:
            block["language"] = language
        self.blocks.append(block)

    def _read_heading(self) -> None:
        match = _HEADING_RE.match(self.lines[self.index])
        self.blocks.append({
            "type": "heading",
            "level": len(match.group(1)),
            "children": parse_inline(match.group(2)),
        })
        self.index += 1

    def _read_quote(self) -> None:
        quoted = []
        while self.index < len(self.lines):
            match = _QUOTE_RE.match(self.lines[self.index])
            if not match:
                break
            quoted.append(match.group(1))
            self.index += 1
        self.blocks.append({"type": "quote", "children": parse_inline("\n".join(quoted).strip())})

    def _read_list(self) -> None:
        first = _LIST_RE.match(self.lines[self.index])
        kind = _list_kind(first.group(1))
        items: List[str] = []

        while self.index < len(self.lines):
            line = self.lines[self.index]
            match = _LIST_RE.match(line)
            if match:
                if _list_kind(match.group(1)) != kind:
                    break
                items.append(match.group(2).strip())
            elif line.strip() and line[:1].isspace() and items:
                # Indented continuation of the previous item
                items[-1] = f"{items[-1]} {line.strip()}"
            else:
                break
            self.index += 1

        self.blocks.append({
            "type": "list",
            "format": kind,
            "children": [{"type": "list-item", "children": parse_inline(item)} for item in items],
        })

    def _read_image(self) -> None:
        match = _IMAGE_RE.match(self.lines[self.index].strip())
        alt, url = match.group(1), match.group(2)
        self.blocks.append({
            "type": "image",
            "image": {"url": url, "alternativeText": alt or None},
            "children": [_text_node("")],
        })
        self.index += 1

    def _read_paragraph(self) -> None:
        lines = [self.lines[self.index].strip()]
        self.index += 1
        while self.index < len(self.lines) and not self._starts_block(self.lines[self.index]):
            lines.append(self.lines[self.index].strip())
            self.index += 1
        self.blocks.append({"type": "paragraph", "children": parse_inline("\n".join(lines))})


def markdown_to_blocks(text: Optional[str]) -> List[Block]:
    """
    Convert Markdown to a list of rich-text blocks.

    :param text: Markdown source
    :return: Blocks, empty for empty input
    """
    if not text or not text.strip():
        return []
    return MarkdownReader(text).read()
