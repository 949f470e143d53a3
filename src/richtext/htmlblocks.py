"""HTML element builders for rich-text blocks."""

import html
import re
from typing import Dict, Iterable, Optional

# Tailwind size class per heading level
HEADING_CLASSES: Dict[int, str] = {
    1: "text-4xl",
    2: "text-3xl",
    3: "text-2xl",
    4: "text-xl",
    5: "text-lg",
    6: "text-base",
}

# Inline marks on text nodes, innermost first
TEXT_MARKS = (
    ("code", "code"),
    ("strikethrough", "s"),
    ("underline", "u"),
    ("italic", "em"),
    ("bold", "strong"),
)

_UNSAFE_SCHEMES = ("javascript:", "data:", "vbscript:")
# Browsers ignore these inside a scheme
_URL_IGNORED_RE = re.compile(r"[\x00-\x20\x7f]")


def escape(text: Optional[str]) -> str:
    return html.escape(text or "", quote=True)


def safe_url(url: Optional[str], default: str = "#") -> str:
    """
    Return the URL unless it is empty or uses a script-capable scheme.

    :param url: URL from the content
    :param default: Replacement for missing or unsafe URLs
    """
    if not url:
        return default
    candidate = url.strip()
    if _URL_IGNORED_RE.sub("", candidate).lower().startswith(_UNSAFE_SCHEMES):
        return default
    return candidate


def heading_class(level: int) -> str:
    return HEADING_CLASSES.get(level, "text-xl")


def create_text(text: str, marks: Iterable[str] = ()) -> str:
    """Escape text and wrap it in the tags for its inline marks."""
    result = escape(text)
    if not result.strip():
        return result
    active = set(marks)
    for mark, tag in TEXT_MARKS:
        if mark in active:
            result = f"<{tag}>{result}</{tag}>"
    return result


def create_paragraph(content: str) -> str:
    return f'<p class="mb-4">{content}</p>'


def create_heading(level: int, content: str) -> str:
    return f'<h{level} class="mb-4 mt-6 font-bold {heading_class(level)}">{content}</h{level}>'


def create_list(items: Iterable[str], ordered: bool) -> str:
    tag = "ol" if ordered else "ul"
    list_class = "list-decimal" if ordered else "list-disc"
    body = "".join(f'<li class="mb-2 ml-4">{item}</li>' for item in items)
    return f'<{tag} class="mb-4 {list_class}">{body}</{tag}>'


def create_link(url: Optional[str], content: str) -> str:
    """Anchor tag; external links open in a new tab without an opener reference."""
    href = safe_url(url)
    external = ""
    if href.startswith("http"):
        external = ' target="_blank" rel="noopener noreferrer"'
    return f'<a href="{escape(href)}"{external} class="text-purple-400 hover:underline">{content}</a>'


def create_blockquote(content: str) -> str:
    return f'<blockquote class="border-l-4 border-purple-500 pl-4 my-4 italic">{content}</blockquote>'


def create_code_block(code: str, language: Optional[str] = None) -> str:
    code_class = f' class="language-{escape(language)}"' if language else ""
    return (
        f'<pre class="bg-gray-800 p-4 rounded my-4 overflow-x-auto">'
        f'<code{code_class}>{escape(code)}</code></pre>'
    )


def create_inline_code(code: str) -> str:
    return f'<code class="bg-gray-800 px-2 py-1 rounded">{escape(code)}</code>'


def create_image(url: Optional[str], alt: Optional[str]) -> str:
    return (
        f'<img src="{escape(safe_url(url, default=""))}" alt="{escape(alt)}" '
        f'class="max-w-full h-auto my-4 rounded" />'
    )


def create_hr() -> str:
    return '<hr class="my-6 border-gray-700" />'
