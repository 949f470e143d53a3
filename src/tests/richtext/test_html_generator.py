"""Tests for rendering rich-text blocks to HTML."""

import unittest

from markupsafe import Markup

from richtext.html_generator import BlocksHTMLGenerator, render_blocks, render_post_content
from richtext.htmlblocks import create_text, safe_url


def text(value, **marks):
    return {"type": "text", "text": value, **marks}


def paragraph(*children):
    return {"type": "paragraph", "children": list(children)}


class TestBlocksHTMLGenerator(unittest.TestCase):
    """Test cases for individual block types."""

    def setUp(self):
        self.generator = BlocksHTMLGenerator()

    def render(self, block):
        return self.generator.generate(block)

    def test_paragraph(self):
        self.assertEqual(self.render(paragraph(text("Hello"))), '<p class="mb-4">Hello</p>')

    def test_paragraph_without_children_is_line_break(self):
        self.assertEqual(self.render({"type": "paragraph"}), "<br />")

    def test_text_is_escaped(self):
        self.assertEqual(self.render(text("<script>")), "&lt;script&gt;")

    def test_text_marks(self):
        html = self.render(text("hi", bold=True, italic=True))
        self.assertEqual(html, "<strong><em>hi</em></strong>")

    def test_whitespace_text_is_not_wrapped(self):
        self.assertEqual(create_text("  ", ["bold"]), "  ")

    def test_heading_levels(self):
        html = self.render({"type": "heading", "level": 2, "children": [text("Title")]})
        self.assertTrue(html.startswith("<h2 "))
        self.assertIn("text-3xl", html)
        self.assertTrue(html.endswith("Title</h2>"))

    def test_heading_level_clamped(self):
        html = self.render({"type": "heading", "level": 9, "children": [text("Deep")]})
        self.assertTrue(html.startswith("<h6 "))

    def test_heading_without_children(self):
        self.assertEqual(self.render({"type": "heading", "level": 1}), "")

    def test_unordered_list(self):
        html = self.render({
            "type": "list",
            "format": "unordered",
            "children": [
                {"type": "list-item", "children": [text("a")]},
                {"type": "list-item", "children": [text("b")]},
            ],
        })
        self.assertEqual(html, '<ul class="mb-4 list-disc"><li class="mb-2 ml-4">a</li>'
                               '<li class="mb-2 ml-4">b</li></ul>')

    def test_ordered_list_flag(self):
        html = self.render({"type": "list", "ordered": True,
                            "children": [{"type": "list-item", "children": [text("a")]}]})
        self.assertTrue(html.startswith('<ol class="mb-4 list-decimal">'))

    def test_external_link(self):
        html = self.render({"type": "link", "url": "https://example.com", "children": [text("site")]})
        self.assertIn('href="https://example.com"', html)
        self.assertIn('target="_blank"', html)
        self.assertIn('rel="noopener noreferrer"', html)

    def test_relative_link(self):
        html = self.render({"type": "link", "url": "/about", "children": [text("about")]})
        self.assertIn('href="/about"', html)
        self.assertNotIn("target", html)

    def test_script_link_neutralized(self):
        html = self.render({"type": "link", "url": "javascript:alert(1)", "children": [text("x")]})
        self.assertIn('href="#"', html)

    def test_bold_and_italic_blocks(self):
        self.assertEqual(self.render({"type": "bold", "children": [text("b")]}), "<strong>b</strong>")
        self.assertEqual(self.render({"type": "emphasis", "children": [text("i")]}), "<em>i</em>")

    def test_quote(self):
        html = self.render({"type": "quote", "children": [text("wise")]})
        self.assertTrue(html.startswith("<blockquote"))
        self.assertIn("wise", html)

    def test_code_block(self):
        html = self.render({"type": "code", "language": "python",
                            "children": [text("x = 1 < 2")]})
        self.assertIn('<code class="language-python">x = 1 &lt; 2</code>', html)
        self.assertTrue(html.startswith("<pre"))

    def test_inline_code(self):
        html = self.render({"type": "code-inline", "children": [text("f()")]})
        self.assertEqual(html, '<code class="bg-gray-800 px-2 py-1 rounded">f()</code>')

    def test_image_sources(self):
        nested = self.render({"type": "image", "image": {"url": "/u/a.png", "alternativeText": "A"},
                              "children": [text("")]})
        self.assertIn('src="/u/a.png"', nested)
        self.assertIn('alt="A"', nested)

        flat = self.render({"type": "image", "src": "/u/b.png", "alt": "B"})
        self.assertIn('src="/u/b.png"', flat)

    def test_hr(self):
        self.assertIn("<hr", self.render({"type": "hr"}))

    def test_unknown_type_renders_children(self):
        html = self.render({"type": "callout", "children": [text("inner")]})
        self.assertEqual(html, "inner")

    def test_unknown_type_without_children(self):
        with self.assertLogs('richtext.html_generator', level='WARNING'):
            self.assertEqual(self.render({"type": "embed"}), "")

    def test_non_dict_block(self):
        self.assertEqual(self.render("nope"), "")


class TestRenderBlocks(unittest.TestCase):

    def test_wraps_in_div(self):
        html = render_blocks([paragraph(text("a"))], css_class="prose")
        self.assertEqual(html, '<div class="prose"><p class="mb-4">a</p></div>')

    def test_non_list(self):
        self.assertEqual(render_blocks("text"), "<div>No content available</div>")

    def test_safe_url(self):
        self.assertEqual(safe_url(" JavaScript:alert(1)"), "#")
        self.assertEqual(safe_url(None), "#")
        self.assertEqual(safe_url("https://x.test"), "https://x.test")

    def test_safe_url_ignores_control_characters(self):
        for url in ("java\tscript:alert(1)", "java\nscript:alert(1)", "jav\rascript:alert(1)",
                    "\x01javascript:alert(1)", "data\x7f:text/html,x", "VB Script:x"):
            with self.subTest(url=url):
                self.assertEqual(safe_url(url), "#")

    def test_link_with_split_scheme_neutralized(self):
        html = render_blocks([{"type": "link", "url": "java\tscript:alert(1)", "children": [text("x")]}])
        self.assertIn('href="#"', html)
        self.assertNotIn("script:", html)


class TestRenderPostContent(unittest.TestCase):

    def test_returns_markup(self):
        self.assertIsInstance(render_post_content([paragraph(text("a"))]), Markup)

    def test_empty(self):
        self.assertIn("No content", render_post_content(None))
        self.assertIn("No content", render_post_content(""))

    def test_block_list(self):
        self.assertIn('<p class="mb-4">a</p>', render_post_content([paragraph(text("a"))]))

    def test_doc_wrapper(self):
        html = render_post_content({"type": "doc", "content": [paragraph(text("doc"))]})
        self.assertIn('<p class="mb-4">doc</p>', html)

    def test_plain_string_is_escaped(self):
        html = render_post_content("line <b>one</b>\nline two")
        self.assertIn("whitespace-pre-wrap", html)
        self.assertIn("&lt;b&gt;", html)

    def test_unsupported(self):
        self.assertIn("Content format not supported", render_post_content(42))


if __name__ == '__main__':
    unittest.main()
