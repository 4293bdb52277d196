# tests/test_render.py
import re

import pytest

from kvnotes.notes.render import render_markdown, render_note_body, sanitize_html

EVENT_ATTR = re.compile(r"\son\w+\s*=", re.IGNORECASE)


@pytest.mark.parametrize("payload", [
    "<script>alert(1)</script>",
    "<img src=x onerror=alert(1)>",
    "Hello <script>alert(1)</script> world",
    "<svg onload=alert(1)><circle/></svg>",
])
def test_no_script_and_no_event_handlers(payload):
    body = render_note_body(payload)
    assert "<script" not in body.lower()
    assert EVENT_ATTR.search(body) is None


def test_heading_kept_script_dropped():
    body = render_note_body("# Hi\n<script>x</script>")
    assert "<h1>Hi</h1>" in body
    assert "script" not in body


def test_image_keeps_only_allowed_attributes():
    out = sanitize_html('<img src="https://e.com/a.png" alt="a" title="t" width="10" onerror="x()">')
    assert out == '<img src="https://e.com/a.png" alt="a" title="t">'


@pytest.mark.parametrize("href", [
    "javascript:alert(1)",
    "JaVaScRiPt:alert(1)",
    "java\tscript:alert(1)",
    "&#106;avascript:alert(1)",
    "data:text/html;base64,PHNjcmlwdD4=",
    "vbscript:msgbox(1)",
])
def test_dangerous_link_schemes_removed(href):
    out = sanitize_html(f'<a href="{href}">x</a>')
    assert out == "<a>x</a>"


@pytest.mark.parametrize("href", [
    "https://example.com/",
    "http://example.com/a?b=c",
    "mailto:me@example.com",
    "/relative/path",
    "#anchor",
])
def test_allowed_link_schemes_kept(href):
    out = sanitize_html(f'<a href="{href}" title="t">x</a>')
    assert 'href="' in out
    assert 'title="t"' in out


def test_target_gets_rel():
    out = sanitize_html('<a href="https://e.com" target="_blank">x</a>')
    assert 'rel="noopener noreferrer"' in out


def test_disallowed_tags_discarded_text_kept():
    out = sanitize_html("<section><h4>Deep</h4><p>text</p><iframe src='https://e.com'></iframe></section>")
    assert out == "Deep<p>text</p>"


def test_style_content_dropped():
    out = sanitize_html("<style>body{display:none}</style><p>ok</p>")
    assert out == "<p>ok</p>"


def test_class_only_on_code_pre_span():
    out = sanitize_html('<pre class="x"><code class="language-py">a</code></pre><p class="y">b</p>')
    assert out == '<pre class="x"><code class="language-py">a</code></pre><p>b</p>'


def test_unclosed_tags_are_closed():
    assert sanitize_html("<p><strong>bold") == "<p><strong>bold</strong></p>"


def test_text_is_escaped():
    assert sanitize_html("<p>1 &lt; 2 &amp; 3</p>") == "<p>1 &lt; 2 &amp; 3</p>"


def test_markdown_soft_breaks_become_br():
    html = render_markdown("line one\nline two")
    assert "<br" in html


def test_markdown_fenced_code_keeps_language_class():
    body = render_note_body("```python\nprint('hi')\n```")
    assert '<code class="language-python">' in body


def test_markdown_links_and_lists_survive():
    body = render_note_body("- [site](https://example.com)\n- item\n\n> quote")
    assert '<a href="https://example.com">site</a>' in body
    assert "<ul>" in body and "<li>" in body
    assert "<blockquote>" in body


def test_empty_content():
    assert render_note_body("") == ""


def test_option_without_end_tag_keeps_following_content():
    # <option> peut omettre sa balise fermante
    out = sanitize_html("<select><option>a<option>b</select><p>visible</p>")
    assert out == "ab<p>visible</p>"
