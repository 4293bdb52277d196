"""Markdown -> HTML -> sanitisation par liste blanche.

Le HTML produit est stocké tel quel (``rendered_body``) et injecté sans
échappement dans les pages: tout ce qui n'est pas explicitement autorisé
ici est supprimé, jamais échappé.
"""
import html
import re
from html.parser import HTMLParser

import markdown

MARKDOWN_EXTENSIONS = ["extra", "sane_lists", "nl2br"]

ALLOWED_TAGS = {
    "p", "br", "hr", "h1", "h2", "h3",
    "ul", "ol", "li", "dl", "dt", "dd",
    "blockquote", "code", "pre", "span", "div",
    "strong", "b", "em", "i", "s", "del", "sup", "sub", "abbr",
    "table", "thead", "tbody", "tr", "th", "td",
    "img", "a",
}
ALLOWED_ATTRIBUTES = {
    "img": {"src", "alt", "title"},
    "a": {"href", "title", "target", "rel"},
    "code": {"class"},
    "pre": {"class"},
    "span": {"class"},
}
URL_ATTRIBUTES = {"href", "src"}
ALLOWED_SCHEMES = {"http", "https", "mailto"}
VOID_TAGS = {"br", "hr", "img"}
# contenu supprimé avec la balise
DROP_CONTENT_TAGS = {"script", "style", "textarea", "noscript"}

_SCHEME_RE = re.compile(r"^([a-z][a-z0-9+.\-]*):")
_IGNORED_URL_CHARS_RE = re.compile(r"[\x00-\x20\x7f]+")


def _is_safe_url(value: str) -> bool:
    # les navigateurs ignorent espaces et caractères de contrôle ("java\tscript:")
    compact = _IGNORED_URL_CHARS_RE.sub("", value).lower()
    m = _SCHEME_RE.match(compact)
    if m is None:
        return True  # URL relative
    return m.group(1) in ALLOWED_SCHEMES


class _Sanitizer(HTMLParser):
    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.result = []
        self.open_tags = []
        self.skip_depth = 0

    def _filter_attrs(self, tag, attrs):
        allowed = ALLOWED_ATTRIBUTES.get(tag, set())
        kept = []
        for key, value in attrs:
            key = key.lower()
            if key not in allowed:
                continue
            value = (value or "").strip()
            if key in URL_ATTRIBUTES and (not value or not _is_safe_url(value)):
                continue
            kept.append((key, value))
        if tag == "a" and any(k == "target" for k, _ in kept) and not any(k == "rel" for k, _ in kept):
            kept.append(("rel", "noopener noreferrer"))
        return kept

    def handle_starttag(self, tag, attrs):
        tag = tag.lower()
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth += 1
            return
        if self.skip_depth or tag not in ALLOWED_TAGS:
            return

        attr_text = "".join(
            f' {k}="{html.escape(v, quote=True)}"' for k, v in self._filter_attrs(tag, attrs)
        )
        self.result.append(f"<{tag}{attr_text}>")
        if tag not in VOID_TAGS:
            self.open_tags.append(tag)

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)
        if tag.lower() in ALLOWED_TAGS and tag.lower() not in VOID_TAGS:
            self.handle_endtag(tag)

    def handle_endtag(self, tag):
        tag = tag.lower()
        if tag in DROP_CONTENT_TAGS:
            self.skip_depth = max(self.skip_depth - 1, 0)
            return
        if self.skip_depth or tag not in ALLOWED_TAGS or tag in VOID_TAGS:
            return
        if tag in self.open_tags:
            while self.open_tags:
                opened = self.open_tags.pop()
                self.result.append(f"</{opened}>")
                if opened == tag:
                    break

    def handle_data(self, data):
        if not self.skip_depth:
            self.result.append(html.escape(data, quote=False))

    def close_open_tags(self):
        while self.open_tags:
            self.result.append(f"</{self.open_tags.pop()}>")


def sanitize_html(raw_html: str) -> str:
    if not raw_html:
        return ""
    parser = _Sanitizer()
    parser.feed(raw_html)
    parser.close()
    parser.close_open_tags()
    return "".join(parser.result)


def render_markdown(text: str) -> str:
    # instance par appel: markdown.Markdown garde un état interne
    return markdown.Markdown(extensions=MARKDOWN_EXTENSIONS).convert(text or "")


def render_note_body(content: str) -> str:
    return sanitize_html(render_markdown(content))
