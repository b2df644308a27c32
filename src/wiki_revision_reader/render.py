from __future__ import annotations

import html
import re

import mwparserfromhell

# mwparserfromhell keeps inter-language links as plain link text, so drop them first.
LANG_LINKS = re.compile(r"\[\[[a-z\-]+:[^\]]+\]\]")
REF = re.compile(r"<ref[^>]*>.*?</ref>", re.DOTALL)
HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
# Stops at "<" so a trailing tag is not swallowed.
URL = re.compile(r"https?://[^ <]+")
DOUBLE_CURLY = re.compile(r"\{\{.*?\}\}", re.DOTALL)
# Leaves comments alone; they are removed earlier.
HTML_TAG = re.compile(r"<[^!][^>]*>")


def render_plain_text(title: str | None, markup: str | None) -> str:
    """Render wiki markup as plain text prefixed by the page title."""
    text = LANG_LINKS.sub(" ", markup or "")
    text = mwparserfromhell.parse(text).strip_code()
    text = f"{title or ''}\n{text}"

    # Some entities are double-encoded in the dumps.
    text = html.unescape(html.unescape(text))

    text = REF.sub(" ", text)
    # Comments go before URLs so a URL cannot eat a comment terminator.
    text = HTML_COMMENT.sub(" ", text)
    text = URL.sub(" ", text)
    text = DOUBLE_CURLY.sub(" ", text)
    text = HTML_TAG.sub(" ", text)
    return text
