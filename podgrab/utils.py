"""Small text helpers shared by the feed and download modules.

These are intentionally thin so that higher level modules do not need to
worry about which characters a filesystem rejects or how episode notes are
marked up.
"""

from __future__ import annotations

import html
import re

RESERVED_CHARS = '<>:"/\\|?*'

_RESERVED_RE = re.compile("[" + re.escape(RESERVED_CHARS) + "]")
_BREAK_RE = re.compile(r"<\s*(br|/p|/div|/li|/h[1-6])\s*/?\s*>", re.IGNORECASE)
_ITEM_RE = re.compile(r"<\s*li(\s[^>]*)?>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


def sanitize(title: str) -> str:
    """Return *title* with every filesystem-reserved character removed.

    Only ``< > : " / \\ | ? *`` are stripped; everything else, including
    whitespace, is kept as-is so the result stays recognisable.
    """
    return _RESERVED_RE.sub("", title)


def html_to_text(markup: str | None) -> str:
    """Convert an HTML episode description to plain text.

    Block level closing tags and ``<br>`` become line breaks, list items are
    prefixed with ``- `` and entities are unescaped.
    """
    if not markup:
        return ""
    text = _BREAK_RE.sub("\n", markup)
    text = _ITEM_RE.sub("- ", text)
    text = _TAG_RE.sub("", text)
    text = html.unescape(text)
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    return _BLANK_LINES_RE.sub("\n\n", text).strip()


def format_bytes(count: int | None) -> str:
    """Return a human readable size such as ``"12.5 MB"``."""
    if count is None:
        return "unknown size"
    size = float(count)
    for unit in ("B", "KB", "MB", "GB"):
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} TB"
