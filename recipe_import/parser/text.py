"""Text cleanup shared by every extraction stage."""

import html
import re

_TAG_RE = re.compile(r"<[^>]*>")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(value: str | None) -> str:
    """Strip markup, decode HTML entities, and collapse whitespace."""
    if not value:
        return ""
    text = _TAG_RE.sub("", str(value))
    text = html.unescape(text)
    return _WHITESPACE_RE.sub(" ", text).strip()
