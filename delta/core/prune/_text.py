from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")

SUMMARY_MAX_LENGTH = 80
_ELLIPSIS = "…"


def truncate(text: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Collapse whitespace and cut to *max_length* chars, ellipsis included."""
    clean = _WHITESPACE_RE.sub(" ", text).strip()
    if len(clean) > max_length:
        return clean[: max_length - 1] + _ELLIPSIS
    return clean


def summarize(content: str, max_length: int = SUMMARY_MAX_LENGTH) -> str:
    """Single-line display summary: the first line, or all of it if blank."""
    first_line = content.split("\n", 1)[0].strip()
    return truncate(first_line or content, max_length)


def word_tokens(text: str) -> frozenset[str]:
    """Lower-cased whitespace-separated tokens."""
    return frozenset(text.lower().split())
