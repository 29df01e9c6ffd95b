"""Highlighting and excerpt windows for search results.

Matching is case-insensitive; the highlighted text keeps the original casing
of the source field.
"""

from __future__ import annotations

import re


HIGHLIGHT_OPEN = "<mark>"
HIGHLIGHT_CLOSE = "</mark>"
DEFAULT_EXCERPT_RADIUS = 50


def _query_pattern(query: str) -> re.Pattern[str]:
    return re.compile(re.escape(query), re.IGNORECASE)


def find_first_match(text: str, query: str) -> int:
    """Position of the first case-insensitive occurrence of ``query``, or -1."""
    if not text or not query:
        return -1
    match = _query_pattern(query).search(text)
    return match.start() if match else -1


def count_occurrences(text: str, query: str) -> int:
    """Number of non-overlapping case-insensitive occurrences of ``query``."""
    if not text or not query:
        return 0
    return sum(1 for _ in _query_pattern(query).finditer(text))


def highlight_text(
    text: str,
    query: str,
    *,
    open_marker: str = HIGHLIGHT_OPEN,
    close_marker: str = HIGHLIGHT_CLOSE,
) -> str:
    """Wrap every occurrence of ``query`` in highlight markers.

    Args:
        text: Field value to highlight.
        query: Search term (matched case-insensitively, regex characters escaped).
        open_marker: Inserted before each match.
        close_marker: Inserted after each match.

    Returns:
        ``text`` with each match wrapped, or ``text`` unchanged if the query is blank.
    """
    if not text or not query.strip():
        return text
    return _query_pattern(query).sub(lambda match: f"{open_marker}{match.group(0)}{close_marker}", text)


def extract_excerpt(text: str, query: str, radius: int = DEFAULT_EXCERPT_RADIUS) -> str | None:
    """Window of ``radius`` characters around the first match, highlighted.

    Returns ``None`` when the query does not occur in ``text``. The window never
    contains the rest of the body, only the slice around the first match.
    """
    position = find_first_match(text, query)
    if position == -1:
        return None

    start = max(0, position - radius)
    end = min(len(text), position + len(query) + radius)
    return highlight_text(text[start:end], query)
