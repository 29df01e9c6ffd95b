"""Markdown to plain-text reduction used by the search index and excerpts.

The transformations run in a fixed order:

1. fenced code blocks removed
2. inline code removed
3. heading markers removed
4. images, then links, reduced to their label text
5. ``**strong**`` / ``__strong__`` / ``*em*`` / ``_em_`` reduced to their inner text
6. HTML/MDX tags removed
7. whitespace runs collapsed to a single space, ends trimmed

A single pass can expose new syntax (``[x]*(y)*`` becomes ``[x](y)``), so the
pipeline repeats until the text stops changing. After the first pass every
change shortens the text, which bounds the loop.
"""

import math
import re


FENCED_CODE_PATTERN = re.compile(r"(```|~~~)[\s\S]*?\1")
INLINE_CODE_PATTERN = re.compile(r"`[^`]*`")
HEADING_PATTERN = re.compile(r"^[ \t]*#{1,6}\s+", re.MULTILINE)
IMAGE_PATTERN = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
LINK_PATTERN = re.compile(r"\[([^\]]*)\]\([^)]*\)")
STRONG_STAR_PATTERN = re.compile(r"\*\*([\s\S]+?)\*\*")
STRONG_UNDERSCORE_PATTERN = re.compile(r"__([\s\S]+?)__")
EMPHASIS_PATTERN = re.compile(r"\*([\s\S]+?)\*")
EMPHASIS_UNDERSCORE_PATTERN = re.compile(r"(?<!\w)_([^_\s][^_]*?)_(?!\w)")
HTML_TAG_PATTERN = re.compile(r"</?[A-Za-z][^<>]*>")
WHITESPACE_PATTERN = re.compile(r"\s+")

WORDS_PER_MINUTE = 200
EXCERPT_LENGTH = 160


def _strip_once(text: str) -> str:
    text = FENCED_CODE_PATTERN.sub("", text)
    text = INLINE_CODE_PATTERN.sub("", text)
    text = HEADING_PATTERN.sub("", text)
    text = IMAGE_PATTERN.sub(r"\1", text)
    text = LINK_PATTERN.sub(r"\1", text)
    text = STRONG_STAR_PATTERN.sub(r"\1", text)
    text = STRONG_UNDERSCORE_PATTERN.sub(r"\1", text)
    text = EMPHASIS_PATTERN.sub(r"\1", text)
    text = EMPHASIS_UNDERSCORE_PATTERN.sub(r"\1", text)
    text = HTML_TAG_PATTERN.sub("", text)
    return WHITESPACE_PATTERN.sub(" ", text).strip()


def strip_markdown(markdown: str) -> str:
    """Reduce markdown/MDX to plain prose.

    Idempotent: ``strip_markdown(strip_markdown(x)) == strip_markdown(x)``.

    Example:
        >>> strip_markdown("## Setup\\n\\nRun `make` then see [the docs](/docs).")
        'Setup Run then see the docs.'
    """
    if not markdown:
        return ""

    current = _strip_once(markdown)
    while True:
        reduced = _strip_once(current)
        if reduced == current:
            return current
        current = reduced


def generate_excerpt(markdown: str, max_length: int = EXCERPT_LENGTH) -> str:
    """Plain-text preview of a body, truncated with ``...`` past ``max_length``."""
    clean = strip_markdown(markdown)
    if len(clean) <= max_length:
        return clean
    return clean[:max_length].rstrip() + "..."


def calculate_reading_time(markdown: str) -> int:
    """Estimated reading time in minutes (200 characters per minute, at least 1)."""
    return max(1, math.ceil(len(markdown) / WORDS_PER_MINUTE))
