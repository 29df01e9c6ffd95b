"""YAML front matter utilities for content files.

Content files carry a YAML metadata header followed by a markdown body.
The header is delimited by ``---`` lines (``-----`` is accepted as well).

Example:
    ---
    title: Webhooks Guide
    description: Receive events over HTTP
    tags: [webhooks, api]
    publishedAt: 2024-01-15
    ---
    # Webhooks

    Webhooks let you...
"""

import re
from typing import Any

import yaml


_FRONT_MATTER_PATTERN = re.compile(r"\A\ufeff?(-{3,5})[ \t]*\r?\n(.*?)\r?\n\1[ \t]*(?:\r?\n|\Z)", re.DOTALL)
_EMPTY_FRONT_MATTER_PATTERN = re.compile(r"\A\ufeff?(-{3,5})[ \t]*\r?\n\1[ \t]*(?:\r?\n|\Z)")


class FrontMatterError(ValueError):
    """Raised when a front matter block exists but cannot be parsed."""


def parse_front_matter(content: str) -> tuple[dict[str, Any], str]:
    """Parse YAML front matter from markdown content.

    Args:
        content: Full file content including front matter

    Returns:
        Tuple of (front_matter_dict, markdown_body).
        If no front matter block is present, returns (empty dict, original content).

    Raises:
        FrontMatterError: The header block exists but is not valid YAML, holds
            a value YAML cannot construct (``2024-02-30``), or is not a mapping.

    Example:
        >>> metadata, body = parse_front_matter("---\\ntitle: Hello\\n---\\n# Content")
        >>> metadata["title"]
        'Hello'
        >>> body
        '# Content'
    """
    empty_match = _EMPTY_FRONT_MATTER_PATTERN.match(content)
    if empty_match:
        return {}, content[empty_match.end() :]

    match = _FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    yaml_text = match.group(2)
    body = content[match.end() :]

    try:
        metadata = yaml.safe_load(yaml_text)
    except (yaml.YAMLError, ValueError, TypeError) as exc:
        raise FrontMatterError(f"Invalid YAML in front matter: {exc}") from exc

    if metadata is None:
        return {}, body

    if not isinstance(metadata, dict):
        raise FrontMatterError(f"Front matter must be a mapping, got {type(metadata).__name__}")

    return metadata, body
