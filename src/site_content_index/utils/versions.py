"""Semantic version ordering for release notes."""

import re


_NUMERIC_PREFIX = re.compile(r"^(\d+)")


def parse_version(version: str) -> tuple[int, int, int]:
    """Parse ``v1.2.3``-style strings into a (major, minor, patch) tuple.

    Missing or non-numeric components count as 0, so ``"2"`` parses as
    ``(2, 0, 0)`` and ``"1.4.0-beta"`` as ``(1, 4, 0)``.
    """
    cleaned = version.strip().removeprefix("v").removeprefix("V")
    parts: list[int] = []
    for raw in cleaned.split(".")[:3]:
        match = _NUMERIC_PREFIX.match(raw)
        parts.append(int(match.group(1)) if match else 0)
    while len(parts) < 3:
        parts.append(0)
    return parts[0], parts[1], parts[2]


def version_sort_key(version: str) -> tuple[int, int, int]:
    """Sort key that orders versions newest first when used with ``sorted``."""
    major, minor, patch = parse_version(version)
    return -major, -minor, -patch
