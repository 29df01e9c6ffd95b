"""Adapters - infrastructure implementations (filesystem content loading)."""

from site_content_index.adapters.filesystem_loader import (
    ContentLoader,
    ContentParseError,
    LoadError,
    LoadResult,
    slug_from_path,
)


__all__ = ["ContentLoader", "ContentParseError", "LoadError", "LoadResult", "slug_from_path"]
