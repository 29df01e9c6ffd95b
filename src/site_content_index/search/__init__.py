"""In-memory search: markdown stripping, index building, ranking and highlighting."""

from site_content_index.search.indexer import build_entry, build_index
from site_content_index.search.markdown import calculate_reading_time, generate_excerpt, strip_markdown
from site_content_index.search.ranking import (
    DEFAULT_MAX_RESULTS,
    MAX_QUERY_LENGTH,
    MAX_RESULTS_CAP,
    score_entry,
    search,
    search_by_category,
    search_suggestions,
    validate_query,
)
from site_content_index.search.snippet import extract_excerpt, highlight_text


__all__ = [
    "DEFAULT_MAX_RESULTS",
    "MAX_QUERY_LENGTH",
    "MAX_RESULTS_CAP",
    "build_entry",
    "build_index",
    "calculate_reading_time",
    "extract_excerpt",
    "generate_excerpt",
    "highlight_text",
    "score_entry",
    "search",
    "search_by_category",
    "search_suggestions",
    "strip_markdown",
    "validate_query",
]
