"""Domain layer - pure content and search types with no infrastructure dependencies.

This layer contains:
- Source types and the per-source front matter variants
- The unified ContentRecord every downstream component consumes
- Tag and search value objects
"""

from site_content_index.domain.model import (
    DEFAULT_CATEGORY,
    BlogFrontMatter,
    ContentRecord,
    DocFrontMatter,
    FrontMatter,
    ParsedContentFile,
    ReleaseFrontMatter,
    SourceType,
)
from site_content_index.domain.search import (
    FieldMatches,
    QueryValidationError,
    RankedResult,
    SearchIndex,
    SearchIndexEntry,
    SearchResponse,
    TagAggregate,
    TaggedContent,
)


__all__ = [
    "DEFAULT_CATEGORY",
    "BlogFrontMatter",
    "ContentRecord",
    "DocFrontMatter",
    "FieldMatches",
    "FrontMatter",
    "ParsedContentFile",
    "QueryValidationError",
    "RankedResult",
    "ReleaseFrontMatter",
    "SearchIndex",
    "SearchIndexEntry",
    "SearchResponse",
    "SourceType",
    "TagAggregate",
    "TaggedContent",
]
