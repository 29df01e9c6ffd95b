"""Domain models for tagging and search.

Value objects are immutable (frozen=True). They describe what the
aggregation and ranking code produces; none of them reach into the
filesystem or the HTTP layer.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from site_content_index.domain.model import ContentRecord, SourceType


class QueryValidationError(ValueError):
    """Raised for search input rejected before any index scan."""


class TagAggregate(BaseModel):
    """How many records carry a tag, split by source."""

    model_config = ConfigDict(frozen=True)

    tag: str = Field(min_length=1)
    count: int = Field(ge=0)
    blog_count: int = Field(default=0, ge=0)
    release_count: int = Field(default=0, ge=0)
    doc_count: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def _check_conservation(self) -> "TagAggregate":
        if self.count != self.blog_count + self.release_count + self.doc_count:
            raise ValueError(
                f"Tag {self.tag!r}: count {self.count} does not equal the sum of per-source counts"
            )
        return self

    def count_for(self, source_type: SourceType) -> int:
        match source_type:
            case SourceType.BLOG:
                return self.blog_count
            case SourceType.RELEASE:
                return self.release_count
            case SourceType.DOC:
                return self.doc_count
        raise ValueError(f"Unhandled source type: {source_type!r}")


class TaggedContent(BaseModel):
    """Every record carrying a tag, grouped by source (tag detail pages)."""

    model_config = ConfigDict(frozen=True)

    tag: str
    total_count: int
    blog: list[ContentRecord] = Field(default_factory=list)
    releases: list[ContentRecord] = Field(default_factory=list)
    docs: list[ContentRecord] = Field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "total_count": self.total_count,
            "blog": [record.summary() for record in self.blog],
            "releases": [record.summary() for record in self.releases],
            "docs": [record.summary() for record in self.docs],
        }


class SearchIndexEntry(BaseModel):
    """Plain-text searchable projection of one content record."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_type: SourceType
    title: str
    description: str = ""
    content: str = ""
    tags: tuple[str, ...] = ()
    category: str
    href: str
    last_modified: datetime


class SearchIndex(BaseModel):
    """Immutable snapshot of index entries.

    Built wholesale by ``search.indexer.build_index``; callers replace the
    whole value to refresh it.
    """

    model_config = ConfigDict(frozen=True)

    entries: tuple[SearchIndexEntry, ...] = ()
    built_at: datetime

    def __len__(self) -> int:
        return len(self.entries)


class FieldMatches(BaseModel):
    """Highlighted renderings of the fields that matched a query."""

    model_config = ConfigDict(frozen=True)

    title: str | None = None
    description: str | None = None
    content: str | None = None


class RankedResult(BaseModel):
    """A search index entry annotated with relevance score and highlights."""

    model_config = ConfigDict(frozen=True)

    entry: SearchIndexEntry
    score: int = Field(gt=0)
    matches: FieldMatches = Field(default_factory=FieldMatches)

    def to_dict(self) -> dict[str, Any]:
        entry = self.entry
        return {
            "id": entry.id,
            "title": entry.title,
            "description": entry.description,
            "href": entry.href,
            "source_type": entry.source_type.value,
            "tags": list(entry.tags),
            "category": entry.category,
            "last_modified": entry.last_modified.isoformat(),
            "score": self.score,
            "matches": self.matches.model_dump(exclude_none=True),
        }


class SearchResponse(BaseModel):
    """Search endpoint payload."""

    model_config = ConfigDict(frozen=True)

    query: str
    results: list[RankedResult] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict() for result in self.results],
            "query": self.query,
            "total": self.total,
        }
