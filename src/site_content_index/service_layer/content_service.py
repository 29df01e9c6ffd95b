"""Content orchestration: load every source, normalize, aggregate, index.

``ContentService`` owns the active ``ContentSnapshot``. A refresh builds a
complete new snapshot and swaps it in with one assignment, so readers only
ever see a fully built value.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path

from site_content_index.adapters.filesystem_loader import DEFAULT_EXTENSIONS, ContentLoader, LoadError, LoadResult
from site_content_index.config import ScoringWeights, Settings
from site_content_index.domain.model import ContentRecord, SourceType
from site_content_index.domain.search import (
    QueryValidationError,
    SearchIndex,
    SearchResponse,
    TagAggregate,
    TaggedContent,
)
from site_content_index.observability.metrics import (
    CONTENT_LOAD_ERRORS,
    INDEX_DOC_COUNT,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    track_latency,
)
from site_content_index.observability.tracing import create_span
from site_content_index.search import ranking
from site_content_index.search.indexer import build_index
from site_content_index.service_layer import tag_service
from site_content_index.service_layer.normalizer import normalize_all, sort_by_recency, sort_releases


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceStatus:
    """Outcome of loading one source during the last refresh."""

    source_type: SourceType
    root: Path
    available: bool
    record_count: int = 0
    errors: tuple[LoadError, ...] = ()
    failure: str | None = None

    @property
    def healthy(self) -> bool:
        return self.available and self.failure is None

    def to_dict(self) -> dict:
        return {
            "root": str(self.root),
            "available": self.available,
            "records": self.record_count,
            "errors": [error.to_dict() for error in self.errors],
            "failure": self.failure,
        }


@dataclass(frozen=True)
class ContentSnapshot:
    records: tuple[ContentRecord, ...] = ()
    tags: tuple[TagAggregate, ...] = ()
    index: SearchIndex = field(default_factory=lambda: SearchIndex(built_at=datetime.now(timezone.utc)))
    sources: tuple[SourceStatus, ...] = ()
    built_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def error_count(self) -> int:
        return sum(len(status.errors) for status in self.sources)


class ContentService:
    """Holds the active content snapshot and answers queries against it."""

    def __init__(
        self,
        source_dirs: Mapping[SourceType, Path],
        *,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
        weights: ScoringWeights | None = None,
        max_query_length: int = ranking.MAX_QUERY_LENGTH,
        default_max_results: int = ranking.DEFAULT_MAX_RESULTS,
        max_results_cap: int = ranking.MAX_RESULTS_CAP,
        excerpt_radius: int = 50,
    ) -> None:
        self.loaders = [
            ContentLoader(Path(root), source_type, extensions) for source_type, root in source_dirs.items()
        ]
        self.weights = weights or ranking.DEFAULT_WEIGHTS
        self.max_query_length = max_query_length
        self.default_max_results = default_max_results
        self.max_results_cap = max_results_cap
        self.excerpt_radius = excerpt_radius
        self._snapshot = ContentSnapshot()
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: Settings) -> ContentService:
        return cls(
            settings.source_dirs(),
            extensions=settings.get_file_extensions(),
            weights=settings.scoring_weights(),
            max_query_length=settings.max_query_length,
            default_max_results=settings.default_max_results,
            max_results_cap=settings.max_results_cap,
            excerpt_radius=settings.excerpt_radius,
        )

    def snapshot(self) -> ContentSnapshot:
        return self._snapshot

    async def refresh(self) -> ContentSnapshot:
        """Rebuild records, tags and index from disk and swap them in.

        A source that fails unexpectedly contributes no records; the other
        sources are still loaded and indexed.
        """
        async with self._refresh_lock:
            with create_span("content.refresh"):
                loaded_at = datetime.now(timezone.utc)
                statuses: list[SourceStatus] = []
                collected: list[ContentRecord] = []
                for loader in self.loaders:
                    result, source_records, failure = await self._load_source(loader, loaded_at)
                    collected.extend(source_records)
                    statuses.append(
                        SourceStatus(
                            source_type=loader.source_type,
                            root=loader.root,
                            available=result.source_available,
                            record_count=len(source_records),
                            errors=tuple(result.errors),
                            failure=failure,
                        )
                    )
                    if result.errors:
                        CONTENT_LOAD_ERRORS.labels(source=loader.source_type.value).inc(len(result.errors))

                records = tuple(sort_by_recency(collected))
                snapshot = ContentSnapshot(
                    records=records,
                    tags=tuple(tag_service.aggregate_tags(records)),
                    index=build_index(records, built_at=loaded_at),
                    sources=tuple(statuses),
                    built_at=loaded_at,
                )

            self._snapshot = snapshot

        for source_type in SourceType:
            count = sum(1 for entry in snapshot.index.entries if entry.source_type is source_type)
            INDEX_DOC_COUNT.labels(source=source_type.value).set(count)
        logger.info(
            "Content refreshed: %d records, %d tags, %d load errors",
            len(snapshot.records),
            len(snapshot.tags),
            snapshot.error_count,
        )
        return snapshot

    async def _load_source(
        self, loader: ContentLoader, loaded_at: datetime
    ) -> tuple[LoadResult, list[ContentRecord], str | None]:
        try:
            result = await loader.load(loaded_at=loaded_at)
            return result, normalize_all(result.files), None
        except Exception as exc:
            logger.exception("Loading %s content from %s failed", loader.source_type.value, loader.root)
            return LoadResult(source_type=loader.source_type, root=loader.root), [], str(exc)

    def get_all_content(self, source: SourceType | None = None) -> list[ContentRecord]:
        records = self._snapshot.records
        if source is None:
            return list(records)
        return [record for record in records if record.source_type is source]

    def releases_by_version(self) -> list[ContentRecord]:
        """Release notes, newest semantic version first."""
        return sort_releases(self._snapshot.records)

    def get_record(self, source: SourceType, record_id: str) -> ContentRecord | None:
        return next(
            (record for record in self._snapshot.records if record.source_type is source and record.id == record_id),
            None,
        )

    def search(self, query: str, max_results: int | None = None) -> SearchResponse:
        """Rank the active index against ``query``.

        Raises:
            QueryValidationError: Query too long.
        """
        limit = self.default_max_results if max_results is None else max_results
        index = self._snapshot.index
        try:
            with track_latency(SEARCH_LATENCY, operation="search"):
                results = ranking.search(
                    index,
                    query,
                    limit,
                    weights=self.weights,
                    max_query_length=self.max_query_length,
                    max_results_cap=self.max_results_cap,
                    excerpt_radius=self.excerpt_radius,
                )
        except QueryValidationError:
            SEARCH_REQUESTS.labels(status="rejected").inc()
            raise
        SEARCH_REQUESTS.labels(status="ok").inc()
        return SearchResponse(query=query, results=results)

    def search_by_category(self, query: str, category: str, max_results: int = 5) -> SearchResponse:
        with track_latency(SEARCH_LATENCY, operation="search_by_category"):
            results = ranking.search_by_category(
                self._snapshot.index, query, category, max_results, weights=self.weights
            )
        return SearchResponse(query=query, results=results)

    def suggestions(self, query: str, max_suggestions: int = 5) -> list[str]:
        with track_latency(SEARCH_LATENCY, operation="suggestions"):
            return ranking.search_suggestions(self._snapshot.index, query, max_suggestions)

    def all_tags(self) -> list[TagAggregate]:
        return list(self._snapshot.tags)

    def popular_tags(self, limit: int = 10) -> list[TagAggregate]:
        return list(self._snapshot.tags[: max(limit, 0)])

    def tags_by_source(self) -> dict[SourceType, list[TagAggregate]]:
        try:
            return tag_service.aggregate_by_source(self._snapshot.records)
        except Exception:
            logger.exception("Tag aggregation by source failed")
            return {source_type: [] for source_type in SourceType}

    def tags_by_category(self) -> dict[str, list[TagAggregate]]:
        try:
            return tag_service.aggregate_by_category(self._snapshot.records)
        except Exception:
            logger.exception("Tag aggregation by category failed")
            return {}

    def category_counts(self) -> list[tuple[str, int]]:
        try:
            return tag_service.category_counts(self._snapshot.records)
        except Exception:
            logger.exception("Category counting failed")
            return []

    def content_by_tag(self, tag: str) -> TaggedContent:
        try:
            return tag_service.content_by_tag(self._snapshot.records, tag)
        except Exception:
            logger.exception("Looking up content for tag %r failed", tag)
            return TaggedContent(tag=tag, total_count=0)

    def related_tags(self, tag: str, limit: int = 5) -> list[str]:
        try:
            return tag_service.related_tags(self._snapshot.records, tag, limit)
        except Exception:
            logger.exception("Related tag lookup for %r failed", tag)
            return []

    def related_content(self, current: ContentRecord, limit: int = 3) -> list[ContentRecord]:
        try:
            return tag_service.related_content(self._snapshot.records, current, limit)
        except Exception:
            logger.exception("Related content lookup for %s failed", current.key)
            return []
