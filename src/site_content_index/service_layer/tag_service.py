"""Tag aggregation across content sources.

Every function recomputes its result from the records it is given; nothing
is cached or updated incrementally. Aggregates are ordered by count
descending, then tag ascending, so tag pages and sitemaps paginate stably.
"""

from collections import Counter
from collections.abc import Iterable
import logging

from site_content_index.domain.model import ContentRecord, SourceType
from site_content_index.domain.search import TagAggregate, TaggedContent
from site_content_index.service_layer.normalizer import sort_by_recency


logger = logging.getLogger(__name__)


def _published(records: Iterable[ContentRecord]) -> list[ContentRecord]:
    return [record for record in records if not record.draft]


def _aggregate_ordering(aggregate: TagAggregate) -> tuple[int, str]:
    return -aggregate.count, aggregate.tag


def _counts_by_source(records: Iterable[ContentRecord]) -> dict[str, Counter[SourceType]]:
    counts: dict[str, Counter[SourceType]] = {}
    for record in records:
        for tag in set(record.tags):
            if not tag:
                continue
            counts.setdefault(tag, Counter())[record.source_type] += 1
    return counts


def _build_aggregates(counts: dict[str, Counter[SourceType]]) -> list[TagAggregate]:
    aggregates = []
    for tag, per_source in counts.items():
        blog_count = per_source[SourceType.BLOG]
        release_count = per_source[SourceType.RELEASE]
        doc_count = per_source[SourceType.DOC]
        aggregates.append(
            TagAggregate(
                tag=tag,
                count=blog_count + release_count + doc_count,
                blog_count=blog_count,
                release_count=release_count,
                doc_count=doc_count,
            )
        )
    return sorted(aggregates, key=_aggregate_ordering)


def aggregate_tags(records: Iterable[ContentRecord]) -> list[TagAggregate]:
    """Per-tag totals with blog/release/doc sub-counts."""
    return _build_aggregates(_counts_by_source(_published(records)))


def aggregate_by_category(records: Iterable[ContentRecord]) -> dict[str, list[TagAggregate]]:
    """Tag aggregation partitioned by record category (categories sorted)."""
    partitions: dict[str, list[ContentRecord]] = {}
    for record in _published(records):
        partitions.setdefault(record.category, []).append(record)
    return {category: aggregate_tags(partitions[category]) for category in sorted(partitions)}


def aggregate_by_source(records: Iterable[ContentRecord]) -> dict[SourceType, list[TagAggregate]]:
    """Tag aggregation partitioned by source; every source has an entry, possibly empty."""
    partitions: dict[SourceType, list[ContentRecord]] = {source_type: [] for source_type in SourceType}
    for record in _published(records):
        partitions[record.source_type].append(record)
    return {source_type: aggregate_tags(items) for source_type, items in partitions.items()}


def popular_tags(records: Iterable[ContentRecord], limit: int = 10) -> list[TagAggregate]:
    return aggregate_tags(records)[: max(limit, 0)]


def content_by_tag(records: Iterable[ContentRecord], tag: str) -> TaggedContent:
    """All records carrying ``tag`` (case-insensitive), grouped by source.

    The returned tag keeps the casing of the first matching record in recency
    order, falling back to the requested spelling when nothing matches.
    """
    wanted = tag.casefold()
    matching = [
        record
        for record in sort_by_recency(_published(records))
        if any(candidate.casefold() == wanted for candidate in record.tags)
    ]

    grouped: dict[SourceType, list[ContentRecord]] = {source_type: [] for source_type in SourceType}
    for record in matching:
        grouped[record.source_type].append(record)

    original = next(
        (candidate for record in matching for candidate in record.tags if candidate.casefold() == wanted),
        tag,
    )
    return TaggedContent(
        tag=original,
        total_count=len(matching),
        blog=grouped[SourceType.BLOG],
        releases=grouped[SourceType.RELEASE],
        docs=grouped[SourceType.DOC],
    )


def related_tags(records: Iterable[ContentRecord], tag: str, limit: int = 5) -> list[str]:
    """Tags that co-occur with ``tag``, most frequent first."""
    wanted = tag.casefold()
    co_occurrence: Counter[str] = Counter()
    for record in _published(records):
        if not any(candidate.casefold() == wanted for candidate in record.tags):
            continue
        for candidate in record.tags:
            if candidate.casefold() != wanted:
                co_occurrence[candidate] += 1

    ordered = sorted(co_occurrence.items(), key=lambda item: (-item[1], item[0]))
    return [candidate for candidate, _ in ordered[: max(limit, 0)]]


def related_content(records: Iterable[ContentRecord], current: ContentRecord, limit: int = 3) -> list[ContentRecord]:
    """Same-source records sharing category or tags with ``current``.

    Scored ``+10`` for the same category and ``+5`` per shared tag; records
    scoring 0 are excluded. Releases have no categories, so only tags count.
    """
    current_tags = set(current.tags)
    use_category = current.source_type is not SourceType.RELEASE
    scored: list[tuple[int, ContentRecord]] = []
    for record in _published(records):
        if record.source_type is not current.source_type or record.id == current.id:
            continue
        score = 10 if use_category and record.category == current.category else 0
        score += 5 * len(current_tags.intersection(record.tags))
        if score > 0:
            scored.append((score, record))

    scored.sort(key=lambda item: (-item[0], -item[1].last_modified.timestamp(), item[1].id))
    return [record for _, record in scored[: max(limit, 0)]]


def category_counts(records: Iterable[ContentRecord]) -> list[tuple[str, int]]:
    """Records per category, most populated first."""
    counts = Counter(record.category for record in _published(records))
    return sorted(counts.items(), key=lambda item: (-item[1], item[0]))
