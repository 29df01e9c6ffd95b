"""Build the in-memory search index from unified content records."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
import logging

from site_content_index.domain.model import ContentRecord
from site_content_index.domain.search import SearchIndex, SearchIndexEntry
from site_content_index.search.markdown import strip_markdown


logger = logging.getLogger(__name__)


def build_entry(record: ContentRecord) -> SearchIndexEntry:
    """Project one record into its searchable plain-text form."""
    return SearchIndexEntry(
        id=record.id,
        source_type=record.source_type,
        title=record.title,
        description=record.description,
        content=strip_markdown(record.body),
        tags=record.tags,
        category=record.category,
        href=record.href,
        last_modified=record.last_modified,
    )


def build_index(records: Iterable[ContentRecord], *, built_at: datetime | None = None) -> SearchIndex:
    """Build a fresh index snapshot.

    Draft records are skipped. Entries keep the input order, and records with
    the same title from different sources are indexed separately.
    """
    entries: list[SearchIndexEntry] = []
    skipped = 0
    for record in records:
        if record.draft:
            skipped += 1
            continue
        entries.append(build_entry(record))

    if skipped:
        logger.debug("Skipped %d draft records while building search index", skipped)

    index = SearchIndex(entries=tuple(entries), built_at=built_at or datetime.now(timezone.utc))
    logger.debug("Built search index with %d entries", len(index))
    return index
