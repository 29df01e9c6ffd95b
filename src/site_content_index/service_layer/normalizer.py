"""Map parsed content files from each source into the unified ContentRecord.

Pure functions only: no filesystem access happens here.
"""

from collections.abc import Iterable
import logging

from site_content_index.domain.model import (
    DEFAULT_CATEGORY,
    BlogFrontMatter,
    ContentRecord,
    DocFrontMatter,
    ParsedContentFile,
    ReleaseFrontMatter,
    SourceType,
)
from site_content_index.search.markdown import calculate_reading_time, generate_excerpt
from site_content_index.utils.versions import version_sort_key


logger = logging.getLogger(__name__)


def _doc_category(slug: str, declared: str | None) -> str:
    if declared:
        return declared
    head, separator, _ = slug.partition("/")
    return head if separator and head else DEFAULT_CATEGORY


def normalize(parsed: ParsedContentFile) -> ContentRecord:
    """Convert one parsed file into a ContentRecord.

    Raises:
        ValueError: The file's source type and front matter variant disagree,
            or the source type is not handled.
    """
    front_matter = parsed.front_matter
    body = parsed.body
    excerpt = front_matter.description or generate_excerpt(body)
    reading_time = calculate_reading_time(body)

    match parsed.source_type:
        case SourceType.BLOG:
            if not isinstance(front_matter, BlogFrontMatter):
                raise ValueError(f"Blog file {parsed.relative_path} carries {type(front_matter).__name__}")
            published_at = front_matter.published_at or front_matter.updated_at or parsed.loaded_at
            return ContentRecord(
                id=parsed.slug,
                source_type=SourceType.BLOG,
                title=front_matter.title,
                description=front_matter.description,
                body=body,
                excerpt=excerpt,
                tags=tuple(front_matter.tags),
                category=front_matter.category,
                published_at=published_at,
                updated_at=front_matter.updated_at or published_at,
                draft=front_matter.draft,
                featured=front_matter.featured,
                reading_time=reading_time,
            )
        case SourceType.RELEASE:
            if not isinstance(front_matter, ReleaseFrontMatter):
                raise ValueError(f"Release file {parsed.relative_path} carries {type(front_matter).__name__}")
            published_at = front_matter.date or parsed.loaded_at
            return ContentRecord(
                id=parsed.slug,
                source_type=SourceType.RELEASE,
                title=front_matter.display_title,
                description=front_matter.description,
                body=body,
                excerpt=excerpt,
                tags=tuple(front_matter.tags),
                category=DEFAULT_CATEGORY,
                published_at=published_at,
                updated_at=published_at,
                draft=front_matter.draft,
                featured=front_matter.featured,
                version=front_matter.version,
                breaking=front_matter.breaking,
                reading_time=reading_time,
            )
        case SourceType.DOC:
            if not isinstance(front_matter, DocFrontMatter):
                raise ValueError(f"Doc file {parsed.relative_path} carries {type(front_matter).__name__}")
            published_at = front_matter.published_at or front_matter.updated_at or parsed.loaded_at
            return ContentRecord(
                id=parsed.slug,
                source_type=SourceType.DOC,
                title=front_matter.title,
                description=front_matter.description,
                body=body,
                excerpt=excerpt,
                tags=tuple(front_matter.tags),
                category=_doc_category(parsed.slug, front_matter.category),
                published_at=published_at,
                updated_at=front_matter.updated_at or published_at,
                draft=front_matter.draft,
                featured=front_matter.featured,
                reading_time=reading_time,
            )
    raise ValueError(f"Unhandled source type: {parsed.source_type!r}")


def _recency_key(record: ContentRecord) -> tuple[float, str, str]:
    return -record.last_modified.timestamp(), record.id, record.source_type.value


def sort_by_recency(records: Iterable[ContentRecord]) -> list[ContentRecord]:
    """Most recently modified first; ties broken by id, then source."""
    return sorted(records, key=_recency_key)


def sort_releases(records: Iterable[ContentRecord]) -> list[ContentRecord]:
    """Release records ordered by semantic version, newest first."""
    releases = [record for record in records if record.source_type is SourceType.RELEASE]
    return sorted(releases, key=lambda record: (version_sort_key(record.version or record.id), record.id))


def normalize_all(files: Iterable[ParsedContentFile]) -> list[ContentRecord]:
    """Normalize, drop drafts and sort by recency."""
    records: list[ContentRecord] = []
    for parsed in files:
        if parsed.is_draft:
            continue
        records.append(normalize(parsed))
    return sort_by_recency(records)
