"""Sitemap generation from content records and tag aggregates.

Entries are built from whatever records loaded successfully, so one broken
source never removes the others from the sitemap.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal
from urllib.parse import quote

from lxml import etree  # type: ignore[import-untyped]

from site_content_index.domain.model import ContentRecord, SourceType
from site_content_index.domain.search import TagAggregate


SITEMAP_NAMESPACE = "http://www.sitemaps.org/schemas/sitemap/0.9"

ChangeFrequency = Literal["always", "hourly", "daily", "weekly", "monthly", "yearly", "never"]


@dataclass(frozen=True)
class SitemapEntry:
    url: str
    last_modified: datetime
    change_frequency: ChangeFrequency
    priority: float


@dataclass(frozen=True)
class StaticPage:
    path: str
    change_frequency: ChangeFrequency
    priority: float


DEFAULT_STATIC_PAGES: tuple[StaticPage, ...] = (
    StaticPage("", "daily", 1.0),
    StaticPage("/features", "weekly", 0.8),
    StaticPage("/pricing", "weekly", 0.8),
    StaticPage("/about", "monthly", 0.6),
    StaticPage("/contact", "monthly", 0.5),
    StaticPage("/blog", "daily", 0.9),
    StaticPage("/docs", "weekly", 0.9),
    StaticPage("/releases", "weekly", 0.8),
    StaticPage("/search", "monthly", 0.4),
    StaticPage("/tags", "weekly", 0.6),
)


def _record_entry(base_url: str, record: ContentRecord) -> SitemapEntry:
    url = f"{base_url}{record.href}"
    match record.source_type:
        case SourceType.BLOG:
            return SitemapEntry(url, record.last_modified, "monthly", 0.8 if record.featured else 0.6)
        case SourceType.RELEASE:
            return SitemapEntry(url, record.last_modified, "yearly", 0.7)
        case SourceType.DOC:
            return SitemapEntry(url, record.last_modified, "monthly", 0.8)
    raise ValueError(f"Unhandled source type: {record.source_type!r}")


def build_sitemap(
    records: Iterable[ContentRecord],
    tag_aggregates: Sequence[TagAggregate],
    base_url: str,
    *,
    static_pages: Sequence[StaticPage] = DEFAULT_STATIC_PAGES,
    tag_limit: int = 50,
    now: datetime | None = None,
) -> list[SitemapEntry]:
    """Static pages, one entry per published record, then the top tag pages."""
    generated_at = now or datetime.now(timezone.utc)
    root = base_url.rstrip("/")

    entries = [
        SitemapEntry(f"{root}{page.path}", generated_at, page.change_frequency, page.priority)
        for page in static_pages
    ]
    entries.extend(_record_entry(root, record) for record in records if not record.draft)
    entries.extend(
        SitemapEntry(
            f"{root}/tags/{quote(aggregate.tag.lower(), safe='')}",
            generated_at,
            "weekly",
            0.5,
        )
        for aggregate in tag_aggregates[: max(tag_limit, 0)]
    )
    return entries


def _tag(name: str) -> str:
    return f"{{{SITEMAP_NAMESPACE}}}{name}"


def render_sitemap_xml(entries: Iterable[SitemapEntry]) -> bytes:
    """Serialize entries as a sitemaps.org ``urlset`` document."""
    urlset = etree.Element(_tag("urlset"), nsmap={None: SITEMAP_NAMESPACE})
    for entry in entries:
        url = etree.SubElement(urlset, _tag("url"))
        etree.SubElement(url, _tag("loc")).text = entry.url
        etree.SubElement(url, _tag("lastmod")).text = entry.last_modified.astimezone(timezone.utc).isoformat()
        etree.SubElement(url, _tag("changefreq")).text = entry.change_frequency
        etree.SubElement(url, _tag("priority")).text = f"{entry.priority:.1f}"
    return etree.tostring(urlset, xml_declaration=True, encoding="UTF-8", pretty_print=True)
