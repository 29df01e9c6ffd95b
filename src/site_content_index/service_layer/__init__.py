"""Service layer - normalization, tag aggregation, sitemap and content orchestration."""

from site_content_index.service_layer.content_service import ContentService, ContentSnapshot, SourceStatus
from site_content_index.service_layer.normalizer import normalize, normalize_all, sort_by_recency, sort_releases
from site_content_index.service_layer.sitemap import build_sitemap, render_sitemap_xml


__all__ = [
    "ContentService",
    "ContentSnapshot",
    "SourceStatus",
    "build_sitemap",
    "normalize",
    "normalize_all",
    "render_sitemap_xml",
    "sort_by_recency",
    "sort_releases",
]
