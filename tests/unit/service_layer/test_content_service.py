"""Unit tests for content orchestration and snapshot refresh."""

import logging

import pytest

from site_content_index.adapters.filesystem_loader import ContentLoader
from site_content_index.config import ScoringWeights, Settings
from site_content_index.domain.model import SourceType
from site_content_index.domain.search import QueryValidationError
from site_content_index.search import ranking
from site_content_index.service_layer.content_service import ContentService, ContentSnapshot


pytestmark = pytest.mark.unit


@pytest.fixture
def service(site_tree):
    return ContentService(site_tree)


@pytest.mark.asyncio
async def test_refresh_builds_records_tags_and_index(service):
    snapshot = await service.refresh()

    assert [record.id for record in snapshot.records] == [
        "webhooks-guide",
        "v2-0-0",
        "getting-started/api-basics",
        "guides/deploy",
    ]
    assert [(aggregate.tag, aggregate.count) for aggregate in snapshot.tags][:1] == [("api", 3)]
    assert len(snapshot.index) == 4
    assert service.snapshot() is snapshot
    assert all(status.healthy for status in snapshot.sources)


@pytest.mark.asyncio
async def test_two_blog_records_aggregate_and_rank(content_dirs, write_content):
    blog = content_dirs[SourceType.BLOG]
    write_content(blog, "api-basics.md", "title: API Basics\ntags: [api]\npublishedAt: 2024-01-01")
    write_content(
        blog,
        "webhooks-guide.md",
        "title: Webhooks Guide\ntags: [webhooks, api]\npublishedAt: 2024-01-02",
        "Set up webhooks.\n",
    )
    write_content(blog, "changelog.md", "title: Changelog\npublishedAt: 2024-01-03", "Fixed webhooks retries.\n")
    service = ContentService({SourceType.BLOG: blog})

    snapshot = await service.refresh()

    assert [(aggregate.tag, aggregate.count) for aggregate in snapshot.tags] == [("api", 2), ("webhooks", 1)]
    response = service.search("webhooks")
    assert [result.entry.title for result in response.results] == ["Webhooks Guide", "Changelog"]
    assert response.results[0].score >= 130


@pytest.mark.asyncio
async def test_drafts_never_surface(content_dirs, write_content):
    blog = content_dirs[SourceType.BLOG]
    write_content(blog, "live.md", "title: Shipped Feature")
    write_content(blog, "unreleased.md", "title: Unreleased Feature\ndraft: true", "Feature details.\n")
    service = ContentService({SourceType.BLOG: blog})

    await service.refresh()

    assert [record.title for record in service.get_all_content()] == ["Shipped Feature"]
    assert [result.entry.title for result in service.search("Feature").results] == ["Shipped Feature"]
    assert service.search("Unreleased").results == []


@pytest.mark.asyncio
async def test_overlong_query_scans_nothing(service, monkeypatch):
    await service.refresh()
    scanned = []
    monkeypatch.setattr(ranking, "score_entry", lambda entry, *_args: scanned.append(entry) or 0)

    with pytest.raises(QueryValidationError):
        service.search("q" * 201)

    assert scanned == []


@pytest.mark.asyncio
async def test_missing_sources_do_not_hide_healthy_one(tmp_path, write_content):
    docs = tmp_path / "docs"
    write_content(docs, "api.md", "title: API Reference\ntags: [api]")
    write_content(docs, "auth.md", "title: Auth\ntags: [api, security]", "Use the api key.\n")
    service = ContentService(
        {
            SourceType.BLOG: tmp_path / "missing-blog",
            SourceType.RELEASE: tmp_path / "missing-releases",
            SourceType.DOC: docs,
        }
    )

    snapshot = await service.refresh()

    by_source = service.tags_by_source()
    assert by_source[SourceType.BLOG] == []
    assert by_source[SourceType.RELEASE] == []
    assert [(aggregate.tag, aggregate.doc_count) for aggregate in by_source[SourceType.DOC]] == [
        ("api", 2),
        ("security", 1),
    ]
    assert [result.entry.id for result in service.search("api").results] == ["api", "auth"]
    unavailable = {status.source_type for status in snapshot.sources if not status.available}
    assert unavailable == {SourceType.BLOG, SourceType.RELEASE}


@pytest.mark.asyncio
async def test_unexpected_loader_failure_is_isolated(site_tree, monkeypatch, caplog):
    original_load = ContentLoader.load

    async def _flaky_load(self, *, loaded_at=None):
        if self.source_type is SourceType.RELEASE:
            raise RuntimeError("disk on fire")
        return await original_load(self, loaded_at=loaded_at)

    monkeypatch.setattr(ContentLoader, "load", _flaky_load)
    service = ContentService(site_tree)

    with caplog.at_level(logging.ERROR):
        snapshot = await service.refresh()

    assert {record.source_type for record in snapshot.records} == {SourceType.BLOG, SourceType.DOC}
    failed = next(status for status in snapshot.sources if status.source_type is SourceType.RELEASE)
    assert failed.failure == "disk on fire"
    assert not failed.healthy
    assert "disk on fire" in caplog.text


@pytest.mark.asyncio
async def test_load_errors_are_reported_on_snapshot(content_dirs, write_content):
    docs = content_dirs[SourceType.DOC]
    write_content(docs, "good.md", "title: Good")
    (docs / "bad.md").write_text("---\ntitle: [\n---\n", encoding="utf-8")
    service = ContentService({SourceType.DOC: docs})

    snapshot = await service.refresh()

    assert snapshot.error_count == 1
    assert snapshot.sources[0].errors[0].path == "bad.md"
    assert [record.id for record in snapshot.records] == ["good"]


@pytest.mark.asyncio
async def test_impossible_date_does_not_drop_source(content_dirs, write_content):
    blog = content_dirs[SourceType.BLOG]
    write_content(blog, "good.md", "title: Good")
    write_content(blog, "bad.md", "title: Bad\npublishedAt: 2024-02-30")
    service = ContentService({SourceType.BLOG: blog})

    snapshot = await service.refresh()

    assert [record.id for record in snapshot.records] == ["good"]
    assert snapshot.sources[0].failure is None
    assert [error.path for error in snapshot.sources[0].errors] == ["bad.md"]


@pytest.mark.asyncio
async def test_refresh_swaps_snapshot(service, site_tree, write_content):
    first = await service.refresh()
    write_content(site_tree[SourceType.DOC], "new-page.md", "title: New Page")

    second = await service.refresh()

    assert first is not second
    assert len(second.records) == len(first.records) + 1
    assert "new-page" not in {record.id for record in first.records}


def test_snapshot_before_refresh_is_empty(site_tree):
    service = ContentService(site_tree)

    assert isinstance(service.snapshot(), ContentSnapshot)
    assert service.get_all_content() == []
    assert service.search("api").results == []


@pytest.mark.asyncio
async def test_get_all_content_filters_by_source(service):
    await service.refresh()

    assert [record.id for record in service.get_all_content(SourceType.RELEASE)] == ["v2-0-0"]
    assert service.get_record(SourceType.DOC, "guides/deploy").title == "Deploying"
    assert service.get_record(SourceType.BLOG, "guides/deploy") is None


@pytest.mark.asyncio
async def test_releases_by_version_ignores_recency(content_dirs, write_content):
    releases = content_dirs[SourceType.RELEASE]
    write_content(releases, "v1-9-0.md", "version: 1.9.0\ndate: 2024-05-01")
    write_content(releases, "v1-10-0.md", "version: 1.10.0\ndate: 2024-01-01")
    write_content(releases, "v0-5-0.md", "version: 0.5.0\ndate: 2024-06-01")
    service = ContentService({SourceType.RELEASE: releases})
    await service.refresh()

    assert [record.id for record in service.get_all_content(SourceType.RELEASE)] == ["v0-5-0", "v1-9-0", "v1-10-0"]
    assert [record.id for record in service.releases_by_version()] == ["v1-10-0", "v1-9-0", "v0-5-0"]


@pytest.mark.asyncio
async def test_category_counts(service):
    await service.refresh()

    counts = dict(service.category_counts())
    assert counts["engineering"] == 1
    assert sum(counts.values()) == 4


@pytest.mark.asyncio
async def test_tag_helpers(service):
    await service.refresh()

    assert service.content_by_tag("API").total_count == 3
    assert service.related_tags("api") == ["webhooks"]
    assert [aggregate.tag for aggregate in service.popular_tags(1)] == ["api"]
    assert "engineering" in service.tags_by_category()
    record = service.get_record(SourceType.DOC, "getting-started/api-basics")
    assert service.related_content(record) == []


@pytest.mark.asyncio
async def test_aggregation_failures_return_empty(service, monkeypatch, caplog):
    await service.refresh()

    def _boom(*_args, **_kwargs):
        raise RuntimeError("boom")

    from site_content_index.service_layer import tag_service

    monkeypatch.setattr(tag_service, "aggregate_by_category", _boom)
    monkeypatch.setattr(tag_service, "related_tags", _boom)

    with caplog.at_level(logging.ERROR):
        assert service.tags_by_category() == {}
        assert service.related_tags("api") == []

    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_weights_and_limits_from_settings(site_tree):
    settings = Settings(
        blog_dir=site_tree[SourceType.BLOG],
        releases_dir=site_tree[SourceType.RELEASE],
        docs_dir=site_tree[SourceType.DOC],
        default_max_results=1,
        weight_tag=0,
    )
    service = ContentService.from_settings(settings)
    await service.refresh()

    assert service.weights == ScoringWeights(tag=0)
    assert len(service.search("api").results) == 1
