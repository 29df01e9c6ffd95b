"""Unit tests for cross-source tag aggregation."""

from datetime import datetime, timezone

import pytest

from site_content_index.domain.model import SourceType
from site_content_index.service_layer import tag_service


pytestmark = pytest.mark.unit


@pytest.fixture
def records(make_record):
    return [
        make_record(
            "webhooks-guide",
            title="Webhooks Guide",
            tags=("webhooks", "api"),
            category="engineering",
            when=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ),
        make_record(
            "api-basics",
            source_type=SourceType.DOC,
            title="API Basics",
            tags=("api",),
            category="getting-started",
            when=datetime(2024, 1, 10, tzinfo=timezone.utc),
        ),
        make_record(
            "v2-0-0",
            source_type=SourceType.RELEASE,
            title="Version 2.0",
            tags=("API", "breaking"),
            when=datetime(2024, 2, 1, tzinfo=timezone.utc),
        ),
        make_record("hidden", title="Hidden", tags=("api", "secret"), draft=True),
    ]


class TestAggregateTags:
    def test_counts_split_by_source(self, make_record):
        records = [
            make_record("webhooks-guide", tags=("webhooks", "api")),
            make_record("api-basics", source_type=SourceType.DOC, tags=("api",)),
        ]

        aggregates = {aggregate.tag: aggregate for aggregate in tag_service.aggregate_tags(records)}

        assert aggregates["api"].count == 2
        assert aggregates["api"].blog_count == 1
        assert aggregates["api"].doc_count == 1
        assert aggregates["webhooks"].count == 1
        assert aggregates["webhooks"].blog_count == 1

    def test_ordering_count_desc_then_tag(self, records):
        tags = [aggregate.tag for aggregate in tag_service.aggregate_tags(records)]

        assert tags == ["api", "API", "breaking", "webhooks"]

    def test_drafts_are_excluded(self, records):
        tags = {aggregate.tag for aggregate in tag_service.aggregate_tags(records)}

        assert "secret" not in tags

    def test_conservation_holds(self, records):
        for aggregate in tag_service.aggregate_tags(records):
            assert aggregate.count == aggregate.blog_count + aggregate.release_count + aggregate.doc_count

    def test_empty_input(self):
        assert tag_service.aggregate_tags([]) == []


def test_aggregate_by_category(records):
    by_category = tag_service.aggregate_by_category(records)

    assert list(by_category) == ["engineering", "general", "getting-started"]
    assert [aggregate.tag for aggregate in by_category["getting-started"]] == ["api"]


def test_aggregate_by_source_has_every_source(make_record):
    by_source = tag_service.aggregate_by_source([make_record("post", tags=("python",))])

    assert set(by_source) == set(SourceType)
    assert by_source[SourceType.DOC] == []
    assert by_source[SourceType.BLOG][0].tag == "python"


def test_popular_tags_limit(records):
    assert [aggregate.tag for aggregate in tag_service.popular_tags(records, limit=2)] == ["api", "API"]


class TestContentByTag:
    def test_case_insensitive_grouped_by_source(self, records):
        tagged = tag_service.content_by_tag(records, "Api")

        assert tagged.total_count == 3
        assert [record.id for record in tagged.blog] == ["webhooks-guide"]
        assert [record.id for record in tagged.releases] == ["v2-0-0"]
        assert [record.id for record in tagged.docs] == ["api-basics"]

    def test_keeps_casing_of_most_recent_match(self, records):
        assert tag_service.content_by_tag(records, "API").tag == "api"

    def test_unknown_tag(self, records):
        tagged = tag_service.content_by_tag(records, "graphql")

        assert tagged.total_count == 0
        assert tagged.tag == "graphql"

    def test_to_dict_uses_summaries(self, records):
        payload = tag_service.content_by_tag(records, "webhooks").to_dict()

        assert payload["blog"][0]["href"] == "/blog/webhooks-guide"
        assert "body" not in payload["blog"][0]


def test_related_tags(records):
    assert tag_service.related_tags(records, "api") == ["breaking", "webhooks"]


class TestRelatedContent:
    def test_scores_category_and_shared_tags(self, make_record):
        current = make_record("current", tags=("python", "api"), category="engineering")
        candidates = [
            current,
            make_record("same-category", category="engineering"),
            make_record("two-tags", tags=("python", "api"), category="news"),
            make_record("unrelated", category="news"),
            make_record("other-source", source_type=SourceType.DOC, tags=("python", "api"), category="engineering"),
        ]

        related = tag_service.related_content(candidates, current, limit=5)

        assert [record.id for record in related] == ["same-category", "two-tags"]

    def test_releases_ignore_category(self, make_record):
        current = make_record("v1", source_type=SourceType.RELEASE)
        other = make_record("v2", source_type=SourceType.RELEASE)

        assert tag_service.related_content([current, other], current) == []


def test_category_counts(records):
    assert tag_service.category_counts(records) == [("engineering", 1), ("general", 1), ("getting-started", 1)]
