"""Shared test fixtures and configuration."""

from collections.abc import Callable
from datetime import datetime, timezone
import os
from pathlib import Path
import textwrap

import pytest

from site_content_index.domain.model import ContentRecord, SourceType


# Complete test environment so a developer's .env never leaks into tests
TEST_ENV = {
    "SITE_CONTENT_BASE_URL": "https://example.com",
    "SITE_CONTENT_LOG_LEVEL": "info",
    "SITE_CONTENT_LOG_JSON": "false",
    "SITE_CONTENT_MAX_QUERY_LENGTH": "200",
    "SITE_CONTENT_DEFAULT_MAX_RESULTS": "10",
    "SITE_CONTENT_MAX_RESULTS_CAP": "50",
}

for key, value in TEST_ENV.items():
    os.environ[key] = value


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Reset SITE_CONTENT_* variables to test defaults for every test."""
    for key in list(os.environ):
        if key.startswith("SITE_CONTENT_") and key not in TEST_ENV:
            monkeypatch.delenv(key, raising=False)
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)


def _front_matter_file(front_matter: str, body: str) -> str:
    header = textwrap.dedent(front_matter).strip()
    return f"---\n{header}\n---\n{textwrap.dedent(body).lstrip()}"


@pytest.fixture
def write_content() -> Callable[..., Path]:
    """Write ``root/relative`` with a YAML header and markdown body."""

    def _write(root: Path, relative: str, front_matter: str, body: str = "Body text.\n") -> Path:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(_front_matter_file(front_matter, body), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def content_dirs(tmp_path: Path) -> dict[SourceType, Path]:
    dirs = {
        SourceType.BLOG: tmp_path / "blog",
        SourceType.RELEASE: tmp_path / "releases",
        SourceType.DOC: tmp_path / "docs",
    }
    for path in dirs.values():
        path.mkdir(parents=True)
    return dirs


@pytest.fixture
def site_tree(content_dirs, write_content) -> dict[SourceType, Path]:
    """Small site: two blog posts (one draft), one release, two docs."""
    write_content(
        content_dirs[SourceType.BLOG],
        "webhooks-guide.md",
        """
        title: Webhooks Guide
        description: Receive events over HTTP
        tags: [webhooks, api]
        category: engineering
        publishedAt: 2024-03-01
        featured: true
        """,
        """
        # Webhooks

        Configure **webhooks** to receive [events](/docs/events).
        """,
    )
    write_content(
        content_dirs[SourceType.BLOG],
        "secret-roadmap.md",
        """
        title: Secret Roadmap
        tags: [roadmap]
        draft: true
        """,
    )
    write_content(
        content_dirs[SourceType.RELEASE],
        "v2-0-0.md",
        """
        version: 2.0.0
        title: Version 2.0
        date: 2024-02-01
        breaking: true
        tags: [api]
        """,
        "Breaking changes to the API.\n",
    )
    write_content(
        content_dirs[SourceType.DOC],
        "getting-started/api-basics.md",
        """
        title: API Basics
        description: Authenticate and make your first request
        tags: [api]
        updatedAt: 2024-01-10
        """,
        "Every request needs an API key.\n",
    )
    write_content(
        content_dirs[SourceType.DOC],
        "guides/deploy.mdx",
        """
        title: Deploying
        tags: [ops]
        publishedAt: 2023-12-01
        """,
        "<Callout>Ship it</Callout> with `make deploy`.\n",
    )
    return content_dirs


@pytest.fixture
def make_record() -> Callable[..., ContentRecord]:
    """Factory for ContentRecord with sensible defaults."""

    def _make(
        record_id: str = "post",
        *,
        source_type: SourceType = SourceType.BLOG,
        title: str = "A Post",
        when: datetime | None = None,
        **overrides,
    ) -> ContentRecord:
        timestamp = when or datetime(2024, 1, 1, tzinfo=timezone.utc)
        fields = {
            "id": record_id,
            "source_type": source_type,
            "title": title,
            "published_at": timestamp,
            "updated_at": timestamp,
        }
        fields.update(overrides)
        return ContentRecord(**fields)

    return _make
