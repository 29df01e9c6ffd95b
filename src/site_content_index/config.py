"""Centralized configuration for site-content-index using Pydantic Settings."""

from pathlib import Path
from typing import Annotated

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from site_content_index.domain.model import SourceType


class ScoringWeights(BaseModel):
    """Relevance weights for the ranking engine.

    These are tuning knobs, not semantic invariants; defaults match the
    production site's behaviour.
    """

    model_config = {"extra": "forbid", "frozen": True}

    title: Annotated[int, Field(ge=0, description="Title contains the query")] = 100
    title_exact: Annotated[int, Field(ge=0, description="Added when the title equals the query")] = 50
    description: Annotated[int, Field(ge=0, description="Description contains the query")] = 50
    tag: Annotated[int, Field(ge=0, description="Per tag containing the query")] = 30
    category: Annotated[int, Field(ge=0, description="Category contains the query")] = 25
    content_occurrence: Annotated[int, Field(ge=0, description="Per occurrence in the stripped body")] = 5


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    Every variable is prefixed with ``SITE_CONTENT_`` (for example
    ``SITE_CONTENT_DOCS_DIR``) and validated at startup.
    """

    model_config = SettingsConfigDict(
        env_prefix="SITE_CONTENT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    # Content sources
    blog_dir: Path = Field(default=Path("content/blog"), description="Root directory of blog posts")
    releases_dir: Path = Field(default=Path("content/releases"), description="Root directory of release notes")
    docs_dir: Path = Field(default=Path("content/docs"), description="Root directory of documentation pages")
    file_extensions: str = Field(default=".md,.mdx", description="Comma-separated content file extensions")

    # Site
    base_url: str = Field(default="https://example.com", description="Public site URL used for sitemap entries")
    sitemap_tag_limit: int = Field(default=50, ge=0, description="Maximum tag pages listed in the sitemap")

    # Search
    max_query_length: int = Field(default=200, ge=1, description="Longest accepted search query")
    default_max_results: int = Field(default=10, ge=1, description="Result count when the caller gives none")
    max_results_cap: int = Field(default=50, ge=1, description="Upper bound on requested result counts")
    excerpt_radius: int = Field(default=50, ge=0, description="Characters shown on each side of a body match")

    weight_title: int = Field(default=100, ge=0)
    weight_title_exact: int = Field(default=50, ge=0)
    weight_description: int = Field(default=50, ge=0)
    weight_tag: int = Field(default=30, ge=0)
    weight_category: int = Field(default=25, ge=0)
    weight_content_occurrence: int = Field(default=5, ge=0)

    # Server settings
    host: str = Field(default="127.0.0.1", description="HTTP bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="HTTP bind port")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")

    @model_validator(mode="after")
    def _check_result_bounds(self) -> "Settings":
        if self.default_max_results > self.max_results_cap:
            raise ValueError(
                "SITE_CONTENT_DEFAULT_MAX_RESULTS must not exceed SITE_CONTENT_MAX_RESULTS_CAP "
                f"({self.default_max_results} > {self.max_results_cap})"
            )
        return self

    def get_file_extensions(self) -> tuple[str, ...]:
        """Normalized extensions, each with a leading dot."""
        extensions = []
        for raw in self.file_extensions.split(","):
            value = raw.strip().lower()
            if not value:
                continue
            extensions.append(value if value.startswith(".") else f".{value}")
        return tuple(extensions)

    def source_dirs(self) -> dict[SourceType, Path]:
        """Root directory per content source."""
        return {
            SourceType.BLOG: self.blog_dir,
            SourceType.RELEASE: self.releases_dir,
            SourceType.DOC: self.docs_dir,
        }

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            title=self.weight_title,
            title_exact=self.weight_title_exact,
            description=self.weight_description,
            tag=self.weight_tag,
            category=self.weight_category,
            content_occurrence=self.weight_content_occurrence,
        )
