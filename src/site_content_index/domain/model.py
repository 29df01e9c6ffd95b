"""Domain model - source types, front matter variants and the unified record.

Following the same layering as the rest of the package:
- Domain model has NO dependencies on infrastructure
- Front matter variants validate loosely typed YAML headers at the boundary
- ContentRecord is the immutable, source-independent shape every
  downstream component (tags, search, sitemap) consumes
"""

from datetime import date, datetime, time, timezone
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.dataclasses import dataclass


DEFAULT_CATEGORY = "general"


class SourceType(str, Enum):
    """Closed set of content sources."""

    BLOG = "blog"
    RELEASE = "release"
    DOC = "doc"

    @property
    def route_prefix(self) -> str:
        """URL prefix for records of this source."""
        match self:
            case SourceType.BLOG:
                return "/blog"
            case SourceType.RELEASE:
                return "/releases"
            case SourceType.DOC:
                return "/docs"
        raise ValueError(f"Unhandled source type: {self!r}")


def coerce_datetime(value: Any) -> datetime | None:
    """Coerce YAML date/datetime/ISO string values into aware UTC datetimes."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Unsupported date value: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_tags(value: Any) -> list[str]:
    """Accept a YAML list or comma-separated string; drop blanks, keep order, dedupe."""
    if value is None:
        return []
    if isinstance(value, str):
        raw_items: list[Any] = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        raw_items = list(value)
    else:
        raise ValueError(f"Tags must be a list or comma-separated string, got {type(value).__name__}")

    seen: set[str] = set()
    tags: list[str] = []
    for item in raw_items:
        if item is None:
            continue
        tag = str(item).strip()
        if tag and tag not in seen:
            seen.add(tag)
            tags.append(tag)
    return tags


class _FrontMatter(BaseModel):
    """Fields shared by every source's metadata header."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    description: str = ""
    tags: list[str] = Field(default_factory=list)
    author: str | None = None
    draft: bool = False
    featured: bool = False

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: Any) -> list[str]:
        return coerce_tags(value)

    @field_validator("description", mode="before")
    @classmethod
    def _normalize_description(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("draft", "featured", mode="before")
    @classmethod
    def _none_is_false(cls, value: Any) -> Any:
        return False if value is None else value


class BlogFrontMatter(_FrontMatter):
    title: Annotated[str, Field(min_length=1)]
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    category: str = DEFAULT_CATEGORY
    cover_image: str | None = Field(default=None, alias="coverImage")

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return str(value).strip() if value is not None else value

    @field_validator("category", mode="before")
    @classmethod
    def _default_category(cls, value: Any) -> str:
        text = "" if value is None else str(value).strip()
        return text or DEFAULT_CATEGORY

    @field_validator("published_at", "updated_at", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)


class ReleaseFrontMatter(_FrontMatter):
    """Release notes key off ``version``; title is optional."""

    version: str = Field(min_length=1)
    title: str = ""
    date: datetime | None = None
    breaking: bool = False
    prerelease: bool = False

    @field_validator("version", mode="before")
    @classmethod
    def _stringify_version(cls, value: Any) -> Any:
        # YAML reads ``version: 1.2`` as a float
        return str(value).strip() if value is not None else value

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> str:
        return "" if value is None else str(value).strip()

    @field_validator("date", mode="before")
    @classmethod
    def _parse_date(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator("breaking", "prerelease", mode="before")
    @classmethod
    def _none_is_false_release(cls, value: Any) -> Any:
        return False if value is None else value

    @property
    def display_title(self) -> str:
        return self.title or f"v{self.version}"


class DocFrontMatter(_FrontMatter):
    """Documentation pages; category falls back to the top-level folder."""

    title: Annotated[str, Field(min_length=1)]
    category: str | None = None
    published_at: datetime | None = Field(default=None, alias="publishedAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")
    order: int = 0

    @field_validator("title", mode="before")
    @classmethod
    def _strip_title(cls, value: Any) -> Any:
        return str(value).strip() if value is not None else value

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category_is_none(cls, value: Any) -> str | None:
        text = "" if value is None else str(value).strip()
        return text or None

    @field_validator("published_at", "updated_at", mode="before")
    @classmethod
    def _parse_dates(cls, value: Any) -> datetime | None:
        return coerce_datetime(value)

    @field_validator("order", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value


FrontMatter = BlogFrontMatter | ReleaseFrontMatter | DocFrontMatter

FRONT_MATTER_MODELS: dict[SourceType, type[_FrontMatter]] = {
    SourceType.BLOG: BlogFrontMatter,
    SourceType.RELEASE: ReleaseFrontMatter,
    SourceType.DOC: DocFrontMatter,
}


@dataclass(frozen=True)
class ParsedContentFile:
    """A content file read from disk with its validated header.

    ``loaded_at`` is the time of the load pass; it stands in for any date the
    header does not declare.
    """

    source_type: SourceType
    slug: str
    relative_path: str
    front_matter: FrontMatter
    body: str
    loaded_at: datetime

    @property
    def is_draft(self) -> bool:
        return self.front_matter.draft


@dataclass(frozen=True)
class ContentRecord:
    """Unified, source-independent content record.

    Identity is ``(source_type, id)``; ids may collide across sources.
    """

    id: Annotated[str, Field(min_length=1)]
    source_type: SourceType
    title: Annotated[str, Field(min_length=1)]
    published_at: datetime
    updated_at: datetime
    description: str = ""
    body: str = ""
    excerpt: str = ""
    tags: tuple[str, ...] = ()
    category: str = DEFAULT_CATEGORY
    draft: bool = False
    featured: bool = False
    version: str | None = None
    breaking: bool = False
    reading_time: Annotated[int, Field(ge=1)] = 1

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("ContentRecord must have a non-empty title")
        deduplicated = tuple(dict.fromkeys(tag for tag in self.tags if tag))
        if deduplicated != self.tags:
            object.__setattr__(self, "tags", deduplicated)

    @property
    def key(self) -> tuple[SourceType, str]:
        return self.source_type, self.id

    @property
    def href(self) -> str:
        return f"{self.source_type.route_prefix}/{self.id}"

    @property
    def last_modified(self) -> datetime:
        return self.updated_at

    def summary(self) -> dict[str, Any]:
        """Listing payload for the presentation layer; omits the body."""
        return {
            "id": self.id,
            "source_type": self.source_type.value,
            "title": self.title,
            "description": self.description,
            "excerpt": self.excerpt,
            "href": self.href,
            "tags": list(self.tags),
            "category": self.category,
            "published_at": self.published_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "featured": self.featured,
            "version": self.version,
            "breaking": self.breaking,
            "reading_time": self.reading_time,
        }
