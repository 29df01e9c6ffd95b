"""Filesystem loader for front-matter content files.

Walks one source directory, parses each matching file's YAML header into the
source's typed front matter model, and skips drafts. A damaged file is logged
and reported in ``LoadResult.errors``; it never aborts the rest of the load.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from pathlib import Path, PurePosixPath
from typing import Any

import anyio
from pydantic import ValidationError

from site_content_index.domain.model import FRONT_MATTER_MODELS, ParsedContentFile, SourceType
from site_content_index.utils.front_matter import FrontMatterError, parse_front_matter


logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".md", ".mdx")


class ContentParseError(RuntimeError):
    """A single content file could not be turned into a parsed record."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


@dataclass(frozen=True)
class LoadError:
    """Out-of-band report of a file that was skipped."""

    path: str
    reason: str

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "reason": self.reason}


@dataclass
class LoadResult:
    """Best-effort output of one source load."""

    source_type: SourceType
    root: Path
    files: list[ParsedContentFile] = field(default_factory=list)
    errors: list[LoadError] = field(default_factory=list)
    drafts_skipped: int = 0
    source_available: bool = True


def slug_from_path(relative_path: str) -> str:
    """Slug derived from a relative path: ``/`` separators, extension stripped."""
    normalized = PurePosixPath(relative_path.replace("\\", "/"))
    return str(normalized.with_suffix("")) if normalized.suffix else str(normalized)


def _is_draft(metadata: dict[str, Any]) -> bool:
    value = metadata.get("draft", False)
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


def _format_validation_error(exc: ValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "front matter"
        problems.append(f"{location}: {error.get('msg', 'invalid')}")
    return "; ".join(problems)


class ContentLoader:
    """Loads one content source from a directory tree.

    Traversal is sequential and sorted, so repeated loads of the same tree
    produce the same order.
    """

    def __init__(
        self,
        root: Path,
        source_type: SourceType,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.root = Path(root).expanduser()
        self.source_type = source_type
        self.extensions = tuple(ext.lower() for ext in extensions)

    async def load(self, *, loaded_at: datetime | None = None) -> LoadResult:
        """Load every non-draft file under ``root``.

        Never raises for missing directories or damaged files; both are
        reported on the returned ``LoadResult``.
        """
        load_time = loaded_at or datetime.now(timezone.utc)
        result = LoadResult(source_type=self.source_type, root=self.root)

        root = anyio.Path(self.root)
        if not await root.is_dir():
            logger.warning("Content directory not found for %s: %s", self.source_type.value, self.root)
            result.source_available = False
            return result

        seen_slugs: dict[str, str] = {}
        for path in await self._discover(root):
            relative_path = path.relative_to(root).as_posix()
            try:
                parsed = await self._load_file(path, relative_path, load_time)
            except ContentParseError as exc:
                logger.warning("Skipping %s file %s: %s", self.source_type.value, exc.path, exc.reason)
                result.errors.append(LoadError(path=exc.path, reason=exc.reason))
                continue

            if parsed is None:
                result.drafts_skipped += 1
                continue

            if parsed.slug in seen_slugs:
                reason = f"duplicate slug {parsed.slug!r} (already loaded from {seen_slugs[parsed.slug]})"
                logger.warning("Skipping %s file %s: %s", self.source_type.value, relative_path, reason)
                result.errors.append(LoadError(path=relative_path, reason=reason))
                continue

            seen_slugs[parsed.slug] = relative_path
            result.files.append(parsed)

        logger.info(
            "Loaded %d %s files from %s (%d drafts skipped, %d errors)",
            len(result.files),
            self.source_type.value,
            self.root,
            result.drafts_skipped,
            len(result.errors),
        )
        return result

    async def _discover(self, root: anyio.Path) -> list[anyio.Path]:
        matches: list[anyio.Path] = []
        async for path in root.rglob("*"):
            if path.suffix.lower() not in self.extensions:
                continue
            if await path.is_file():
                matches.append(path)
        return sorted(matches, key=lambda candidate: candidate.relative_to(root).as_posix())

    async def _load_file(self, path: anyio.Path, relative_path: str, loaded_at: datetime) -> ParsedContentFile | None:
        """Parse one file; ``None`` means it is a draft."""
        try:
            async with await anyio.open_file(path, "r", encoding="utf-8") as handle:
                content = await handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            raise ContentParseError(relative_path, f"unreadable file: {exc}") from exc

        try:
            metadata, body = parse_front_matter(content)
        except FrontMatterError as exc:
            raise ContentParseError(relative_path, str(exc)) from exc

        if _is_draft(metadata):
            logger.debug("Skipping draft %s file %s", self.source_type.value, relative_path)
            return None

        model = FRONT_MATTER_MODELS[self.source_type]
        try:
            front_matter = model.model_validate(metadata)
        except ValidationError as exc:
            raise ContentParseError(relative_path, _format_validation_error(exc)) from exc

        return ParsedContentFile(
            source_type=self.source_type,
            slug=slug_from_path(relative_path),
            relative_path=relative_path,
            front_matter=front_matter,
            body=body,
            loaded_at=loaded_at,
        )
