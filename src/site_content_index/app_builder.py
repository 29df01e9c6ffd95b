"""Composable builder for the content search HTTP app."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from starlette.applications import Starlette
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from site_content_index.config import Settings
from site_content_index.domain.model import SourceType
from site_content_index.domain.search import QueryValidationError
from site_content_index.observability import (
    TraceContextMiddleware,
    configure_logging,
    get_metrics,
    get_metrics_content_type,
    init_tracing,
)
from site_content_index.runtime.health import build_health_endpoint
from site_content_index.service_layer.content_service import ContentService
from site_content_index.service_layer.sitemap import build_sitemap, render_sitemap_xml


if TYPE_CHECKING:
    from starlette.requests import Request


logger = logging.getLogger(__name__)


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


def _parse_limit(raw: str | None, default: int) -> int:
    """Parse a ``limit`` query parameter.

    Raises:
        QueryValidationError: Not an integer.
    """
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise QueryValidationError(f"limit must be an integer (got {raw!r})") from exc


class AppBuilder:
    """Builds the ASGI app from settings (environment by default)."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        service: ContentService | None = None,
        configure_observability: bool = True,
    ) -> None:
        self.settings = settings or Settings()
        self.service = service or ContentService.from_settings(self.settings)
        self.configure_observability = configure_observability

    def build(self) -> Starlette:
        """Build and return the Starlette application."""
        if self.configure_observability:
            configure_logging(level=self.settings.log_level, json_output=self.settings.log_json)
            init_tracing()

        app = Starlette(
            debug=self.settings.log_level.lower() == "debug",
            routes=self._build_routes(),
            lifespan=self._build_lifespan_manager(),
        )
        app.state.content_service = self.service
        app.add_middleware(TraceContextMiddleware)
        return app

    def _build_lifespan_manager(self):
        service = self.service

        @asynccontextmanager
        async def lifespan(_: Starlette):
            snapshot = await service.refresh()
            logger.info("Content index ready with %d documents", len(snapshot.index))
            yield

        return lifespan

    def _build_routes(self) -> list[Route]:
        return [
            Route("/api/search", endpoint=self._build_search_endpoint(), methods=["GET"]),
            Route("/api/search", endpoint=self._build_rebuild_endpoint(), methods=["POST"]),
            Route("/api/search/suggestions", endpoint=self._build_suggestions_endpoint(), methods=["GET"]),
            Route("/api/tags", endpoint=self._build_tags_endpoint(), methods=["GET"]),
            Route("/api/tags/{tag}", endpoint=self._build_tag_detail_endpoint(), methods=["GET"]),
            Route("/api/content", endpoint=self._build_content_endpoint(), methods=["GET"]),
            Route("/sitemap.xml", endpoint=self._build_sitemap_endpoint(), methods=["GET"]),
            Route("/health", endpoint=build_health_endpoint(self.service), methods=["GET"]),
            Route("/metrics", endpoint=self._build_metrics_endpoint(), methods=["GET"]),
        ]

    def _build_search_endpoint(self):
        service = self.service

        async def search_endpoint(request: Request) -> JSONResponse:
            query = request.query_params.get("q", "")
            try:
                limit = _parse_limit(request.query_params.get("limit"), service.default_max_results)
                response = service.search(query, limit)
            except QueryValidationError as exc:
                return _error(str(exc), 400)
            except Exception:
                logger.exception("Search for %r failed", query)
                return JSONResponse({"results": [], "query": query, "total": 0})
            return JSONResponse(response.to_dict())

        return search_endpoint

    def _build_rebuild_endpoint(self):
        service = self.service

        async def rebuild_endpoint(_: Request) -> JSONResponse:
            try:
                snapshot = await service.refresh()
            except Exception as exc:
                logger.exception("Search index rebuild failed")
                return JSONResponse({"success": False, "error": str(exc)}, status_code=500)
            return JSONResponse(
                {
                    "success": True,
                    "message": "Search index rebuilt",
                    "documents": len(snapshot.index),
                }
            )

        return rebuild_endpoint

    def _build_suggestions_endpoint(self):
        service = self.service

        async def suggestions_endpoint(request: Request) -> JSONResponse:
            query = request.query_params.get("q", "")
            try:
                limit = _parse_limit(request.query_params.get("limit"), 5)
                suggestions = service.suggestions(query, limit)
            except QueryValidationError as exc:
                return _error(str(exc), 400)
            except Exception:
                logger.exception("Suggestions for %r failed", query)
                suggestions = []
            return JSONResponse({"suggestions": suggestions})

        return suggestions_endpoint

    def _build_tags_endpoint(self):
        service = self.service

        async def tags_endpoint(request: Request) -> JSONResponse:
            try:
                limit = _parse_limit(request.query_params.get("limit"), 0)
            except QueryValidationError as exc:
                return _error(str(exc), 400)
            tags = service.popular_tags(limit) if limit > 0 else service.all_tags()
            categories = [{"category": category, "count": count} for category, count in service.category_counts()]
            return JSONResponse(
                {"tags": [tag.model_dump() for tag in tags], "total": len(tags), "categories": categories}
            )

        return tags_endpoint

    def _build_tag_detail_endpoint(self):
        service = self.service

        async def tag_detail_endpoint(request: Request) -> JSONResponse:
            tag = request.path_params["tag"]
            tagged = service.content_by_tag(tag)
            if tagged.total_count == 0:
                return _error(f"Tag not found: {tag}", 404)
            payload = tagged.to_dict()
            payload["related_tags"] = service.related_tags(tagged.tag)
            return JSONResponse(payload)

        return tag_detail_endpoint

    def _build_content_endpoint(self):
        service = self.service

        async def content_endpoint(request: Request) -> JSONResponse:
            raw_source = request.query_params.get("source")
            source = None
            if raw_source:
                try:
                    source = SourceType(raw_source)
                except ValueError:
                    valid = ", ".join(source_type.value for source_type in SourceType)
                    return _error(f"Unknown source {raw_source!r}; expected one of: {valid}", 400)
            order = request.query_params.get("order", "recent")
            if order == "version":
                if source not in (None, SourceType.RELEASE):
                    return _error("order=version applies only to source=release", 400)
                records = service.releases_by_version()
            elif order == "recent":
                records = service.get_all_content(source)
            else:
                return _error(f"Unknown order {order!r}; expected one of: recent, version", 400)
            return JSONResponse({"content": [record.summary() for record in records], "total": len(records)})

        return content_endpoint

    def _build_sitemap_endpoint(self):
        service = self.service
        settings = self.settings

        async def sitemap_endpoint(_: Request) -> Response:
            snapshot = service.snapshot()
            entries = build_sitemap(
                snapshot.records,
                snapshot.tags,
                settings.base_url,
                tag_limit=settings.sitemap_tag_limit,
            )
            return Response(content=render_sitemap_xml(entries), media_type="application/xml")

        return sitemap_endpoint

    def _build_metrics_endpoint(self):
        async def metrics_endpoint(_: Request) -> Response:
            return Response(content=get_metrics(), media_type=get_metrics_content_type())

        return metrics_endpoint


def create_app(settings: Settings | None = None) -> Starlette:
    return AppBuilder(settings).build()
