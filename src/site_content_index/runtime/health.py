"""Health endpoint factory."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse


if TYPE_CHECKING:
    from starlette.requests import Request

    from site_content_index.service_layer.content_service import ContentService


def build_health_endpoint(service: ContentService):
    """Return a coroutine function reporting per-source load health.

    The overall status is ``degraded`` when any source is missing or failed;
    the endpoint itself always answers 200 so a partial site stays routable.
    """

    async def health_check(_: Request) -> JSONResponse:
        snapshot = service.snapshot()
        sources = {status.source_type.value: status.to_dict() for status in snapshot.sources}
        all_healthy = all(status.healthy for status in snapshot.sources)

        return JSONResponse(
            {
                "status": "healthy" if all_healthy else "degraded",
                "records": len(snapshot.records),
                "indexed": len(snapshot.index),
                "tags": len(snapshot.tags),
                "load_errors": snapshot.error_count,
                "built_at": snapshot.built_at.isoformat(),
                "sources": sources,
            }
        )

    return health_check
