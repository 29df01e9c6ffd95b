"""Main ASGI application entry point.

Usage:
    # Serve content from ./content/{blog,releases,docs}
    python -m site_content_index.app

    # Or point at another tree
    SITE_CONTENT_DOCS_DIR=/srv/site/docs python -m site_content_index.app
"""

import logging

from pydantic import ValidationError

from site_content_index.app_builder import create_app
from site_content_index.config import Settings


logger = logging.getLogger(__name__)


def main() -> None:
    """Run the HTTP server with settings from the environment."""
    import uvicorn

    try:
        settings = Settings()
    except ValidationError as exc:
        logger.error("Configuration is invalid: %s", exc)
        raise SystemExit(1) from exc

    app = create_app(settings)

    logger.info("Starting server on %s:%d", settings.host, settings.port)
    logger.info("Health check: http://%s:%d/health", settings.host, settings.port)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        log_config=None,  # Don't let uvicorn override our logging config
    )


if __name__ == "__main__":
    main()
