"""Command-line entry point: ``users-api`` runs the HTTP service under uvicorn."""

import logging
import sys

import uvicorn

from .core.config import ConfigError, get_settings
from .core.observability import setup_logging
from .main import create_app

logger = logging.getLogger("users_api.server")

SHUTDOWN_TIMEOUT = 10


def main() -> int:
    try:
        settings = get_settings()
    except ConfigError as exc:
        print(f"failed to load config: {exc}", file=sys.stderr)
        return 1

    setup_logging(settings.log)
    logger.info("Starting server (%s)", settings.summary())

    try:
        app = create_app(settings)
    except FileNotFoundError as exc:
        logger.error("failed to create application: %s", exc)
        return 1

    uvicorn.run(
        app,
        host=settings.http.host,
        port=settings.http.port,
        timeout_keep_alive=settings.http.idle_timeout,
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT,
        log_config=None,
    )
    logger.info("Server exiting")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
