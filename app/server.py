"""Process entry point: serve the API with uvicorn.

Usage:
    favicon-finder
    # or
    python -m app.server
"""

import logging

import uvicorn

from app.config import HOST, KEEP_ALIVE_TIMEOUT, PORT, SHUTDOWN_TIMEOUT
from app.main import app

logger = logging.getLogger(__name__)


def run() -> None:
    """Serve until interrupted, then drain in-flight requests for up to SHUTDOWN_TIMEOUT seconds."""
    logger.info("Server is running on port %d", PORT)
    uvicorn.run(
        app,
        host=HOST,
        port=PORT,
        timeout_keep_alive=KEEP_ALIVE_TIMEOUT,
        timeout_graceful_shutdown=SHUTDOWN_TIMEOUT,
        # keep the JSON logging configured in app.main
        log_config=None,
    )
    logger.info("Server stopped gracefully.")


if __name__ == "__main__":  # pragma: no cover
    run()
