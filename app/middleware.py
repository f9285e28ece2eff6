"""Per-request timeout wrapper."""

import asyncio
import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from app.config import REQUEST_TIMEOUT, REQUEST_TIMEOUT_GRACE

logger = logging.getLogger(__name__)


def request_deadline(request: Request) -> Optional[float]:
    """Return the event-loop time by which *request* must be answered, if any."""
    return getattr(request.state, "deadline", None)


class TimeoutMiddleware(BaseHTTPMiddleware):
    """Bound every request to *timeout* seconds.

    The deadline is published on ``request.state.deadline`` so handlers can
    pass it down to outbound fetches.  A handler still running a short grace
    period after the deadline is cancelled and the client gets a 503.
    """

    def __init__(
        self,
        app: ASGIApp,
        timeout: float = REQUEST_TIMEOUT,
        grace: float = REQUEST_TIMEOUT_GRACE,
    ) -> None:
        super().__init__(app)
        self.timeout = timeout
        self.grace = grace

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        deadline = asyncio.get_running_loop().time() + self.timeout
        request.state.deadline = deadline
        try:
            async with asyncio.timeout_at(deadline + self.grace):
                return await call_next(request)
        except TimeoutError:
            logger.error("Request timed out: %s", request.url)
            return PlainTextResponse("Request timed out", status_code=503)
