import asyncio
import logging
from typing import Optional

import httpx

from app.config import FETCH_TIMEOUT, MAX_CONTENT_SIZE, MAX_REDIRECTS
from app.services.errors import (
    BodyReadError,
    HTTPStatusError,
    InvalidURLError,
    NetworkError,
    RequestCreationError,
)
from app.services.normalizer import is_valid_url, normalize_url

logger = logging.getLogger(__name__)


def new_client() -> httpx.AsyncClient:
    """Return an HTTP client configured with the fetch timeout and redirect policy."""
    return httpx.AsyncClient(
        follow_redirects=True,
        max_redirects=MAX_REDIRECTS,
        timeout=FETCH_TIMEOUT,
    )


async def fetch_html(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    deadline: Optional[float] = None,
) -> str:
    """Fetch *url* and return the response body as a string.

    The URL is normalised first (``http://`` is assumed when no scheme is
    given).  The whole fetch is bounded by ``FETCH_TIMEOUT`` and, when given,
    by *deadline*, an absolute time on the running event loop's clock.  When
    *client* is omitted a fresh client is opened and closed for this call.

    Raises:
        InvalidURLError: if the normalised URL has no http(s) scheme.
        RequestCreationError: if the request cannot be built from the URL.
        NetworkError: on transport errors, timeouts or an expired deadline.
        HTTPStatusError: if the final response status is not 200.
        BodyReadError: if the body cannot be read in full.
    """
    url = normalize_url(url)
    if not is_valid_url(url):
        raise InvalidURLError(f"invalid URL: {url}")

    limit = asyncio.get_running_loop().time() + FETCH_TIMEOUT
    if deadline is not None:
        limit = min(limit, deadline)

    try:
        async with asyncio.timeout_at(limit):
            if client is not None:
                return await _get(client, url)
            async with new_client() as owned:
                return await _get(owned, url)
    except TimeoutError as exc:
        raise NetworkError("failed to fetch page: deadline exceeded") from exc


async def _get(client: httpx.AsyncClient, url: str) -> str:
    try:
        request = client.build_request("GET", url)
    except (httpx.InvalidURL, ValueError) as exc:
        # non-IDNA hosts surface as idna.IDNAError, a ValueError
        raise RequestCreationError(f"failed to create request: {exc}") from exc

    try:
        response = await client.send(request, stream=True, follow_redirects=True)
    except httpx.RequestError as exc:
        raise NetworkError(f"failed to fetch page: {exc!r}") from exc

    try:
        if response.status_code != 200:
            raise HTTPStatusError(url, response.status_code)
        return await _read_body(response)
    finally:
        await response.aclose()


async def _read_body(response: httpx.Response) -> str:
    content_length = response.headers.get("content-length")
    if MAX_CONTENT_SIZE and content_length and content_length.isdigit():
        if int(content_length) > MAX_CONTENT_SIZE:
            raise BodyReadError("Response body exceeds the maximum allowed size.")

    chunks = []
    total = 0
    try:
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if MAX_CONTENT_SIZE and total > MAX_CONTENT_SIZE:
                raise BodyReadError("Response body exceeds the maximum allowed size.")
            chunks.append(chunk)
    except (httpx.HTTPError, httpx.StreamError) as exc:
        raise BodyReadError(f"failed to read response body: {exc!r}") from exc

    logger.debug("Fetched %d bytes from %s", total, response.url)
    return b"".join(chunks).decode(errors="replace")
