"""Tests for app.services.fetcher.fetch_html.

Outbound requests are served by an ``httpx.MockTransport`` so the tests run
without network access.
"""

import asyncio
from unittest.mock import patch

import httpx
import pytest

from app.services.errors import (
    BodyReadError,
    HTTPStatusError,
    NetworkError,
    RequestCreationError,
)
from app.services.fetcher import fetch_html

_HTML = "<html><head><link rel='icon' href='/i.png'></head><body>hi</body></html>"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class _BrokenStream(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b"<html>"
        raise httpx.ReadError("connection reset")


# ---------------------------------------------------------------------------
# Success paths
# ---------------------------------------------------------------------------

class TestFetchSuccess:
    @pytest.mark.asyncio
    async def test_returns_body_text(self):
        async with _client(lambda request: httpx.Response(200, text=_HTML)) as client:
            assert await fetch_html("https://example.com", client=client) == _HTML

    @pytest.mark.asyncio
    async def test_scheme_less_url_fetched_over_http(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text=_HTML)

        async with _client(handler) as client:
            await fetch_html("example.com/page", client=client)

        assert seen == ["http://example.com/page"]

    @pytest.mark.asyncio
    async def test_follows_redirects(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"location": "https://example.com/new"})
            return httpx.Response(200, text="moved here")

        async with _client(handler) as client:
            assert await fetch_html("https://example.com/old", client=client) == "moved here"

    @pytest.mark.asyncio
    async def test_invalid_bytes_are_replaced(self):
        handler = lambda request: httpx.Response(200, content=b"<p>\xff</p>")
        async with _client(handler) as client:
            assert await fetch_html("https://example.com", client=client) == "<p>�</p>"


# ---------------------------------------------------------------------------
# Failure paths
# ---------------------------------------------------------------------------

class TestFetchErrors:
    @pytest.mark.asyncio
    async def test_non_200_status_raises(self):
        async with _client(lambda request: httpx.Response(404)) as client:
            with pytest.raises(HTTPStatusError) as exc_info:
                await fetch_html("https://example.com/missing", client=client)

        assert exc_info.value.status_code == 404
        assert "404" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_other_2xx_is_not_success(self):
        async with _client(lambda request: httpx.Response(204)) as client:
            with pytest.raises(HTTPStatusError):
                await fetch_html("https://example.com", client=client)

    @pytest.mark.asyncio
    async def test_transport_error_raises_network_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await fetch_html("https://example.com", client=client)

    @pytest.mark.asyncio
    async def test_malformed_url_raises_request_creation_error(self):
        async with _client(lambda request: httpx.Response(200)) as client:
            with pytest.raises(RequestCreationError):
                await fetch_html("http://example.com:notaport/", client=client)

    @pytest.mark.asyncio
    async def test_non_idna_host_raises_request_creation_error(self):
        async with _client(lambda request: httpx.Response(200)) as client:
            with pytest.raises(RequestCreationError):
                await fetch_html("https://xn--.com", client=client)

    @pytest.mark.asyncio
    async def test_broken_body_raises_body_read_error(self):
        handler = lambda request: httpx.Response(200, stream=_BrokenStream())
        async with _client(handler) as client:
            with pytest.raises(BodyReadError):
                await fetch_html("https://example.com", client=client)

    @pytest.mark.asyncio
    async def test_optional_size_cap(self):
        handler = lambda request: httpx.Response(200, content=b"x" * 100)
        with patch("app.services.fetcher.MAX_CONTENT_SIZE", 10):
            async with _client(handler) as client:
                with pytest.raises(BodyReadError):
                    await fetch_html("https://example.com", client=client)

    @pytest.mark.asyncio
    async def test_no_size_cap_by_default(self):
        body = "x" * (11 * 1024 * 1024)
        async with _client(lambda request: httpx.Response(200, text=body)) as client:
            assert len(await fetch_html("https://example.com", client=client)) == len(body)


# ---------------------------------------------------------------------------
# Deadlines
# ---------------------------------------------------------------------------

class TestFetchDeadline:
    @pytest.mark.asyncio
    async def test_expired_deadline_aborts_fetch(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, text=_HTML)

        loop = asyncio.get_running_loop()
        async with _client(handler) as client:
            with pytest.raises(NetworkError):
                await asyncio.wait_for(
                    fetch_html("https://example.com", client=client, deadline=loop.time() + 0.05),
                    timeout=2,
                )

    @pytest.mark.asyncio
    async def test_fetch_timeout_applies_without_deadline(self):
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(10)
            return httpx.Response(200, text=_HTML)

        with patch("app.services.fetcher.FETCH_TIMEOUT", 0.05):
            async with _client(handler) as client:
                with pytest.raises(NetworkError):
                    await asyncio.wait_for(
                        fetch_html("https://example.com", client=client), timeout=2
                    )
