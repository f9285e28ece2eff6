"""Concurrent favicon lookup for a batch of URLs.

Every URL gets its own task.  Each task posts exactly one
:class:`~app.models.batch_entry.BatchEntry` to a shared queue, so the batch
result always has one entry per requested URL (duplicates included), in the
order the tasks finished.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

import httpx

from app.models.batch_entry import BatchEntry
from app.services.errors import FaviconError
from app.services.extractor import extract_favicon
from app.services.fetcher import fetch_html, new_client
from app.services.normalizer import base_url, normalize_url

logger = logging.getLogger(__name__)


async def find_favicon(
    url: str,
    *,
    client: Optional[httpx.AsyncClient] = None,
    deadline: Optional[float] = None,
) -> str:
    """Fetch *url* and return its favicon URL.

    Raises:
        FetchError: if the page could not be retrieved.
        ExtractError: if the page HTML could not be parsed.
    """
    html = await fetch_html(url, client=client, deadline=deadline)
    return await asyncio.to_thread(extract_favicon, html, base_url(normalize_url(url)))


async def _process_url(
    queue: "asyncio.Queue[BatchEntry]",
    client: httpx.AsyncClient,
    url: str,
    deadline: Optional[float],
) -> None:
    entry = BatchEntry(url=url)
    try:
        entry.icon = await find_favicon(url, client=client, deadline=deadline)
        entry.success = 1
    except FaviconError as exc:
        logger.warning("Favicon lookup failed for %s – %s", url, exc)
    except Exception:
        logger.exception("Unexpected error looking up favicon for %s", url)
    await queue.put(entry)


async def fan_out(
    urls: Sequence[str],
    *,
    client: Optional[httpx.AsyncClient] = None,
    deadline: Optional[float] = None,
) -> List[BatchEntry]:
    """Look up the favicon of every URL in *urls* concurrently.

    Failures never abort the batch: a URL whose fetch or parse fails yields an
    entry with ``success=0`` and an empty ``icon``.  Once *deadline* (an
    absolute time on the event loop clock) passes, fetches still in flight are
    abandoned and reported as failed.

    Returns:
        One :class:`BatchEntry` per input URL, in completion order.
    """
    queue: asyncio.Queue[BatchEntry] = asyncio.Queue()

    async def _collect(http: httpx.AsyncClient) -> List[BatchEntry]:
        async with asyncio.TaskGroup() as tg:
            for url in urls:
                tg.create_task(_process_url(queue, http, url, deadline))
            return [await queue.get() for _ in urls]

    if client is not None:
        entries = await _collect(client)
    else:
        async with new_client() as owned:
            entries = await _collect(owned)

    logger.info(
        "Batch finished: %d of %d succeeded",
        sum(entry.success for entry in entries),
        len(entries),
    )
    return entries
