import logging
from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import PlainTextResponse

from app.middleware import request_deadline
from app.services.errors import ExtractError, FetchError
from app.services.fanout import find_favicon

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/favicon",
    response_class=PlainTextResponse,
    summary="Find the favicon of a single page",
    responses={
        400: {"description": "The `url` query parameter is missing."},
        404: {"description": "The page HTML could not be parsed."},
        500: {"description": "The page could not be fetched."},
    },
)
async def single_favicon(
    request: Request,
    url: Optional[str] = Query(default=None, description="Page URL; http:// is assumed."),
) -> PlainTextResponse:
    """Fetch *url* and return the absolute URL of its favicon as plain text."""
    if not url:
        return PlainTextResponse("Missing 'url' query parameter", status_code=400)

    logger.info("Favicon request received", extra={"url": url})

    try:
        icon = await find_favicon(url, deadline=request_deadline(request))
    except FetchError as exc:
        logger.error("Error fetching URL %s: %s", url, exc)
        return PlainTextResponse(str(exc), status_code=500)
    except ExtractError as exc:
        logger.warning("Error extracting favicon from %s: %s", url, exc)
        return PlainTextResponse(str(exc), status_code=404)

    return PlainTextResponse(icon)
