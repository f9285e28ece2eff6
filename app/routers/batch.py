import logging
from typing import List

from fastapi import APIRouter, HTTPException, Query, Request

from app.middleware import request_deadline
from app.models.batch_entry import BatchEntry
from app.services.fanout import fan_out

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/",
    response_model=List[BatchEntry],
    summary="Find the favicons of several pages concurrently",
    description=(
        "Repeat the `url` query parameter once per page.  Every page is fetched "
        "in parallel and the response holds one entry per `url` occurrence, in "
        "completion order.  Pages that fail are reported with `success: 0`."
    ),
    responses={400: {"description": "No `url` query parameter was given."}},
)
async def batch_favicons(
    request: Request,
    url: List[str] = Query(default=[]),
) -> List[BatchEntry]:
    """Fan out one favicon lookup per requested URL and aggregate the results."""
    if not url:
        raise HTTPException(status_code=400, detail="Missing 'url' query parameters")

    logger.info("Batch request received", extra={"url_count": len(url)})

    return await fan_out(url, deadline=request_deadline(request))
