from typing import Literal

from pydantic import BaseModel


class BatchEntry(BaseModel):
    """Outcome of one URL of a batch request."""

    url: str
    icon: str = ""
    success: Literal[0, 1] = 0
    """``1`` when the page was fetched and parsed, ``0`` on any failure."""
