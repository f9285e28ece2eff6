"""Favicon extraction from page HTML.

:func:`extract_favicon` scans every ``<link>`` element of a document and picks
the icon a browser would most likely show:

* a ``<link>`` is a candidate when its ``rel`` contains ``"icon"`` (so
  ``"shortcut icon"`` and ``"apple-touch-icon"`` count) and its ``href`` is
  not empty;
* the last candidate with ``rel="icon"`` *and* a ``sizes`` attribute wins;
* otherwise the first candidate in document order wins;
* otherwise ``<base>/favicon.ico`` is assumed.
"""

from typing import Iterator, NamedTuple

from bs4 import BeautifulSoup
from bs4.builder import ParserRejectedMarkup

from app.services.errors import ParseError

FALLBACK_PATH = "/favicon.ico"


class IconCandidate(NamedTuple):
    rel: str
    href: str
    sizes: str


def _parse(html: str) -> BeautifulSoup:
    try:
        # rel is multi-valued in bs4 by default; the policy needs the raw string
        return BeautifulSoup(html, "lxml", multi_valued_attributes=None)
    except ParserRejectedMarkup as exc:
        raise ParseError(f"failed to parse HTML: {exc}") from exc


def _link_candidates(soup: BeautifulSoup) -> Iterator[IconCandidate]:
    # find_all walks the tree depth-first, in document order
    for link in soup.find_all("link"):
        yield IconCandidate(
            rel=str(link.get("rel") or ""),
            href=str(link.get("href") or ""),
            sizes=str(link.get("sizes") or ""),
        )


def iter_icon_candidates(html: str) -> Iterator[IconCandidate]:
    """Yield the ``(rel, href, sizes)`` triple of every ``<link>`` in *html*.

    Raises:
        ParseError: if the markup cannot be parsed at all.
    """
    yield from _link_candidates(_parse(html))


def resolve_href(href: str, base_url: str) -> str:
    """Make a root-relative or protocol-relative *href* absolute.

    Plain relative paths (``icon.png``) and absolute URLs are returned as-is.
    """
    if href.startswith("//"):
        return "http:" + href
    if href.startswith("/"):
        return base_url + href
    return href


def extract_favicon(html: str, base_url: str) -> str:
    """Return the most likely favicon URL declared in *html*.

    Args:
        html: Raw page HTML.
        base_url: Scheme and host of the page, used for root-relative hrefs
            and for the ``/favicon.ico`` fallback.

    Raises:
        ParseError: if the markup cannot be parsed at all.  A document without
            any icon link is not an error; it yields the fallback URL.
    """
    first_icon = ""
    sized_icon = ""
    for candidate in iter_icon_candidates(html):
        if "icon" not in candidate.rel or not candidate.href:
            continue

        href = resolve_href(candidate.href, base_url)

        # Last sized rel="icon" wins; sizes are not compared.
        if candidate.rel == "icon" and candidate.sizes:
            sized_icon = href

        if not first_icon:
            first_icon = href

    if sized_icon:
        return sized_icon
    if first_icon:
        return first_icon
    return base_url + FALLBACK_PATH
