"""URL normalisation utilities: scheme defaulting, validation, base URL."""

_SCHEMES = ("http://", "https://")


def normalize_url(url: str) -> str:
    """Prefix *url* with ``http://`` unless it already has an http(s) scheme.

    Nothing else is touched: no trimming, no percent-encoding.
    """
    if not url.startswith(_SCHEMES):
        return "http://" + url
    return url


def is_valid_url(url: str) -> bool:
    return url.startswith(_SCHEMES)


def base_url(url: str) -> str:
    """Return the scheme+host(+port) prefix of *url*.

    Plain string slicing: everything before the first ``/`` that follows the
    ``//`` delimiter.  Query strings, fragments and userinfo get no special
    treatment, and a URL without a path is its own base.
    """
    # str.find returns -1 when "//" is absent, so the search starts at index 1
    split_index = url.find("//") + 2
    end_index = url.find("/", split_index)
    if end_index != -1:
        return url[:end_index]
    return url
