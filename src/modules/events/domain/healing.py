"""Best-effort URL repair before re-checking a dead link."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

TRACKING_PARAMS = frozenset(
    {
        "utm_source",
        "utm_medium",
        "utm_campaign",
        "utm_content",
        "utm_term",
        "fbclid",
        "gclid",
    }
)


def heal_url(url: str) -> str:
    """Strip tracking parameters and the fragment.

    Returns the input unchanged when it cannot be parsed or there is nothing
    to strip, so heal_url(heal_url(x)) == heal_url(x).
    """
    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    params = parse_qsl(parts.query, keep_blank_values=True)
    kept = [(key, value) for key, value in params if key not in TRACKING_PARAMS]

    if len(kept) == len(params) and "#" not in url:
        return url

    query = urlencode(kept) if len(kept) != len(params) else parts.query
    return urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))
