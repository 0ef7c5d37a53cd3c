"""Permanent dead-link rules."""

from dataclasses import dataclass
from urllib.parse import urlsplit

MAX_REDIRECTS = 5


@dataclass(frozen=True)
class UrlParts:
    domain: str
    path: str


def should_tombstone(status: int, redirect_chain: list[str], score: int) -> bool:
    """Whether a check result marks the URL as permanently dead."""
    return (
        (status in (404, 410) and score < 10)
        or len(redirect_chain) >= MAX_REDIRECTS
        or (status >= 500 and score < 5)
    )


def extract_url_parts(url: str) -> UrlParts | None:
    """(hostname, path + query) key used to store and look up tombstones."""
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not hostname:
        return None

    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"
    return UrlParts(domain=hostname, path=path)


def tombstone_reason(status: int, score: int) -> str:
    return f"Status: {status}, Score: {score}"
