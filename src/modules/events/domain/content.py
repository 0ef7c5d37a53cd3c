"""Lightweight HTML mining.

Regex over the raw document: no DOM parse, so malformed markup never raises.
"""

import re

_TITLE_RE = re.compile(r"<title[^>]*>([\s\S]*?)</title>", re.IGNORECASE)
_CANONICAL_REL_FIRST_RE = re.compile(
    r"""rel=["']canonical["'][^>]*href=["']([^"']+)["']""", re.IGNORECASE
)
_CANONICAL_HREF_FIRST_RE = re.compile(
    r"""href=["']([^"']+)["'][^>]*rel=["']canonical["']""", re.IGNORECASE
)


def extract_title(html: str | None) -> str | None:
    """First <title>, whitespace collapsed and lowercased."""
    if not html:
        return None
    match = _TITLE_RE.search(html)
    if not match:
        return None
    return " ".join(match.group(1).split()).lower()


def extract_canonical(html: str | None) -> str | None:
    """href of the first rel="canonical" link, whichever attribute comes first."""
    if not html:
        return None
    candidates = [
        m
        for m in (
            _CANONICAL_REL_FIRST_RE.search(html),
            _CANONICAL_HREF_FIRST_RE.search(html),
        )
        if m
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda m: m.start()).group(1)
