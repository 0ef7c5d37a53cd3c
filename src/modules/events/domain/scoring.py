"""Link health scoring.

Combines reachability, redirect cost and content relevance into a 0-100
score. Missing inputs (no body, no title) always take the lower-score path.
"""

import re
from dataclasses import dataclass

REDIRECT_STATUSES = frozenset({301, 302, 307, 308})
OK_STATUSES = frozenset({200, 203})

SPA_ROOT_MARKER = 'id="root"'
SPA_MAX_BODY_LENGTH = 2000
RICH_BODY_LENGTH = 1000

MAX_TITLE_KEYWORDS = 5

_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class LinkScore:
    score: int
    needs_js: bool


def _words(text: str) -> list[str]:
    return _NON_WORD_RE.sub(" ", text.lower()).split()


def build_keywords(title: str | None, organizer: str | None) -> list[str]:
    """Relevance keywords: up to 5 title words (> 3 chars), then organizer words (> 2 chars)."""
    keywords: list[str] = []
    if title:
        keywords.extend([w for w in _words(title) if len(w) > 3][:MAX_TITLE_KEYWORDS])
    if organizer:
        keywords.extend(w for w in _words(organizer) if len(w) > 2)
    return keywords


def is_html_like(content_type: str | None) -> bool:
    ct = (content_type or "").lower()
    return "text/html" in ct or "text/plain" in ct


def detect_spa_shell(body: str | None, html_like: bool) -> bool:
    """A near-empty document that needs client-side JS to render."""
    if not html_like:
        return False
    if not body:
        return True
    return len(body) < SPA_MAX_BODY_LENGTH and SPA_ROOT_MARKER in body


def _status_base(status: int) -> int:
    if status in OK_STATUSES:
        return 50
    if status in REDIRECT_STATUSES:
        return 30
    if status == 404:
        return 0
    if status >= 400:
        return max(0, 30 - (status - 400) * 2)
    return 0


def score_link(
    status: int,
    redirect_chain: list[str] | None = None,
    title: str | None = None,
    canonical: str | None = None,
    keywords: list[str] | None = None,
    body: str | None = None,
    html_like: bool = True,
) -> LinkScore:
    """Score a fetched link.

    Args:
        status: Final HTTP status
        redirect_chain: URLs visited while following redirects
        title: Normalized page title
        canonical: Extracted canonical URL
        keywords: Relevance keywords for the event
        body: Decoded body text, None when not read
        html_like: Whether the response content type is text/html or text/plain

    Returns:
        LinkScore with the clamped score and the SPA-shell flag
    """
    redirect_chain = redirect_chain or []
    keywords = keywords or []

    score = _status_base(status)

    if redirect_chain:
        score -= min(10, len(redirect_chain) * 2)

    if title and keywords:
        lowered = title.lower()
        matches = [k for k in keywords if k.lower() in lowered]
        if matches:
            score += min(20, len(matches) * 8)

    if canonical:
        score += 10

    needs_js = detect_spa_shell(body, html_like)
    if needs_js:
        score -= 5

    if body and len(body) > RICH_BODY_LENGTH:
        score += 5

    return LinkScore(score=max(0, min(100, score)), needs_js=needs_js)


def is_publishable(score: int, status: int, score_min: int) -> bool:
    """Publishing gate for an event link."""
    return score >= score_min and status < 400
