"""HTTP link checker.

HEAD first (cheap), GET when a body or a second opinion is needed. Every
transport failure becomes a zero-score LinkCheckResult instead of raising.
"""

import time

import httpx
from loguru import logger

from src.core.config import settings
from src.modules.events.domain.content import extract_canonical, extract_title
from src.modules.events.domain.fetcher import LinkCheckResult
from src.modules.events.domain.scoring import is_html_like, score_link


class HttpLinkChecker:
    """Fetches event URLs with httpx and scores them.

    Args:
        timeout: Per-request timeout in seconds
        user_agent: Stable identity sent to remote servers
        transport: Optional httpx transport (tests use httpx.MockTransport)
    """

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout if timeout is not None else settings.LINK_CHECK_TIMEOUT_SEC
        self.user_agent = user_agent or settings.LINK_CHECK_USER_AGENT
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "DNT": "1",
            "Upgrade-Insecure-Requests": "1",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers=self.headers,
            transport=self._transport,
        )

    async def check_url(
        self,
        url: str,
        keywords: list[str] | None = None,
    ) -> LinkCheckResult:
        """Fetch, mine and score a URL."""
        start_time = time.time()
        keywords = keywords or []

        try:
            async with self._client() as client:
                response, body = await self._fetch(client, url)
        except httpx.TimeoutException as e:
            logger.warning(f"Link check timeout for {url}: {e}")
            return LinkCheckResult.failed(url, f"Timeout: {e}")
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Link check failed for {url}: {e}")
            return LinkCheckResult.failed(url, str(e) or type(e).__name__)
        except Exception as e:
            logger.exception(f"Link check error for {url}: {e}")
            return LinkCheckResult.failed(url, str(e) or type(e).__name__)

        status = response.status_code
        html_like = is_html_like(response.headers.get("content-type"))
        redirect_chain = self._redirect_chain(response)
        title = extract_title(body)
        canonical = extract_canonical(body)

        link_score = score_link(
            status=status,
            redirect_chain=redirect_chain,
            title=title,
            canonical=canonical,
            keywords=keywords,
            body=body,
            html_like=html_like,
        )

        duration_ms = int((time.time() - start_time) * 1000)
        logger.debug(
            f"Checked {url}: status={status}, score={link_score.score}, "
            f"redirects={len(redirect_chain)}, duration={duration_ms}ms"
        )

        return LinkCheckResult(
            final_url=str(response.url),
            status=status,
            redirect_chain=redirect_chain,
            score=link_score.score,
            needs_js=link_score.needs_js,
            canonical=canonical,
            title=title,
        )

    async def _fetch(
        self,
        client: httpx.AsyncClient,
        url: str,
    ) -> tuple[httpx.Response, str | None]:
        """Run the HEAD/GET sequence and return the final response and body."""
        head: httpx.Response | None = None
        try:
            head = await client.head(url)
        except httpx.HTTPError as e:
            # Some servers reject HEAD outright
            logger.debug(f"HEAD failed for {url}, falling back to GET: {e}")

        if head is None or head.status_code >= 400 or not self._is_text(head):
            response = await client.get(url)
            return response, self._read_body(response)

        if not is_html_like(head.headers.get("content-type")):
            return head, None

        # HEAD decides the status; the GET only supplies the body
        try:
            response = await client.get(url)
        except httpx.HTTPError as e:
            logger.debug(f"GET after successful HEAD failed for {url}: {e}")
            return head, None

        body = self._read_body(response)
        if body is None:
            logger.debug(
                f"Body GET after successful HEAD unusable for {url}: "
                f"status={response.status_code}"
            )
            return head, None
        return response, body

    @staticmethod
    def _is_text(response: httpx.Response) -> bool:
        return "text" in response.headers.get("content-type", "").lower()

    @staticmethod
    def _read_body(response: httpx.Response) -> str | None:
        """Decoded body for readable HTML-like responses, else None."""
        if response.status_code >= 400:
            return None
        if not is_html_like(response.headers.get("content-type")):
            return None
        try:
            return response.text
        except (UnicodeDecodeError, LookupError) as e:
            logger.debug(f"Failed to decode body of {response.url}: {e}")
            return None

    @staticmethod
    def _redirect_chain(response: httpx.Response) -> list[str]:
        """URLs visited after the requested one, ending with the final URL."""
        if not response.history:
            return []
        hops = [str(r.url) for r in response.history[1:]]
        hops.append(str(response.url))
        return hops
