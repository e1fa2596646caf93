from typing import Optional

import httpx

from wcag_audit.features.analysis.exceptions import FetchFailure, TransportFailure
from wcag_audit.platform.config import settings
from wcag_audit.platform.logger import get_logger

logger = get_logger(__name__)


class PageFetcher:
    """
    Single-attempt HTML fetcher.

    No retries: a non-2xx answer raises FetchFailure with the reason phrase,
    anything that prevents a response raises TransportFailure. The only bound
    on duration is the client timeout.
    """

    def __init__(
        self,
        timeout: float = settings.FETCH_TIMEOUT_SECONDS,
        user_agent: str = settings.FETCH_USER_AGENT,
        follow_redirects: bool = settings.FETCH_FOLLOW_REDIRECTS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self.follow_redirects = follow_redirects
        self.transport = transport

    async def fetch(self, url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                headers={"User-Agent": self.user_agent, "Accept": "text/html,*/*;q=0.8"},
                transport=self.transport,
            ) as client:
                response = await client.get(url)
        except httpx.HTTPError as e:
            message = str(e) or type(e).__name__
            logger.warning(f"Transport failure fetching {url}: {message}")
            raise TransportFailure(message) from e

        if not response.is_success:
            status_text = response.reason_phrase or f"HTTP {response.status_code}"
            logger.warning(f"Fetching {url} returned {response.status_code} {status_text}")
            raise FetchFailure(response.status_code, status_text)

        return response.text
