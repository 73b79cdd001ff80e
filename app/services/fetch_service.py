import logging
from typing import Optional

import httpx

from app.config import config
from app.exceptions import FetchError

logger = logging.getLogger(__name__)


_FETCH_ERRORS = (httpx.HTTPError, httpx.InvalidURL)


def _describe_failure(error: Exception, timeout: float) -> str:
    if isinstance(error, httpx.HTTPStatusError):
        response = error.response
        return f"HTTP {response.status_code}: {response.reason_phrase}"
    if isinstance(error, httpx.TimeoutException):
        return f"Timed out after {timeout:g}s"
    detail = str(error)
    return f"{type(error).__name__}: {detail}" if detail else type(error).__name__


class FetchService:
    """
    Downloads a domain's home page, trying https first and falling back
    to http once. No other retries are made.
    """

    def __init__(self, client: Optional[httpx.AsyncClient] = None,
                 timeout: float = None, user_agent: str = None):
        self.client = client
        self.timeout = timeout or config.FETCH_TIMEOUT_SECONDS
        self.headers = {"User-Agent": user_agent or config.FETCH_USER_AGENT}

    async def _get_text(self, client: httpx.AsyncClient, url: str) -> str:
        logger.info(f"Fetching {url}")
        response = await client.get(
            url,
            headers=self.headers,
            timeout=self.timeout,
            follow_redirects=True,
        )
        response.raise_for_status()
        html = response.text
        logger.info(f"Fetched {len(html)} characters from {url}")
        return html

    async def _fetch_with(self, client: httpx.AsyncClient, domain: str) -> str:
        try:
            return await self._get_text(client, f"https://{domain}")
        except _FETCH_ERRORS as https_error:
            reason = _describe_failure(https_error, self.timeout)
            logger.warning(f"HTTPS fetch of {domain} failed ({reason}), retrying over HTTP")
            try:
                return await self._get_text(client, f"http://{domain}")
            except _FETCH_ERRORS as http_error:
                logger.error(f"HTTP fetch of {domain} failed as well: {_describe_failure(http_error, self.timeout)}")
                raise FetchError(f"Failed to fetch {domain}: {reason}") from https_error

    async def fetch(self, domain: str) -> str:
        if self.client is not None:
            return await self._fetch_with(self.client, domain)
        async with httpx.AsyncClient() as client:
            return await self._fetch_with(client, domain)


fetch_service = FetchService()
