"""
Page fetcher for the watched page.

A single GET per run with a browser-like User-Agent; the origin's edge network
blocks requests without one.
"""

from typing import Optional

import httpx
import structlog

from checker.errors import FetchError
from utilities.config import CheckerConfig

logger = structlog.get_logger(__name__)


class PageFetcher:
    """Fetches the configured page and returns its HTML."""

    def __init__(self, config: CheckerConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the fetcher.

        Args:
            config: Checker configuration
            transport: Optional httpx transport, used to swap out the network
        """
        self.config = config
        self.logger = logger.bind(component="page_fetcher")

        # HTTP client configuration
        self.client_config = {
            "timeout": config.request_timeout,
            "headers": config.get_headers(),
            "follow_redirects": True,
        }
        if transport is not None:
            self.client_config["transport"] = transport

    async def fetch(self, url: Optional[str] = None) -> str:
        """
        Fetch page HTML.

        Args:
            url: Page URL, defaults to the configured page

        Returns:
            Response body as text

        Raises:
            FetchError: On a non-200 status, a network failure or a malformed URL
        """
        url = url or self.config.page_url

        try:
            async with httpx.AsyncClient(**self.client_config) as client:
                response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            self.logger.error("Page request failed", url=url, error=str(e))
            raise FetchError(f"Request to {url} failed: {e}", url=url) from e

        if response.status_code != 200:
            self.logger.error("Fetch returned non-200 status", url=url, status_code=response.status_code)
            raise FetchError(
                f"HTTP {response.status_code} from {url}",
                url=url,
                status_code=response.status_code
            )

        self.logger.info("Fetched page", url=url, content_length=len(response.text))
        return response.text
