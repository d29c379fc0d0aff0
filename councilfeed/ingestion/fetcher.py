"""HTTP retrieval of feeds and pages."""

import logging
from typing import Optional

import httpx

from ..config import FetchConfig
from .models import FetchedDocument

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """A fetch that could not produce a 2xx response."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class FeedFetcher:
    """Fetch a feed or page in a single attempt."""

    def __init__(
        self,
        config: Optional[FetchConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize fetcher.

        ``transport`` replaces the network layer, e.g. with
        ``httpx.MockTransport`` in tests.
        """
        self.config = config or FetchConfig()
        self.transport = transport

    @property
    def headers(self) -> dict:
        return {
            "User-Agent": self.config.user_agent,
            "Accept": self.config.accept,
        }

    async def fetch(self, url: str) -> FetchedDocument:
        """GET ``url`` once; raise FetchError on transport failure or non-2xx."""
        logger.info("Fetching %s", url)
        try:
            async with httpx.AsyncClient(
                timeout=self.config.timeout,
                headers=self.headers,
                transport=self.transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            raise FetchError(f"HTTP {status}: {e.response.reason_phrase}", status) from e
        except httpx.InvalidURL as e:
            raise FetchError(f"Invalid URL: {e}") from e
        except httpx.HTTPError as e:
            raise FetchError(f"HTTP error: {e}") from e

        content_type = response.headers.get("content-type", "")
        logger.debug(
            "Response from %s: content type %r, %d bytes",
            url,
            content_type,
            len(response.content),
        )
        return FetchedDocument(
            url=url,
            status_code=response.status_code,
            content_type=content_type,
            text=response.text,
            content=response.content,
        )
