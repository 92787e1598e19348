"""
HTTP fetcher for pages and resources.

Uses aiohttp to issue one bounded GET per call, without retries.
"""

import asyncio
from typing import Optional

import aiohttp
from aiohttp import ClientError, ClientTimeout

from ..exceptions import FetchError, ResourceFetchError
from ..utils.log import get_logger
from ..utils.constants import DEFAULT_TIMEOUT, DEFAULT_USER_AGENT


class PageFetcher:
    """
    Fetches pages as text and resources as raw bytes.

    Owns a single aiohttp session for the lifetime of a crawl. Use it as an
    async context manager or call :meth:`start` and :meth:`stop` explicitly.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        """
        Initialize the fetcher.

        Args:
            timeout: Total timeout per request in seconds
            user_agent: User agent string for requests
        """
        self.timeout = ClientTimeout(total=timeout)
        self.user_agent = user_agent
        self.logger = get_logger("fetcher")

        self._session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> None:
        """Open the HTTP session."""
        if self._session is None:
            self._session = aiohttp.ClientSession(
                timeout=self.timeout,
                headers={"User-Agent": self.user_agent}
            )

    async def stop(self) -> None:
        """Close the HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> "PageFetcher":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def fetch_page(self, url: str) -> str:
        """
        Fetch an HTML page.

        Args:
            url: Absolute page URL

        Returns:
            Decoded response body

        Raises:
            FetchError: On network error, timeout or non-2xx status
        """
        body = await self._get(url, FetchError, as_text=True)
        self.logger.debug(f"Fetched page {url} ({len(body)} chars)")
        return body

    async def fetch_resource(self, url: str) -> bytes:
        """
        Fetch a resource as raw bytes.

        Args:
            url: Absolute resource URL

        Returns:
            Response body

        Raises:
            ResourceFetchError: On network error, timeout or non-2xx status
        """
        body = await self._get(url, ResourceFetchError, as_text=False)
        self.logger.debug(f"Fetched resource {url} ({len(body)} bytes)")
        return body

    async def _get(self, url: str, error_cls, as_text: bool):
        if self._session is None:
            await self.start()

        try:
            async with self._session.get(url) as response:
                if not 200 <= response.status < 300:
                    raise error_cls(
                        url,
                        f"HTTP {response.status} {response.reason or ''}".rstrip(),
                        status=response.status
                    )

                if as_text:
                    return await response.text(errors="replace")
                return await response.read()

        except asyncio.TimeoutError as e:
            raise error_cls(url, f"Timed out after {self.timeout.total}s") from e
        except ClientError as e:
            raise error_cls(url, f"{type(e).__name__}: {e}") from e
        except ValueError as e:
            # yarl rejects hosts that cannot be IDNA-encoded
            raise error_cls(url, f"Invalid URL: {e}") from e
