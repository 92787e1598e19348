"""
Main website crawler module.

Orchestrates the archiving process: fetch a page, archive its resources,
rewrite their references, save the page, then recurse depth-first into its
same-domain links.
"""

import asyncio
import json
import os
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from .context import CrawlContext
from .downloader import ResourceArchiver
from .extractor import ResourceExtractor
from .fetcher import PageFetcher
from .rewrite import ReferenceRewriter
from ..exceptions import FetchError, InvalidUrlError, UnsafePathError
from ..utils.constants import (
    DEFAULT_DELAY_MS,
    DEFAULT_MAX_DEPTH,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
    METADATA_FILENAME,
)
from ..utils.log import get_logger, print_info, print_success
from ..utils.paths import ensure_dir, ensure_parent_dir, is_same_host, normalize_url, page_path


@dataclass
class CrawlResult:
    """Results of the crawling operation."""

    pages_crawled: int = 0
    resources_downloaded: int = 0
    errors: List[Dict] = field(default_factory=list)
    pages: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0


class WebsiteCrawler:
    """
    Main website crawler class.

    Coordinates the fetcher, extractor, archiver and rewriter to build an
    offline mirror of one site. Requests are strictly sequential and each
    resource download and link visit is preceded by the configured delay.
    """

    def __init__(
        self,
        url: str,
        output_dir: str,
        max_depth: int = DEFAULT_MAX_DEPTH,
        delay_ms: int = DEFAULT_DELAY_MS,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT,
        fetcher=None
    ):
        """
        Initialize the website crawler.

        Args:
            url: Starting URL to crawl
            output_dir: Directory to write the mirror to (created if absent)
            max_depth: Maximum link depth from the starting URL (0 = seed only)
            delay_ms: Delay before each request in milliseconds
            timeout: Per-request timeout in seconds
            user_agent: User agent string for requests
            fetcher: Optional object with ``fetch_page`` and ``fetch_resource``
                coroutines; a PageFetcher is created when omitted

        Raises:
            InvalidUrlError: If ``url`` is not an absolute http(s) URL
            ValueError: If ``max_depth`` or ``delay_ms`` is negative
        """
        if max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {max_depth}")
        if delay_ms < 0:
            raise ValueError(f"delay_ms must be non-negative, got {delay_ms}")

        self.url = url.strip()
        try:
            self.start_url = normalize_url(self.url)
        except ValueError as e:
            raise InvalidUrlError(self.url, str(e)) from e

        self.output_dir = os.path.abspath(output_dir)
        self.max_depth = max_depth
        self.delay = delay_ms / 1000.0

        self.context = CrawlContext.for_seed(
            self.start_url,
            output_root=self.output_dir,
            max_depth=max_depth,
            delay=self.delay
        )

        # Initialize logger
        self.logger = get_logger("crawler")

        # Initialize components
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or PageFetcher(timeout=timeout, user_agent=user_agent)
        self.extractor = ResourceExtractor()
        self.archiver = ResourceArchiver(self.fetcher)
        self.rewriter = ReferenceRewriter(self.output_dir)

        self._pages: List[str] = []
        self._errors: List[Dict] = []

    async def crawl(self) -> CrawlResult:
        """
        Run the crawl to completion.

        Returns:
            CrawlResult with statistics and recorded failures

        Raises:
            OSError: If the mirror cannot be written; output written so far
                is left in place
        """
        start_time = time.time()

        print_info(f"Starting crawl of {self.start_url}")
        print_info(f"Output directory: {self.output_dir}")
        print_info(f"Max depth: {self.max_depth}, delay: {self.delay:g}s")

        ensure_dir(self.output_dir)
        self._write_metadata()

        try:
            if self._owns_fetcher:
                await self.fetcher.start()

            await self._crawl_page(self.start_url, self.context)

        finally:
            if self._owns_fetcher:
                await self.fetcher.stop()

        duration = time.time() - start_time

        result = CrawlResult(
            pages_crawled=len(self._pages),
            resources_downloaded=len(self.context.downloaded_resources),
            errors=self._errors + self.archiver.failed_resources,
            pages=list(self._pages),
            duration_seconds=duration
        )

        print_success(
            f"Crawl complete! {result.pages_crawled} pages, "
            f"{result.resources_downloaded} resources in {duration:.1f}s"
        )

        return result

    def _write_metadata(self) -> None:
        """Write metadata.json describing this crawl."""
        crawled_at = datetime.now(timezone.utc).isoformat(timespec='milliseconds')
        metadata = {
            'startUrl': self.url,
            'crawledAt': crawled_at.replace('+00:00', 'Z'),
            'depth': self.max_depth,
        }

        metadata_path = os.path.join(self.output_dir, METADATA_FILENAME)
        with open(metadata_path, 'w', encoding='utf-8') as f:
            json.dump(metadata, f, indent=2, ensure_ascii=False)

        self.logger.debug(f"Wrote metadata: {metadata_path}")

    async def _crawl_page(self, url: str, context: CrawlContext) -> None:
        """
        Visit one page and, depth permitting, the pages it links to.

        Args:
            url: Normalized absolute URL of the page
            context: Crawl context at this page's depth
        """
        # Skip if already visited
        if url in context.visited_pages:
            return

        # Skip if exceeds max depth
        if context.depth_exceeded:
            self.logger.debug(f"Skipping (depth): {url}")
            return

        try:
            same_host = is_same_host(url, context.base_host)
        except InvalidUrlError as e:
            self._record_error(url, e.reason, 'invalid_url')
            self.logger.warning(f"Skipping invalid URL: {url}")
            return

        if not same_host:
            self.logger.debug(f"Skipping (other domain): {url}")
            return

        # Mark as visited before fetching; failures are never retried
        context.visited_pages.add(url)
        self.logger.info(f"Crawling: {url} (depth {context.current_depth})")

        try:
            html = await self.fetcher.fetch_page(url)
        except FetchError as e:
            self.logger.error(f"Error crawling {url}: {e.message}")
            self._record_error(url, e.message, 'fetch_error')
            return

        soup = self.extractor.parse(html)
        references = self.extractor.extract(soup)

        archived = await self.archiver.archive(references, url, context)
        self.rewriter.rewrite(archived)

        try:
            local_path = page_path(url, context.output_root)
        except UnsafePathError as e:
            self.logger.error(f"Not saving {url}: {e}")
            self._record_error(url, str(e), e.error_type)
            return

        ensure_parent_dir(local_path)
        with open(local_path, 'w', encoding='utf-8') as f:
            f.write(str(soup))

        self._pages.append(url)
        self.logger.info(f"Saved page: {local_path}")

        if not context.can_follow_links:
            return

        links = self.extractor.extract_links(soup, url)
        child = context.descend()

        for link in links:
            # Rate limiting
            await asyncio.sleep(context.delay)
            await self._crawl_page(link, child)

    def _record_error(self, url: str, error: str, error_type: str) -> None:
        self._errors.append({
            'url': url,
            'error': error,
            'type': error_type
        })


async def crawl_website(
    url: str,
    output_dir: str,
    max_depth: int = DEFAULT_MAX_DEPTH,
    delay_ms: int = DEFAULT_DELAY_MS,
    fetcher: Optional[object] = None
) -> CrawlResult:
    """
    Crawl ``url`` and build an offline mirror under ``output_dir``.

    Convenience wrapper around :class:`WebsiteCrawler`.
    """
    crawler = WebsiteCrawler(
        url=url,
        output_dir=output_dir,
        max_depth=max_depth,
        delay_ms=delay_ms,
        fetcher=fetcher
    )
    return await crawler.crawl()
