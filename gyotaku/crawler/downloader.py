"""
Resource archiver for fetching and saving page resources.

Downloads each distinct resource URL at most once per crawl and reports
where every reference on a page was saved.
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, List, Optional

from .context import CrawlContext
from .extractor import ResourceReference
from ..exceptions import FetchError, InvalidUrlError, UnsafePathError
from ..utils.log import get_logger
from ..utils.paths import ensure_parent_dir, is_fetchable, normalize_url, resource_path


@dataclass
class ArchivedResource:
    """
    Outcome of archiving one reference.

    ``local_path`` is None when the reference was not archived; the
    reference is then left as written.
    """

    reference: ResourceReference
    url: Optional[str] = None
    local_path: Optional[str] = None

    @property
    def archived(self) -> bool:
        return self.local_path is not None


class ResourceArchiver:
    """
    Downloads page resources sequentially, one request at a time.

    Resources are archived regardless of their host. A failed download is
    logged and recorded; it never fails the page.
    """

    def __init__(self, fetcher):
        """
        Initialize the archiver.

        Args:
            fetcher: Object providing ``async fetch_resource(url) -> bytes``
        """
        self.fetcher = fetcher
        self.logger = get_logger("downloader")

        self._failed: List[Dict] = []

    @property
    def failed_resources(self) -> List[Dict]:
        """Get the failures recorded so far as ``{'url', 'error', 'type'}`` dicts."""
        return list(self._failed)

    async def archive(
        self,
        references: List[ResourceReference],
        page_url: str,
        context: CrawlContext
    ) -> List[ArchivedResource]:
        """
        Archive every reference found on one page.

        Args:
            references: References in document order
            page_url: URL of the page (for resolving relative URLs)
            context: Crawl context holding the downloaded-resource set

        Returns:
            One ArchivedResource per reference, in the same order

        Raises:
            OSError: If a downloaded resource cannot be written
        """
        results = []
        for reference in references:
            results.append(await self._archive_one(reference, page_url, context))
        return results

    async def _archive_one(
        self,
        reference: ResourceReference,
        page_url: str,
        context: CrawlContext
    ) -> ArchivedResource:
        try:
            url = normalize_url(reference.value, page_url)
        except ValueError as e:
            self._record(reference.value, str(e), 'invalid_url')
            return ArchivedResource(reference)

        if not is_fetchable(url):
            # data:, blob: and similar stay inline
            return ArchivedResource(reference, url)

        try:
            local_path = resource_path(url, context.output_root)
        except UnsafePathError as e:
            self._record(url, str(e), e.error_type)
            return ArchivedResource(reference, url)
        except InvalidUrlError as e:
            self._record(url, str(e), 'invalid_url')
            return ArchivedResource(reference, url)

        # Skip if already downloaded
        if url in context.downloaded_resources:
            return ArchivedResource(reference, url, local_path)

        await asyncio.sleep(context.delay)

        try:
            content = await self.fetcher.fetch_resource(url)
        except FetchError as e:
            self._record(url, e.message, 'resource_error')
            return ArchivedResource(reference, url)

        ensure_parent_dir(local_path)
        with open(local_path, 'wb') as f:
            f.write(content)

        context.downloaded_resources.add(url)
        self.logger.debug(f"Saved resource: {url} -> {local_path}")

        return ArchivedResource(reference, url, local_path)

    def _record(self, url: str, error: str, error_type: str) -> None:
        self.logger.warning(f"Resource not archived ({url}): {error}")
        self._failed.append({
            'url': url,
            'error': error,
            'type': error_type
        })
