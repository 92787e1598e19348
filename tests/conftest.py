"""Shared fixtures for the archiver tests."""

from collections import Counter
from typing import Dict, Union

import pytest

from gyotaku.exceptions import FetchError, ResourceFetchError


class FakeFetcher:
    """In-memory stand-in for PageFetcher that records every request."""

    def __init__(self, responses: Dict[str, Union[str, bytes]]):
        self.responses = responses
        self.requests = []

    @property
    def counts(self) -> Counter:
        return Counter(url for _, url in self.requests)

    def pages_fetched(self):
        return [url for kind, url in self.requests if kind == 'page']

    def resources_fetched(self):
        return [url for kind, url in self.requests if kind == 'resource']

    async def fetch_page(self, url: str) -> str:
        self.requests.append(('page', url))
        if url not in self.responses:
            raise FetchError(url, "HTTP 404 Not Found", status=404)
        body = self.responses[url]
        return body.decode('utf-8') if isinstance(body, bytes) else body

    async def fetch_resource(self, url: str) -> bytes:
        self.requests.append(('resource', url))
        if url not in self.responses:
            raise ResourceFetchError(url, "HTTP 404 Not Found", status=404)
        body = self.responses[url]
        return body.encode('utf-8') if isinstance(body, str) else body


@pytest.fixture
def make_fetcher():
    return FakeFetcher
