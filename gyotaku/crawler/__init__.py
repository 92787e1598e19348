"""
Crawler module for website archiving.

Contains components for fetching, extracting, archiving, and rewriting.
"""

from .context import CrawlContext
from .crawler import WebsiteCrawler, CrawlResult, crawl_website
from .fetcher import PageFetcher
from .extractor import ResourceExtractor, ResourceReference
from .downloader import ResourceArchiver, ArchivedResource
from .rewrite import ReferenceRewriter

__all__ = [
    "CrawlContext",
    "WebsiteCrawler",
    "CrawlResult",
    "crawl_website",
    "PageFetcher",
    "ResourceExtractor",
    "ResourceReference",
    "ResourceArchiver",
    "ArchivedResource",
    "ReferenceRewriter",
]
