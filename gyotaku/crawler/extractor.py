"""
Resource extractor for parsing HTML and enumerating embeddable resources.

Uses BeautifulSoup for HTML parsing to find images, stylesheets, scripts,
other linked files and anchor targets.
"""

from dataclasses import dataclass
from typing import List

from bs4 import BeautifulSoup, Tag

from ..utils.log import get_logger
from ..utils.paths import is_fetchable, normalize_url


# Tag kinds a reference can come from
KIND_IMAGE = "img"
KIND_STYLESHEET = "stylesheet"
KIND_SCRIPT = "script"
KIND_LINK = "link"

# Attribute holding the reference for each element name
_SOURCE_ATTRIBUTES = {
    "img": "src",
    "script": "src",
    "link": "href",
}


@dataclass(eq=False)
class ResourceReference:
    """
    One embeddable resource found on a page.

    Attributes:
        value: Attribute value exactly as written in the document
        kind: One of ``img``, ``stylesheet``, ``script`` or ``link``
        attribute: Name of the attribute holding ``value``
        element: The parsed element the reference was read from
    """

    value: str
    kind: str
    attribute: str
    element: Tag


class ResourceExtractor:
    """
    Extracts resource references and links from HTML content.
    """

    def __init__(self, parser: str = "lxml"):
        """
        Initialize the resource extractor.

        Args:
            parser: BeautifulSoup tree builder to use
        """
        self.parser = parser
        self.logger = get_logger("extractor")

    def parse(self, html: str) -> BeautifulSoup:
        """
        Parse an HTML document into a mutable tree.

        Args:
            html: HTML content to parse

        Returns:
            Parsed document
        """
        return BeautifulSoup(html, self.parser)

    def extract(self, soup: BeautifulSoup) -> List[ResourceReference]:
        """
        Enumerate resource references in document order.

        Covers ``img[src]``, ``link[rel=stylesheet][href]``, ``script[src]``
        and every other ``link[href]``. Elements whose attribute is missing
        or blank are skipped.

        Args:
            soup: Parsed document

        Returns:
            List of references, each tied to the element it came from
        """
        references = []

        for element in soup.find_all(list(_SOURCE_ATTRIBUTES)):
            attribute = _SOURCE_ATTRIBUTES[element.name]
            value = element.get(attribute)

            if not isinstance(value, str) or not value.strip():
                continue

            references.append(ResourceReference(
                value=value,
                kind=self._kind_of(element),
                attribute=attribute,
                element=element,
            ))

        self.logger.debug(f"Extracted {len(references)} resource references")
        return references

    def _kind_of(self, element: Tag) -> str:
        if element.name == "img":
            return KIND_IMAGE
        if element.name == "script":
            return KIND_SCRIPT

        # BeautifulSoup returns rel as a list of individual values,
        # e.g. <link rel="alternate stylesheet"> becomes ['alternate', 'stylesheet']
        rel_value = element.get("rel", [])
        if isinstance(rel_value, str):
            rel_value = rel_value.split()
        if "stylesheet" in (v.lower() for v in rel_value):
            return KIND_STYLESHEET
        return KIND_LINK

    def extract_links(self, soup: BeautifulSoup, page_url: str) -> List[str]:
        """
        Extract anchor targets as absolute URLs, in document order.

        Hrefs that fail to parse and targets with a scheme the crawler
        cannot fetch (``mailto:``, ``javascript:`` ...) are dropped.
        Duplicates are kept; the crawler's visited set handles them.

        Args:
            soup: Parsed document
            page_url: URL of the page (for resolving relative URLs)

        Returns:
            List of absolute URLs
        """
        links = []

        for anchor in soup.find_all("a", href=True):
            href = anchor.get("href")
            if not isinstance(href, str) or not href.strip():
                continue

            try:
                full_url = normalize_url(href, page_url)
            except ValueError:
                self.logger.warning(f"Ignoring unparsable link {href!r} on {page_url}")
                continue

            if is_fetchable(full_url):
                links.append(full_url)

        return links
