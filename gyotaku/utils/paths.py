"""
Path and URL utilities for the archiver.

Provides URL normalization and the deterministic mapping from a URL to a
file under ``<output>/<hostname>/``.
"""

import os
import re
from typing import List, Optional, Tuple
from urllib.parse import ParseResult, quote, unquote, urljoin, urlparse, urlunparse

from ..exceptions import InvalidUrlError, PathConflictError, UnsafePathError
from .constants import FETCHABLE_SCHEMES


# Characters that must not survive inside a single path segment
_UNSAFE_SEGMENT_CHARS = re.compile(r'[\\/\x00]')

# Default document for directory-like page URLs
INDEX_PAGE = "index.html"

# Default filename for resources served from a directory URL
INDEX_RESOURCE = "index"


def normalize_url(url: str, base_url: Optional[str] = None) -> str:
    """
    Normalize a URL for use as a crawl key.

    Resolves relative references against ``base_url``, lowercases the scheme
    and host, gives an empty path a single ``/`` and drops the fragment.
    Path, query and trailing slashes are kept verbatim.

    Args:
        url: URL to normalize
        base_url: Base URL for resolving relative URLs

    Returns:
        Normalized URL string

    Raises:
        ValueError: If the URL cannot be parsed
    """
    url = url.strip()

    if base_url:
        url = urljoin(base_url, url)

    parsed = urlparse(url)
    netloc = _lower_host(parsed.netloc)
    path = parsed.path
    if netloc and not path:
        path = '/'

    return urlunparse((
        parsed.scheme.lower(),
        netloc,
        path,
        parsed.params,
        parsed.query,
        ''  # Remove fragment
    ))


def _lower_host(netloc: str) -> str:
    """Lowercase the host part of a netloc, leaving userinfo untouched."""
    userinfo, sep, hostport = netloc.rpartition('@')
    return f"{userinfo}{sep}{hostport.lower()}"


def parse_http_url(url: str) -> ParseResult:
    """
    Parse a URL that the crawler is able to fetch.

    Args:
        url: Absolute URL

    Returns:
        Parsed URL

    Raises:
        InvalidUrlError: If the URL does not parse, is not http(s) or has no host
    """
    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as e:
        raise InvalidUrlError(url, str(e)) from e

    if parsed.scheme not in FETCHABLE_SCHEMES:
        raise InvalidUrlError(url, f"unsupported scheme {parsed.scheme!r}")
    if not hostname:
        raise InvalidUrlError(url, "missing hostname")

    return parsed


def is_fetchable(url: str) -> bool:
    """Check whether a URL uses a scheme the crawler can fetch."""
    try:
        return urlparse(url).scheme in FETCHABLE_SCHEMES
    except ValueError:
        return False


def get_hostname(url: str) -> str:
    """
    Extract the lowercase hostname (without port) from a URL.

    Raises:
        InvalidUrlError: If the URL has no usable hostname
    """
    return parse_http_url(url).hostname


def is_same_host(url: str, hostname: str) -> bool:
    """
    Check if a URL is served by the given hostname.

    Args:
        url: Absolute URL to check
        hostname: Hostname to compare against

    Returns:
        True if the hostnames match exactly, False otherwise
    """
    return get_hostname(url) == hostname


def _safe_segments(url_path: str) -> List[str]:
    """
    Split a URL path into filesystem-safe segments.

    Segments are percent-decoded; empty, ``.`` and ``..`` segments are
    dropped and separators hidden inside a segment are replaced.
    """
    segments = []
    for raw in url_path.split('/'):
        segment = unquote(raw)
        if segment in ('', '.', '..'):
            continue
        segments.append(_UNSAFE_SEGMENT_CHARS.sub('_', segment))
    return segments


def _split_path(url_path: str) -> Tuple[List[str], Optional[str]]:
    """
    Split a URL path into directories and a filename.

    Returns:
        Tuple of (directory segments, filename or None for directory URLs)
    """
    segments = _safe_segments(url_path)
    if not segments or url_path.endswith('/'):
        return segments, None
    return segments[:-1], segments[-1]


def _host_root(url: str, output_dir: str) -> str:
    """Get the mirror directory for the host serving ``url``."""
    hostname = get_hostname(url)
    if hostname in ('.', '..') or _UNSAFE_SEGMENT_CHARS.search(hostname):
        raise UnsafePathError(url, hostname)
    return os.path.join(output_dir, hostname)


def _join_under(url: str, root: str, dirs: List[str], filename: str) -> str:
    """Join a path under ``root`` and verify it did not escape."""
    path = os.path.join(root, *dirs, filename)

    abs_root = os.path.abspath(root)
    abs_path = os.path.abspath(path)
    if abs_path == abs_root or os.path.commonpath([abs_root, abs_path]) != abs_root:
        raise UnsafePathError(url, path)

    _check_conflicts(url, root, dirs, path)

    return path


def _check_conflicts(url: str, root: str, dirs: List[str], path: str) -> None:
    """
    Refuse a path whose directories exist as files, or whose file exists
    as a directory, e.g. a resource saved at ``blog`` and a page at
    ``blog/post.html``.
    """
    current = root
    for segment in dirs:
        current = os.path.join(current, segment)
        if os.path.exists(current) and not os.path.isdir(current):
            raise PathConflictError(url, current)

    if os.path.isdir(path):
        raise PathConflictError(url, path)


def page_path(url: str, output_dir: str) -> str:
    """
    Convert a page URL to the local file it is saved at.

    ``/`` and other directory URLs map to ``index.html`` inside that
    directory; a last segment without an extension gets ``.html`` appended.

    Args:
        url: Absolute page URL
        output_dir: Base output directory

    Returns:
        Local file path under ``output_dir/<hostname>/``
    """
    dirs, filename = _split_path(urlparse(url).path)

    if filename is None:
        filename = INDEX_PAGE
    elif '.' not in filename:
        filename = f"{filename}.html"

    return _join_under(url, _host_root(url, output_dir), dirs, filename)


def resource_path(url: str, output_dir: str) -> str:
    """
    Convert a resource URL to the local file it is saved at.

    The literal last path segment is the filename; directory URLs are saved
    as ``index``.

    Args:
        url: Absolute resource URL
        output_dir: Base output directory

    Returns:
        Local file path under ``output_dir/<hostname>/``
    """
    dirs, filename = _split_path(urlparse(url).path)
    return _join_under(url, _host_root(url, output_dir), dirs, filename or INDEX_RESOURCE)


def to_root_relative(local_path: str, output_dir: str) -> str:
    """
    Express a saved file as a root-relative URL path.

    Args:
        local_path: File path under ``output_dir``
        output_dir: Base output directory

    Returns:
        Path such as ``/cdn.example.com/css/site.css``
    """
    rel_path = os.path.relpath(local_path, output_dir)
    # Use forward slashes for URLs
    return '/' + quote(rel_path.replace(os.sep, '/'))


def ensure_dir(path: str) -> None:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Directory path to ensure exists
    """
    os.makedirs(path, exist_ok=True)


def ensure_parent_dir(file_path: str) -> None:
    """
    Ensure the parent directory of a file exists.

    Args:
        file_path: File path whose parent directory should exist
    """
    parent = os.path.dirname(file_path)
    if parent:
        ensure_dir(parent)
