"""
Shared state threaded through one crawl.
"""

import dataclasses
from dataclasses import dataclass, field
from typing import Set

from ..utils.paths import get_hostname, normalize_url


@dataclass(frozen=True)
class CrawlContext:
    """
    State for one crawl.

    The two membership sets are shared by every context derived from the seed
    context and only ever grow. ``current_depth`` belongs to a single visit;
    :meth:`descend` hands out a copy one level deeper.

    Attributes:
        base_host: Hostname of the seed URL; pages on other hosts are skipped
        output_root: Directory under which per-host mirror trees are built
        max_depth: Deepest level at which pages are still visited
        delay: Seconds to wait before each resource download and link visit
        current_depth: Depth of the page being visited (seed is 0)
        visited_pages: Page URLs already fetched or attempted
        downloaded_resources: Resource URLs already archived
    """

    base_host: str
    output_root: str
    max_depth: int
    delay: float
    current_depth: int = 0
    visited_pages: Set[str] = field(default_factory=set)
    downloaded_resources: Set[str] = field(default_factory=set)

    @classmethod
    def for_seed(
        cls,
        seed_url: str,
        output_root: str,
        max_depth: int,
        delay: float
    ) -> "CrawlContext":
        """
        Create the root context for a crawl starting at ``seed_url``.

        Raises:
            InvalidUrlError: If the seed is not an absolute http(s) URL
        """
        return cls(
            base_host=get_hostname(normalize_url(seed_url)),
            output_root=output_root,
            max_depth=max_depth,
            delay=delay,
        )

    def descend(self) -> "CrawlContext":
        """Context for a page linked from the current one."""
        return dataclasses.replace(self, current_depth=self.current_depth + 1)

    @property
    def depth_exceeded(self) -> bool:
        return self.current_depth > self.max_depth

    @property
    def can_follow_links(self) -> bool:
        return self.current_depth < self.max_depth
