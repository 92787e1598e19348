"""
Reference rewriter for pointing page resources at their archived copies.
"""

from typing import Iterable

from .downloader import ArchivedResource
from ..utils.log import get_logger
from ..utils.paths import to_root_relative


class ReferenceRewriter:
    """
    Rewrites archived resource references to root-relative paths.

    Each reference is rewritten on the element instance it was extracted
    from, so two elements with the same original value are handled
    independently.
    """

    def __init__(self, output_dir: str):
        """
        Initialize the reference rewriter.

        Args:
            output_dir: Base output directory the mirror is served from
        """
        self.output_dir = output_dir
        self.logger = get_logger("rewriter")

    def rewrite(self, resources: Iterable[ArchivedResource]) -> int:
        """
        Rewrite every archived reference in place.

        References that were not archived keep their original value.

        Args:
            resources: Archiver results for one page

        Returns:
            Number of attributes rewritten
        """
        rewritten = 0

        for resource in resources:
            if not resource.archived:
                continue

            reference = resource.reference
            new_value = to_root_relative(resource.local_path, self.output_dir)
            reference.element[reference.attribute] = new_value
            rewritten += 1

            self.logger.debug(f"Rewrote {reference.kind} {reference.value!r} -> {new_value}")

        return rewritten
