"""
Gyotaku - A website archiver for offline browsing.

This package crawls a website from a seed URL, follows same-domain links up to
a bounded depth, downloads every referenced resource, and rewrites pages so the
mirror can be browsed without network access.
"""

__version__ = "1.0.0"
__author__ = "Gyotaku Team"
