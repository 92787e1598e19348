"""
Utility modules for the archiver.

Contains logging, path handling utilities, and constants.
"""

from .log import setup_logger, get_logger
from .paths import normalize_url, page_path, resource_path, to_root_relative, ensure_dir
from .constants import (
    DEFAULT_USER_AGENT,
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_DEPTH,
    DEFAULT_DELAY_MS,
    DEFAULT_OUTPUT_DIR,
)

__all__ = [
    "setup_logger",
    "get_logger",
    "normalize_url",
    "page_path",
    "resource_path",
    "to_root_relative",
    "ensure_dir",
    "DEFAULT_USER_AGENT",
    "DEFAULT_TIMEOUT",
    "DEFAULT_MAX_DEPTH",
    "DEFAULT_DELAY_MS",
    "DEFAULT_OUTPUT_DIR",
]
