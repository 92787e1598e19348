"""
Shared constants for the archiver.

Contains common configuration values used across multiple modules.
"""

from .. import __version__

# User agent sent with every request
DEFAULT_USER_AGENT = f"Gyotaku/{__version__} Web Archiver"

# Request timeout in seconds
DEFAULT_TIMEOUT = 10

# Maximum crawl depth by default (0 archives only the seed page)
DEFAULT_MAX_DEPTH = 1

# Delay between requests in milliseconds
DEFAULT_DELAY_MS = 1000

# Output directory used by the CLI
DEFAULT_OUTPUT_DIR = "./archive"

# Crawl metadata written at the output root
METADATA_FILENAME = "metadata.json"

# Schemes the crawler will fetch
FETCHABLE_SCHEMES = ("http", "https")
