#!/usr/bin/env python3
"""
Gyotaku - Archive a website for offline browsing.

Crawls a website from a seed URL, follows same-domain links up to a bounded
depth, downloads every image, stylesheet, script and linked file, and rewrites
pages so the archive can be browsed without network access.

Usage:
    gyotaku https://example.com --output ./archive --depth 2 --wait 500
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .crawler import WebsiteCrawler
from .exceptions import InvalidUrlError
from .utils.constants import DEFAULT_DELAY_MS, DEFAULT_MAX_DEPTH, DEFAULT_OUTPUT_DIR
from .utils.log import (
    setup_logger,
    print_error,
    print_info,
    print_success,
    print_warning,
)


def non_negative_int(value: str) -> int:
    """argparse type for integers >= 0."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}")
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog='gyotaku',
        description='Crawl a website and archive it for offline browsing',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    %(prog)s https://example.com
    %(prog)s https://example.com -o ./site -d 2
    %(prog)s https://example.com --wait 250 --verbose
        """
    )

    parser.add_argument(
        'url',
        help='URL of the website to archive (e.g., https://example.com)'
    )

    parser.add_argument(
        '--output', '-o',
        default=DEFAULT_OUTPUT_DIR,
        help=f'Output directory (default: {DEFAULT_OUTPUT_DIR})'
    )

    parser.add_argument(
        '--depth', '-d',
        type=non_negative_int,
        default=DEFAULT_MAX_DEPTH,
        help=f'Maximum link depth to follow, 0 for the start page only (default: {DEFAULT_MAX_DEPTH})'
    )

    parser.add_argument(
        '--wait', '-w',
        type=non_negative_int,
        default=DEFAULT_DELAY_MS,
        help=f'Delay between requests in milliseconds (default: {DEFAULT_DELAY_MS})'
    )

    parser.add_argument(
        '--log-file',
        help='Also write the log to this file'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Enable verbose logging'
    )

    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Suppress output except errors'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(argv)


def validate_url(url: str) -> str:
    """
    Add a scheme to bare hostnames such as ``example.com/docs``.

    Args:
        url: URL string from the command line

    Returns:
        URL with an http(s) scheme
    """
    url = url.strip()
    if not url.startswith(('http://', 'https://')):
        url = 'https://' + url
    return url


def print_summary(result) -> None:
    """
    Print the crawl summary.

    Args:
        result: CrawlResult object
    """
    print("\n" + "=" * 60)
    print_success("CRAWL SUMMARY")
    print("=" * 60)
    print(f"  Pages saved:          {result.pages_crawled}")
    print(f"  Resources downloaded: {result.resources_downloaded}")
    print(f"  Errors:               {len(result.errors)}")
    print(f"  Duration:             {result.duration_seconds:.1f} seconds")
    print("=" * 60 + "\n")

    for error in result.errors[:10]:
        print_warning(f"{error['type']}: {error['url']} ({error['error']})")
    if len(result.errors) > 10:
        print_warning(f"... and {len(result.errors) - 10} more")


async def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the archiver.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_arguments(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    setup_logger(level=log_level, log_file=args.log_file)

    try:
        url = validate_url(args.url)
        output_dir = os.path.abspath(args.output)

        if not args.quiet:
            print_info(f"Target URL: {url}")
            print_info(f"Output: {output_dir}")
            print_info(f"Depth: {args.depth}, wait: {args.wait}ms")

        crawler = WebsiteCrawler(
            url=url,
            output_dir=output_dir,
            max_depth=args.depth,
            delay_ms=args.wait
        )

        result = await crawler.crawl()

        if not args.quiet:
            print_summary(result)

        print_success(f"Website archived to: {output_dir}")

        return 0

    except KeyboardInterrupt:
        print_error("\nCrawl interrupted by user")
        return 1
    except InvalidUrlError as e:
        print_error(f"Invalid input: {e}")
        return 1
    except OSError as e:
        print_error(f"Cannot write archive: {e}")
        return 1


def run() -> None:
    """Entry point wrapper for running as module."""
    sys.exit(asyncio.run(main()))


if __name__ == '__main__':
    run()
