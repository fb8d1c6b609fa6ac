"""
Command line entry point - crawl a catalog and print or save the tickers
"""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .catalogs import sector_drilldown, symbol_search
from .crawler import Crawler, identity
from .error_handler import ConfigurationError
from .filters import LabelFilter
from .monitoring import LogManager
from .storage import ResultStorage

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='tickercrawl', description="Collect exchange tickers from stock catalogs")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument('--concurrency', type=int, default=100, help="Max fetches in flight")
    common.add_argument('--timeout', type=float, default=30.0, help="Per-fetch timeout in seconds")
    common.add_argument('--max-tasks', type=int, default=None, help="Stop discovering pages after this many tasks")
    common.add_argument('--keep-exchange', action='store_true',
                        help="Treat FOO:US and FOO:GR as different results")
    common.add_argument('--output', '-o', help="Write tickers to this file instead of stdout")
    common.add_argument('--progress-interval', type=float, default=30.0,
                        help="Seconds between progress log lines (0 disables)")
    common.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    common.add_argument('--log-dir', default='crawl_data/logs', help="Directory for log files ('' disables)")

    sub = parser.add_subparsers(dest='cmd', required=True)

    search = sub.add_parser('search', parents=[common], help="Crawl the paginated symbol search")
    search.add_argument('--abbrev', action='append', dest='abbrevs',
                        help="Query to search for (repeatable, default: all exchange abbreviations)")
    types = search.add_mutually_exclusive_group()
    types.add_argument('--type', action='append', dest='types',
                       help=f"Security type to keep (repeatable, default: {symbol_search.DEFAULT_TYPE})")
    types.add_argument('--type-pattern', help="Regular expression matching the security types to keep")
    types.add_argument('--all-types', action='store_true', help="Keep every security type")

    sectors = sub.add_parser('sectors', parents=[common], help="Crawl sectors, industries and companies")
    sectors.add_argument('--region', action='append', dest='regions', choices=sector_drilldown.REGIONS,
                         help="Region to crawl (repeatable, default: all)")

    return parser


def type_filter(args) -> Optional[LabelFilter]:
    if args.all_types:
        return LabelFilter.accept_all()
    if args.type_pattern:
        return LabelFilter.pattern(args.type_pattern)
    if args.types:
        return LabelFilter.exact(*args.types)
    return None


def build_crawler(args) -> Crawler:
    """Configure the crawler of the selected catalog from parsed arguments"""
    if args.cmd == 'search':
        builder = symbol_search.builder(type_filter(args))
    else:
        regions = LabelFilter.exact(*args.regions) if args.regions else None
        builder = sector_drilldown.builder(regions)

    if args.keep_exchange:
        builder.dedup_key(identity)

    return (builder
            .max_concurrent(args.concurrency)
            .timeout(args.timeout)
            .max_tasks(args.max_tasks)
            .progress_interval(args.progress_interval or None)
            .build())


def seeds(args) -> List[str]:
    if args.cmd == 'search':
        return list(args.abbrevs or symbol_search.ABBREVIATIONS)
    return [sector_drilldown.LANDING_URL]


async def crawl(crawler: Crawler, seed_values: List[str], output: Optional[str]) -> List[str]:
    tickers = await crawler.crawl(seed_values)
    if output:
        await ResultStorage(base_path='.').save_results(output, tickers)
    return tickers


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    LogManager(log_dir=args.log_dir or None, log_level=args.log_level)

    try:
        crawler = build_crawler(args)
        tickers = asyncio.run(crawl(crawler, seeds(args), args.output))
    except ConfigurationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    if not args.output:
        for ticker in tickers:
            sys.stdout.write(f"{ticker}\n")

    summary = crawler.error_handler.get_error_summary()
    if summary['total_errors']:
        logger.warning(f"{summary['total_errors']} errors: {summary.get('error_types')}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
