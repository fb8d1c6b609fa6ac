"""
tickercrawl - Concurrent crawler collecting exchange tickers from paginated catalogs
"""

from .crawler import (
    Crawler,
    CrawlerBuilder,
    CrawlConfig,
    PageOutcome,
    StageRule,
    Task,
    identity,
    ticker_root
)
from .error_handler import ConfigurationError, CrawlError
from .filters import LabelFilter
from .transport import AiohttpTransport

__version__ = '1.0.0'

__all__ = [
    'Crawler',
    'CrawlerBuilder',
    'CrawlConfig',
    'PageOutcome',
    'StageRule',
    'Task',
    'identity',
    'ticker_root',
    'ConfigurationError',
    'CrawlError',
    'LabelFilter',
    'AiohttpTransport'
]
