"""
Crawl engine - scheduler, completion protocol and result aggregation
"""

from .aggregator import ResultAggregator, identity, ticker_root
from .base import Crawler, CrawlState
from .builder import CrawlerBuilder
from .config import CrawlConfig, StageRule
from .pagination import FollowUps, PaginationSpec, Pager, marker_pager
from .result import FetchResult, PageOutcome
from .scheduler import Scheduler
from .task import Task

__all__ = [
    'Crawler',
    'CrawlState',
    'CrawlerBuilder',
    'CrawlConfig',
    'StageRule',
    'FetchResult',
    'PageOutcome',
    'FollowUps',
    'PaginationSpec',
    'Pager',
    'marker_pager',
    'ResultAggregator',
    'Scheduler',
    'Task',
    'identity',
    'ticker_root'
]
