"""
Monitoring and observability modules
"""

from .metrics_collector import MetricsCollector
from .progress_reporter import ProgressReporter
from .log_manager import LogManager
from .crawl_metrics import CrawlMetrics
from .system_metrics import SystemMetrics

__all__ = [
    'MetricsCollector',
    'ProgressReporter',
    'LogManager',
    'CrawlMetrics',
    'SystemMetrics'
]
