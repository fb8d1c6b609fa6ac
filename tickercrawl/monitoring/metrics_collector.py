import time
import psutil
import logging
import threading
from datetime import datetime
from dataclasses import asdict, replace
from typing import Dict, Any
from collections import deque
from .crawl_metrics import CrawlMetrics
from .system_metrics import SystemMetrics

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Collects and aggregates metrics of one crawl run"""

    def __init__(self):
        self.start_time = time.time()

        self.crawl_metrics = CrawlMetrics()
        self.system_metrics = SystemMetrics()

        # Performance tracking (keep last 100 response times)
        self.response_times: deque = deque(maxlen=100)

        self._lock = threading.Lock()

    def record_page_fetched(self, url: str, response_time: float, content_length: int = 0):
        """Record a successful fetch"""
        with self._lock:
            self.crawl_metrics.pages_fetched += 1
            self.crawl_metrics.bytes_downloaded += content_length
            self.response_times.append(response_time)
            self._update_calculated_metrics()

    def record_fetch_failure(self, url: str):
        with self._lock:
            self.crawl_metrics.fetch_failures += 1

    def record_classifier_failure(self, url: str):
        with self._lock:
            self.crawl_metrics.classifier_failures += 1

    def record_empty_page(self, url: str):
        """Record a fetched page that could not be parsed"""
        with self._lock:
            self.crawl_metrics.empty_pages += 1

    def update_scheduler_state(self, scheduler):
        """Copy queue and in-flight figures from a scheduler"""
        with self._lock:
            self.crawl_metrics.tasks_submitted = scheduler.submitted
            self.crawl_metrics.tasks_dropped = scheduler.dropped
            self.crawl_metrics.queue_depth = len(scheduler.pending)
            self.crawl_metrics.in_flight = scheduler.in_flight
            self.crawl_metrics.peak_in_flight = scheduler.peak_in_flight

    def update_results(self, aggregator):
        with self._lock:
            self.crawl_metrics.leaves_collected = len(aggregator)
            self.crawl_metrics.duplicates_dropped = aggregator.duplicates_dropped

    def collect_system_metrics(self):
        """Collect current resource usage of this process"""
        try:
            process = psutil.Process()
            self.system_metrics.cpu_percent = process.cpu_percent(interval=None)
            self.system_metrics.memory_used_mb = process.memory_info().rss / (1024 * 1024)
            try:
                self.system_metrics.open_files = process.num_fds() if hasattr(process, 'num_fds') else len(process.open_files())
            except (psutil.NoSuchProcess, psutil.AccessDenied):
                self.system_metrics.open_files = 0
        except psutil.Error as e:
            logger.warning(f"Failed to collect system metrics: {e}")

    def _update_calculated_metrics(self):
        """Update calculated metrics like rates and averages"""
        elapsed_time = time.time() - self.start_time

        if elapsed_time > 0:
            self.crawl_metrics.pages_per_second = self.crawl_metrics.pages_fetched / elapsed_time

        if self.response_times:
            self.crawl_metrics.avg_response_time = sum(self.response_times) / len(self.response_times)

    def snapshot_metrics(self) -> CrawlMetrics:
        """Copy of the crawl metrics that later updates do not affect"""
        with self._lock:
            return replace(self.crawl_metrics)

    def get_current_snapshot(self) -> Dict[str, Any]:
        """Get current metrics snapshot"""
        with self._lock:
            self.collect_system_metrics()

            return {
                'timestamp': datetime.now().isoformat(),
                'uptime_seconds': time.time() - self.start_time,
                'crawl_metrics': asdict(self.crawl_metrics),
                'system_metrics': asdict(self.system_metrics),
            }
