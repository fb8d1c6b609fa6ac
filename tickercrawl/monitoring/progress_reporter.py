import time
import asyncio
import logging
from typing import Dict, Any, Optional
from .metrics_collector import MetricsCollector

logger = logging.getLogger(__name__)


class ProgressReporter:
    """Logs crawl progress periodically while a run is active"""

    def __init__(self, metrics_collector: MetricsCollector, report_interval: Optional[float] = 30.0):
        self.metrics = metrics_collector
        self.report_interval = report_interval
        self.reporting_task = None

    async def start_reporting(self):
        """Start periodic progress reporting (disabled without an interval)"""
        if self.report_interval:
            self.reporting_task = asyncio.ensure_future(self._reporting_loop())

    async def stop_reporting(self):
        if self.reporting_task:
            self.reporting_task.cancel()
            try:
                await self.reporting_task
            except asyncio.CancelledError:
                pass
            self.reporting_task = None

    async def _reporting_loop(self):
        while True:
            await asyncio.sleep(self.report_interval)
            self.log_progress_report()

    def log_progress_report(self):
        metrics = self.metrics.snapshot_metrics()
        logger.info(
            f"Progress: {metrics.pages_fetched} pages fetched, "
            f"{metrics.in_flight} in flight, {metrics.queue_depth} queued, "
            f"{metrics.leaves_collected} results, {metrics.fetch_failures} failures"
        )

    def log_final_report(self):
        """Log the summary of a finished run"""
        report = self.get_final_report()
        summary = report['performance_summary']
        crawl_metrics = report['final_snapshot']['crawl_metrics']
        system_metrics = report['final_snapshot']['system_metrics']

        logger.info(
            f"Crawl finished in {summary['total_runtime_seconds']:.1f}s: "
            f"{crawl_metrics['pages_fetched']} pages, {crawl_metrics['leaves_collected']} results "
            f"({crawl_metrics['duplicates_dropped']} duplicates dropped)"
        )
        if crawl_metrics['fetch_failures'] or crawl_metrics['classifier_failures']:
            logger.warning(
                f"{crawl_metrics['fetch_failures']} fetches failed, "
                f"{crawl_metrics['classifier_failures']} pages could not be classified"
            )
        if crawl_metrics['tasks_dropped']:
            logger.warning(f"{crawl_metrics['tasks_dropped']} tasks dropped by the task limit")
        logger.debug(
            f"Peak in flight: {crawl_metrics['peak_in_flight']}, "
            f"avg response: {crawl_metrics['avg_response_time']:.2f}s, "
            f"memory: {system_metrics['memory_used_mb']:.0f} MB"
        )

    def get_final_report(self) -> Dict[str, Any]:
        """Generate final crawl report"""
        snapshot = self.metrics.get_current_snapshot()

        return {
            'final_snapshot': snapshot,
            'performance_summary': self._generate_performance_summary(),
        }

    def _generate_performance_summary(self) -> Dict[str, Any]:
        crawl_metrics = self.metrics.snapshot_metrics()
        elapsed_time = time.time() - self.metrics.start_time
        attempts = crawl_metrics.pages_fetched + crawl_metrics.fetch_failures

        return {
            'total_runtime_seconds': elapsed_time,
            'pages_per_minute': (crawl_metrics.pages_fetched / elapsed_time) * 60 if elapsed_time > 0 else 0,
            'success_rate': (crawl_metrics.pages_fetched / attempts * 100) if attempts else 0.0,
        }
