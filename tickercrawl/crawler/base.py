"""
Crawler - Hierarchical, paginated, concurrent crawl engine
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..error_handler import ConfigurationError, ErrorHandler, ErrorType, classify_error
from ..monitoring import CrawlMetrics, MetricsCollector, ProgressReporter
from ..parser import HTMLParser
from ..transport import AiohttpTransport
from .aggregator import ResultAggregator
from .config import CrawlConfig
from .pagination import FollowUps
from .result import FetchResult, PageOutcome
from .scheduler import Scheduler
from .task import Task

logger = logging.getLogger(__name__)


@dataclass
class CrawlState:
    """Mutable state of one run; created by ``crawl`` and discarded afterwards"""
    scheduler: Scheduler
    aggregator: ResultAggregator
    metrics: MetricsCollector


class Crawler:
    """
    Crawls a tree-shaped catalog from a set of seeds and collects leaf values

    Each fetched page is classified by the rule of its task's stage. The
    classifier's children go back to the scheduler, its leaves to the result
    aggregator, and head pages of a paginated stage add one task per follow-up
    page. A run ends when nothing is queued and nothing is in flight. Failed
    fetches and broken pages are recorded and skipped, never retried.

    Usage:
        crawler = Crawler(config)
        tickers = crawler.run(['AG', 'US'])
        crawler.stats.fetch_failures
    """

    def __init__(self, config: CrawlConfig, transport=None, parser: Optional[HTMLParser] = None):
        self.config = config
        self.transport = transport
        self.parser = parser or HTMLParser()

        # Outcome of the most recent run
        self.error_handler = ErrorHandler()
        self.stats = CrawlMetrics()

    def run(self, seeds: Iterable[str]) -> List[str]:
        """Crawl from ``seeds`` and block until the whole tree is exhausted"""
        return asyncio.run(self.crawl(seeds))

    async def crawl(self, seeds: Iterable[str]) -> List[str]:
        """Async variant of ``run`` for callers already inside an event loop"""
        self.error_handler = ErrorHandler()
        self.stats = CrawlMetrics()
        initial_tasks = self._initial_tasks(seeds)

        state = CrawlState(
            scheduler=Scheduler(self.config.max_concurrent, self.config.max_tasks),
            aggregator=ResultAggregator(self.config.dedup_key),
            metrics=MetricsCollector()
        )

        if not initial_tasks:
            logger.info("No seeds given, nothing to crawl")
            self.stats = state.metrics.snapshot_metrics()
            return []

        state.scheduler.submit_all(initial_tasks)
        logger.info(f"Starting crawl with {len(initial_tasks)} seed tasks "
                    f"(max {self.config.max_concurrent} concurrent)")

        if self.transport is not None:
            await self._crawl_loop(self.transport, state)
        else:
            async with AiohttpTransport(self.config.max_concurrent, self.config.timeout) as transport:
                await self._crawl_loop(transport, state)

        return list(state.aggregator.snapshot())

    def _initial_tasks(self, seeds: Iterable[str]) -> List[Task]:
        """Map seeds to tasks, rejecting stages without a rule before any fetch"""
        tasks = []
        for seed in seeds:
            for task in self.config.seed_to_tasks(seed):
                self.config.rule_for(task.stage)
                tasks.append(task)
        return tasks

    async def _crawl_loop(self, transport, state: CrawlState):
        reporter = ProgressReporter(state.metrics, self.config.progress_interval)
        await reporter.start_reporting()

        try:
            await state.scheduler.run(lambda task: self._process_task(task, transport, state))
        finally:
            await reporter.stop_reporting()
            self._update_metrics(state)
            self.stats = state.metrics.snapshot_metrics()
            reporter.log_final_report()

    async def _process_task(self, task: Task, transport, state: CrawlState):
        """Fetch one task and hand its outcome back to the scheduler"""
        try:
            result = await self._fetch(task, transport, state)
            if result is not None:
                self._handle_result(task, result, state)
        finally:
            # Everything this task discovered is queued by now
            state.scheduler.complete()
            self._update_metrics(state)

    async def _fetch(self, task: Task, transport, state: CrawlState) -> Optional[FetchResult]:
        """Fetch a task's location; failures are recorded and give None"""
        try:
            result = await transport.fetch(task.location, follow_redirects=self.config.follow_redirects)
        except Exception as e:
            self.error_handler.record(task.location, classify_error(e), f"{type(e).__name__}: {e}")
            state.metrics.record_fetch_failure(task.location)
            return None

        if not result.success:
            error_type = classify_error(status_code=result.status_code)
            if result.error == "timeout":
                error_type = ErrorType.NETWORK_TIMEOUT
            elif result.status_code is None:
                error_type = ErrorType.CONNECTION_ERROR
            self.error_handler.record(task.location, error_type, result.error or f"HTTP {result.status_code}",
                                      status_code=result.status_code, response_time=result.response_time)
            state.metrics.record_fetch_failure(task.location)
            return None

        state.metrics.record_page_fetched(task.location, result.response_time, len(result.content or ''))
        logger.debug(f"Fetched {task.location} ({task.stage.name}, depth {task.depth})")
        return result

    def _handle_result(self, task: Task, result: FetchResult, state: CrawlState):
        """Classify a fetched page and submit what it yields (no suspension point)"""
        try:
            rule = self.config.rule_for(task.stage)
        except ConfigurationError as e:
            self._record_page_failure(task, state, ErrorType.CLASSIFIER_ERROR, str(e))
            return

        page = self.parser.parse(result.content)
        if page is None:
            logger.debug(f"Nothing to parse at {task.location}")
            state.metrics.record_empty_page(task.location)
            return

        outcome = PageOutcome.empty()
        follow_ups = FollowUps(task)

        try:
            outcome = rule.classifier(page, result.location, self.config.label_filter) or PageOutcome.empty()
        except Exception as e:
            self._record_page_failure(task, state, ErrorType.CLASSIFIER_ERROR, f"{type(e).__name__}: {e}")

        if rule.pager is not None:
            try:
                follow_ups = rule.pager.extra_tasks(task, page)
            except Exception as e:
                self._record_page_failure(task, state, ErrorType.PARSING_ERROR,
                                          f"pagination: {type(e).__name__}: {e}")

        state.scheduler.submit_all((task.child(child.location, child.stage) for child in outcome.children),
                                   total=len(outcome.children))
        try:
            state.scheduler.submit_all(follow_ups)
        except Exception as e:
            self._record_page_failure(task, state, ErrorType.PARSING_ERROR, f"pagination: {type(e).__name__}: {e}")

        for leaf in outcome.leaves:
            try:
                state.aggregator.add(leaf)
            except Exception as e:
                self._record_page_failure(task, state, ErrorType.CLASSIFIER_ERROR,
                                          f"unusable leaf {leaf!r}: {type(e).__name__}: {e}")

        if outcome.children or follow_ups:
            logger.debug(f"{task.location}: {len(outcome.children)} children, "
                         f"{len(follow_ups)} follow-up pages, {len(outcome.leaves)} leaves")

    def _record_page_failure(self, task: Task, state: CrawlState, error_type: ErrorType, message: str):
        self.error_handler.record(task.location, error_type, message)
        state.metrics.record_classifier_failure(task.location)

    def _update_metrics(self, state: CrawlState):
        state.metrics.update_scheduler_state(state.scheduler)
        state.metrics.update_results(state.aggregator)
