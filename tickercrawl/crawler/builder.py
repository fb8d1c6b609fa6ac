"""
Crawler Builder - Fluent API for configuring crawlers
"""

from enum import Enum
from typing import Callable, Dict, Iterable, Optional

from ..filters import LabelFilter
from .aggregator import identity
from .base import Crawler
from .config import Classifier, CrawlConfig, StageRule
from .pagination import Pager
from .task import Task


class CrawlerBuilder:
    """Builder for creating crawlers stage by stage"""

    def __init__(self, seed_to_tasks: Optional[Callable[[str], Iterable[Task]]] = None):
        self._seed_to_tasks = seed_to_tasks
        self._stages: Dict[Enum, StageRule] = {}
        self._dedup_key = identity
        self._label_filter = LabelFilter.accept_all()
        self._max_concurrent = 100
        self._timeout = 30.0
        self._follow_redirects = True
        self._max_tasks = None
        self._progress_interval = 30.0
        self._transport = None

    def seeds(self, seed_to_tasks: Callable[[str], Iterable[Task]]):
        """Set how a seed value becomes its initial tasks"""
        self._seed_to_tasks = seed_to_tasks
        return self

    def stage(self, stage: Enum, classifier: Classifier, pager: Optional[Pager] = None):
        """Add the classifier (and optional pager) for one stage"""
        self._stages[stage] = StageRule(classifier=classifier, pager=pager)
        return self

    def stages(self, rules: Dict[Enum, StageRule]):
        """Add a whole stage table at once"""
        self._stages.update(rules)
        return self

    def dedup_key(self, key: Callable[[str], str]):
        self._dedup_key = key
        return self

    def label_filter(self, label_filter: LabelFilter):
        """Set the filter handed to every classifier"""
        self._label_filter = label_filter
        return self

    def max_concurrent(self, count: int):
        """Set maximum number of fetches in flight"""
        self._max_concurrent = count
        return self

    def timeout(self, seconds: float):
        """Set per-fetch timeout"""
        self._timeout = seconds
        return self

    def follow_redirects(self, enable: bool = True):
        self._follow_redirects = enable
        return self

    def max_tasks(self, count: Optional[int]):
        """Cap the total number of tasks of a run"""
        self._max_tasks = count
        return self

    def progress_interval(self, seconds: Optional[float]):
        """Seconds between progress log lines, None to disable"""
        self._progress_interval = seconds
        return self

    def transport(self, transport):
        """Use an existing transport instead of a fresh aiohttp one per run"""
        self._transport = transport
        return self

    def config(self) -> CrawlConfig:
        return CrawlConfig(
            stages=self._stages,
            seed_to_tasks=self._seed_to_tasks,
            dedup_key=self._dedup_key,
            label_filter=self._label_filter,
            max_concurrent=self._max_concurrent,
            timeout=self._timeout,
            follow_redirects=self._follow_redirects,
            max_tasks=self._max_tasks,
            progress_interval=self._progress_interval
        )

    def build(self) -> Crawler:
        """Build the configured crawler"""
        return Crawler(self.config(), transport=self._transport)
