"""
Crawl Result - Data structures for fetched pages and classified outcomes
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .task import Task


@dataclass
class FetchResult:
    """Result of fetching a single location"""
    url: str
    content: Optional[str] = None
    effective_url: Optional[str] = None
    error: Optional[str] = None
    response_time: float = 0.0
    status_code: Optional[int] = None

    @property
    def success(self) -> bool:
        """True for a 2xx response that was read without a transport error"""
        if self.error is not None or self.status_code is None:
            return False
        return 200 <= self.status_code < 300

    @property
    def location(self) -> str:
        """Location after redirects, falling back to the requested one"""
        return self.effective_url or self.url


@dataclass(frozen=True)
class PageOutcome:
    """
    Children and leaf values discovered on one fetched page

    The crawler places children one level below the page they came from,
    whatever depth the classifier gave them.
    """
    children: Tuple[Task, ...] = ()
    leaves: Tuple[str, ...] = ()

    @classmethod
    def empty(cls) -> "PageOutcome":
        return cls()

    @classmethod
    def of(cls, children=(), leaves=()) -> "PageOutcome":
        """Build an outcome from any iterables"""
        return cls(children=tuple(children), leaves=tuple(leaves))

    def __bool__(self) -> bool:
        return bool(self.children or self.leaves)
