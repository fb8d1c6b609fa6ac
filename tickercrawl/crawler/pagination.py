"""
Pagination - Derive additional same-stage pages from a "<count> of <total>" label
"""

import logging
import math
import re
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

from .task import Task

logger = logging.getLogger(__name__)

# "20 of 7,755", "Showing 1 - 20 of 7755": count is the number right before "of"
_LABEL_PATTERN = re.compile(r'(\d[\d,]*(?:\.\d+)?)\s+of\s+(\d[\d,]*(?:\.\d+)?)', re.IGNORECASE)


def _to_number(text: str) -> float:
    return float(text.replace(',', ''))


@dataclass(frozen=True)
class PaginationSpec:
    """How many items a page shows versus how many exist in total"""
    current_count: float
    total_count: float

    @classmethod
    def parse(cls, label: Optional[str]) -> Optional["PaginationSpec"]:
        """Parse a pagination label, returning None if absent or malformed"""
        if not label:
            return None

        match = _LABEL_PATTERN.search(label)
        if not match:
            logger.debug(f"No pagination found in label: {label!r}")
            return None

        try:
            return cls(_to_number(match.group(1)), _to_number(match.group(2)))
        except ValueError:
            logger.debug(f"Malformed pagination label: {label!r}")
            return None

    def extra_pages(self, include_partial: bool = False) -> int:
        """
        Number of pages needed after the head page

        Only full pages are counted unless ``include_partial``, which also
        asks for a trailing page holding the remainder.
        """
        if self.current_count <= 0 or self.current_count >= self.total_count:
            return 0
        pages = self.total_count / self.current_count
        pages = math.ceil(pages) if include_partial else math.floor(pages)
        return max(int(pages) - 1, 0)


class FollowUps:
    """
    Follow-up tasks of one head page, built only while iterated

    ``len()`` is known up front, so a capped scheduler can count the tasks it
    cannot take without building them.
    """

    def __init__(self, head: Task, count: int = 0, per_page: int = 0,
                 page_location: Optional[Callable[[str, int, int], str]] = None):
        self.head = head
        self.count = count
        self.per_page = per_page
        self.page_location = page_location

    def __len__(self) -> int:
        return self.count

    def __iter__(self) -> Iterator[Task]:
        for index in range(self.count):
            location = self.page_location(self.head.location, index + 2, (index + 1) * self.per_page)
            yield self.head.sibling(location)


class Pager:
    """
    Per-stage pagination rules

    Args:
        label: extracts the pagination label from a parsed page
        page_location: builds the location of page ``number`` (2, 3, ...)
            from the head location and the item ``offset`` it starts at
        is_head: True when a location is the first page of its sequence
        include_partial: also request a trailing page that is not full
    """

    def __init__(self,
                 label: Callable[[object], Optional[str]],
                 page_location: Callable[[str, int, int], str],
                 is_head: Callable[[str], bool],
                 include_partial: bool = False):
        self.label = label
        self.page_location = page_location
        self.is_head = is_head
        self.include_partial = include_partial

    def extra_tasks(self, task: Task, page) -> FollowUps:
        """Tasks for every page after ``task``, or none if it is not a head page"""
        if page is None or not self.is_head(task.location):
            return FollowUps(task)

        spec = PaginationSpec.parse(self.label(page))
        if spec is None:
            return FollowUps(task)

        return FollowUps(task, spec.extra_pages(self.include_partial), int(spec.current_count), self.page_location)


def marker_pager(marker: str, label: Callable[[object], Optional[str]],
                 use_offset: bool = False, include_partial: bool = False) -> Pager:
    """
    Pager for catalogs that address follow-up pages with a query parameter

    Page locations append ``&<marker>=<n>`` (or ``?`` when the head has no
    query); ``n`` is the page number, or the item offset when ``use_offset``.
    A location carrying the marker is never a head.
    """
    marker_re = re.compile(r'[?&]' + re.escape(marker) + r'=')

    def page_location(head: str, number: int, offset: int) -> str:
        separator = '&' if '?' in head else '?'
        value = offset if use_offset else number
        return f"{head}{separator}{marker}={value}"

    def is_head(location: str) -> bool:
        return marker_re.search(location) is None

    return Pager(label=label, page_location=page_location, is_head=is_head, include_partial=include_partial)
