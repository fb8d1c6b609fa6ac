"""
Shared test doubles: an in-memory transport and a tiny synthetic catalog
"""

import asyncio
from enum import Enum
from typing import Dict, List, Optional, Union

from tickercrawl.crawler import CrawlerBuilder, PageOutcome, StageRule, Task, marker_pager
from tickercrawl.crawler.result import FetchResult
from tickercrawl.parser import text_of

BASE = 'http://catalog.test'


class FakeTransport:
    """
    Serves canned responses from a dict

    Values may be HTML strings (200 responses), ``FetchResult`` objects or
    exceptions to raise. Unknown URLs answer 404. ``delays`` maps URLs to
    seconds to sleep before answering, to force out-of-order completion.
    """

    def __init__(self, pages: Dict[str, Union[str, FetchResult, Exception]],
                 delays: Optional[Dict[str, float]] = None):
        self.pages = pages
        self.delays = delays or {}
        self.requests: List[str] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def fetch(self, url: str, follow_redirects: bool = True) -> FetchResult:
        self.requests.append(url)
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(url, 0))
            response = self.pages.get(url)
            if response is None:
                return FetchResult(url=url, status_code=404, error="HTTP 404", effective_url=url)
            if isinstance(response, Exception):
                raise response
            if isinstance(response, FetchResult):
                return response
            return FetchResult(url=url, content=response, effective_url=url, status_code=200)
        finally:
            self.in_flight -= 1


class TreeStage(Enum):
    NODE = 'node'
    LIST = 'list'


def page(children=(), leaves=(), matches=None, child_stage='node') -> str:
    """Render a synthetic catalog page"""
    links = ''.join(f'<li><a class="{child_stage}" href="{href}">{href}</a></li>' for href in children)
    items = ''.join(f'<li class="leaf">{leaf}</li>' for leaf in leaves)
    label = f'<p class="matches">Showing {matches}</p>' if matches else ''
    return f'<html><body>{label}<ul class="children">{links}</ul><ul>{items}</ul></body></html>'


def classify(page, location, label_filter) -> PageOutcome:
    children = [Task(a['href'], TreeStage.NODE) for a in page.select('a.node')]
    children += [Task(a['href'], TreeStage.LIST) for a in page.select('a.list')]
    leaves = [li.get_text(strip=True) for li in page.select('li.leaf') if label_filter(li.get_text(strip=True))]
    return PageOutcome.of(children=children, leaves=leaves)


def matches_label(page):
    return text_of(page, 'p.matches')


TREE_STAGES = {
    TreeStage.NODE: StageRule(classify),
    TreeStage.LIST: StageRule(classify, marker_pager('page', matches_label)),
}


def seed_to_tasks(seed: str) -> List[Task]:
    return [Task(f"{BASE}/list?q={seed}", TreeStage.LIST)]


def tree_builder(transport) -> CrawlerBuilder:
    return (CrawlerBuilder(seed_to_tasks)
            .stages(TREE_STAGES)
            .transport(transport)
            .progress_interval(None))
