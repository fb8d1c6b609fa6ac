"""
Sector drill-down catalog - sectors, industries per region, companies, tickers

The landing page links every sector; a sector page links its industries. Each
industry is listed once per region, and an industry listing links the
companies (20 per page, follow-up pages addressed with ``&firstrow=<offset>``).
A company snapshot page finally yields its ticker, either from the effective
URL (``.../FB2A:GR``) or from the quote box.
"""

import re
from enum import Enum
from typing import List, Optional
from urllib.parse import urljoin

from ..crawler import CrawlerBuilder, PageOutcome, StageRule, Task, marker_pager, ticker_root
from ..filters import LabelFilter
from ..parser import text_of

BASE_URL = 'http://www.bloomberg.com/research/sectorandindustry/'
LANDING_URL = urljoin(BASE_URL, 'overview/sectorlanding.asp')

REGIONS = ('Americas', 'Europe', 'Asia', 'MidEastAfr')

SECTOR_SELECTOR = '#sectorTable h3 a[href]'
INDUSTRY_SELECTOR = '#columnLeft div.mb20 table tr td:nth-of-type(1) a[href]'
COMPANY_SELECTOR = '#columnLeft table tr td:nth-of-type(1) a.link_s[href]'
PAGING_SELECTOR = '#columnLeft div.paging'
TICKER_SELECTORS = (
    '#rrQuoteBox table tr > td:nth-of-type(1) > a',
    '#content div.basic-quote div.ticker-container div.ticker',
)

TICKER_IN_URL = re.compile(r'[A-Z0-9]+:[A-Z]+$')
SEARCH_REDIRECT = re.compile(r'stocks/?$')


class SectorStage(Enum):
    LANDING = 'landing'
    SECTOR = 'sector'
    INDUSTRY = 'industry'
    COMPANY = 'company'


def seed_to_tasks(seed: str) -> List[Task]:
    """The landing page, or the URL given as seed"""
    location = seed if seed.startswith(('http://', 'https://')) else LANDING_URL
    return [Task(location, SectorStage.LANDING)]


def _links(page, selector: str, location: str) -> List[str]:
    return [urljoin(location, link['href']) for link in page.select(selector)]


def _child_tasks(urls: List[str], stage: SectorStage) -> List[Task]:
    return [Task(url, stage) for url in urls]


def classify_landing(page, location: str, region_filter: LabelFilter) -> PageOutcome:
    return PageOutcome.of(children=_child_tasks(_links(page, SECTOR_SELECTOR, location), SectorStage.SECTOR))


def classify_sector(page, location: str, region_filter: LabelFilter) -> PageOutcome:
    """One industry task per industry and accepted region"""
    regions = [region for region in REGIONS if region_filter(region)]
    urls = [
        f"{industry}{'&' if '?' in industry else '?'}region={region}"
        for industry in _links(page, INDUSTRY_SELECTOR, location)
        for region in regions
    ]
    return PageOutcome.of(children=_child_tasks(urls, SectorStage.INDUSTRY))


def classify_industry(page, location: str, region_filter: LabelFilter) -> PageOutcome:
    return PageOutcome.of(children=_child_tasks(_links(page, COMPANY_SELECTOR, location), SectorStage.COMPANY))


def ticker(page, location: Optional[str] = None) -> Optional[str]:
    """Ticker symbol of a company page, preferring the one in its URL"""
    if location:
        match = TICKER_IN_URL.search(location)
        if match:
            return match.group(0)

    for selector in TICKER_SELECTORS:
        symbol = text_of(page, selector)
        if symbol:
            return symbol
    return None


def classify_company(page, location: str, region_filter: LabelFilter) -> PageOutcome:
    # Unknown companies redirect to the stock search
    if SEARCH_REDIRECT.search(location):
        return PageOutcome.empty()

    symbol = ticker(page, location)
    return PageOutcome.of(leaves=[symbol] if symbol else [])


def paging_label(page) -> Optional[str]:
    return text_of(page, PAGING_SELECTOR)


STAGES = {
    SectorStage.LANDING: StageRule(classify_landing),
    SectorStage.SECTOR: StageRule(classify_sector),
    SectorStage.INDUSTRY: StageRule(
        classify_industry,
        marker_pager('firstrow', paging_label, use_offset=True, include_partial=True)
    ),
    SectorStage.COMPANY: StageRule(classify_company),
}


def builder(region_filter: Optional[LabelFilter] = None) -> CrawlerBuilder:
    """Crawler builder for the sector drill-down over all or some regions"""
    return (CrawlerBuilder(seed_to_tasks)
            .stages(STAGES)
            .label_filter(region_filter or LabelFilter.accept_all())
            .dedup_key(ticker_root))
