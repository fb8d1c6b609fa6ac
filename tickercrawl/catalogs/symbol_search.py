"""
Symbol search catalog - flat, paginated search results listing tickers

Each seed is a query (usually an exchange abbreviation such as "GR"). A result
page lists matching securities with their type; rows whose type passes the
label filter contribute their symbol. Follow-up pages are addressed with
``&page=N`` and announced by a "Showing 1 - 20 of 7755" line.
"""

from enum import Enum
from typing import List, Optional
from urllib.parse import quote_plus

from ..crawler import CrawlerBuilder, PageOutcome, StageRule, Task, marker_pager, ticker_root
from ..filters import LabelFilter
from ..parser import text_of

SEARCH_URL = 'http://www.bloomberg.com/markets/symbolsearch'

# Default queries: exchange abbreviations
ABBREVIATIONS = (
    'AB', 'AG', 'AR', 'AU', 'AV', 'BB', 'BZ', 'CB', 'CH', 'CI', 'CN', 'CP',
    'DC', 'EY', 'FH', 'FP', 'GA', 'GR', 'HB', 'HK', 'ID', 'IJ', 'IM', 'IN',
    'IT', 'JP', 'KS', 'LN', 'MK', 'MM', 'NA', 'NO', 'NZ', 'PL', 'PM', 'PW',
    'RM', 'SJ', 'SM', 'SP', 'SS', 'SW', 'TB', 'TI', 'TT', 'UH', 'US', 'VN',
)

DEFAULT_TYPE = 'Common Stock'

ROW_SELECTOR = 'table.dual_border_data_table tr'
SYMBOL_SELECTOR = 'td.symbol'
TYPE_SELECTOR = 'td.type'
MATCHES_SELECTOR = '.ticker_matches'


class SearchStage(Enum):
    RESULTS = 'results'


def search_url(query: str) -> str:
    return f"{SEARCH_URL}?query={quote_plus(query)}"


def seed_to_tasks(query: str) -> List[Task]:
    return [Task(search_url(query), SearchStage.RESULTS)]


def classify_results(page, location: str, type_filter: LabelFilter) -> PageOutcome:
    """Symbols of all result rows whose security type passes ``type_filter``"""
    symbols = []
    for row in page.select(ROW_SELECTOR):
        symbol = text_of(row, SYMBOL_SELECTOR)
        if symbol and type_filter(text_of(row, TYPE_SELECTOR)):
            symbols.append(symbol)
    return PageOutcome.of(leaves=symbols)


def matches_label(page) -> Optional[str]:
    return text_of(page, MATCHES_SELECTOR)


STAGES = {
    SearchStage.RESULTS: StageRule(classify_results, marker_pager('page', matches_label)),
}


def builder(type_filter: Optional[LabelFilter] = None) -> CrawlerBuilder:
    """Crawler builder for the symbol search; keeps "Common Stock" rows by default"""
    return (CrawlerBuilder(seed_to_tasks)
            .stages(STAGES)
            .label_filter(type_filter or LabelFilter.exact(DEFAULT_TYPE))
            .dedup_key(ticker_root))
