from pathlib import Path

import pytest

from tickercrawl.catalogs import CATALOGS, sector_drilldown, symbol_search
from tickercrawl.catalogs.sector_drilldown import SectorStage
from tickercrawl.crawler import Task
from tickercrawl.crawler.result import FetchResult
from tickercrawl.filters import LabelFilter
from tickercrawl.parser import HTMLParser

from .helpers import FakeTransport

FIXTURES = Path(__file__).parent / 'fixtures'


def read_fixture(name):
    return (FIXTURES / name).read_text(encoding='utf-8')


def parse_fixture(name):
    return HTMLParser().parse(read_fixture(name))


def test_catalog_registry():
    assert set(CATALOGS) == {'search', 'sectors'}


class TestSymbolSearch:
    def test_search_url(self):
        assert symbol_search.search_url('GR') == 'http://www.bloomberg.com/markets/symbolsearch?query=GR'
        assert symbol_search.seed_to_tasks('GR') == [
            Task('http://www.bloomberg.com/markets/symbolsearch?query=GR', symbol_search.SearchStage.RESULTS)]

    @pytest.mark.parametrize("type_filter,expected", [
        (LabelFilter.exact('Common Stock'), ['ABC:GR', 'DEF:GR']),
        (LabelFilter.exact('ADR'), ['ABC:US', 'MNO:GR']),
        (LabelFilter.pattern(r'Fund$'), ['GHI:GR', 'JKL:GR']),
        (LabelFilter.accept_all(), ['ABC:GR', 'DEF:GR', 'ABC:US', 'GHI:GR', 'JKL:GR', 'MNO:GR']),
    ])
    def test_rows_are_filtered_by_type(self, type_filter, expected):
        page = parse_fixture('symbol_search_paginated.html')
        location = symbol_search.search_url('GR')

        outcome = symbol_search.classify_results(page, location, type_filter)

        assert list(outcome.leaves) == expected
        assert outcome.children == ()

    def test_no_matches(self):
        page = parse_fixture('symbol_search_empty.html')

        outcome = symbol_search.classify_results(page, symbol_search.search_url('XX'), LabelFilter.accept_all())

        assert not outcome
        assert symbol_search.matches_label(page) == 'No matches'

    def test_head_page_announces_follow_up_pages(self):
        page = parse_fixture('symbol_search_paginated.html')
        pager = symbol_search.STAGES[symbol_search.SearchStage.RESULTS].pager
        head = symbol_search.seed_to_tasks('GR')[0]

        follow_ups = pager.extra_tasks(head, page)

        assert [task.location for task in follow_ups] == [f"{head.location}&page=2"]
        assert all(task.stage is head.stage for task in follow_ups)

    def test_full_search_crawl(self):
        head = symbol_search.search_url('GR')
        transport = FakeTransport({
            head: read_fixture('symbol_search_paginated.html'),
            f"{head}&page=2": read_fixture('symbol_search_tail.html'),
        })
        crawler = symbol_search.builder().transport(transport).progress_interval(None).build()

        result = crawler.run(['GR'])

        assert sorted(result) == ['ABC:GR', 'DEF:GR', 'PQR:GR']
        assert sorted(transport.requests) == [head, f"{head}&page=2"]
        assert crawler.stats.duplicates_dropped == 1


SECTORS = 'http://www.bloomberg.com/research/sectorandindustry/'
INDUSTRY_1010 = f"{SECTORS}industries/industrydetail.asp?code=1010"
INDUSTRY_1020 = f"{SECTORS}industries/industrydetail.asp?code=1020"
SNAPSHOT = 'http://www.bloomberg.com/research/stocks/snapshot/snapshot.asp?capid='


class TestSectorClassifiers:
    def test_landing_links_sectors(self):
        page = parse_fixture('sector_landing.html')

        outcome = sector_drilldown.classify_landing(page, sector_drilldown.LANDING_URL, LabelFilter.accept_all())

        assert outcome.children == (
            Task(f"{SECTORS}sectors/sectordetail.asp?code=10", SectorStage.SECTOR),
            Task(f"{SECTORS}sectors/sectordetail.asp?code=15", SectorStage.SECTOR),
        )
        assert outcome.leaves == ()

    def test_sector_lists_industries_per_region(self):
        page = parse_fixture('sector_detail.html')
        location = f"{SECTORS}sectors/sectordetail.asp?code=10"

        outcome = sector_drilldown.classify_sector(page, location, LabelFilter.accept_all())

        assert len(outcome.children) == 2 * len(sector_drilldown.REGIONS)
        assert outcome.children[0] == Task(f"{INDUSTRY_1010}&region=Americas", SectorStage.INDUSTRY)
        assert outcome.children[-1] == Task(f"{INDUSTRY_1020}&region=MidEastAfr", SectorStage.INDUSTRY)

    def test_region_filter_limits_industry_tasks(self):
        page = parse_fixture('sector_detail.html')
        location = f"{SECTORS}sectors/sectordetail.asp?code=10"

        outcome = sector_drilldown.classify_sector(page, location, LabelFilter.exact('Europe', 'Asia'))

        assert [task.location for task in outcome.children] == [
            f"{INDUSTRY_1010}&region=Europe",
            f"{INDUSTRY_1010}&region=Asia",
            f"{INDUSTRY_1020}&region=Europe",
            f"{INDUSTRY_1020}&region=Asia",
        ]

    def test_industry_links_companies_only(self):
        page = parse_fixture('industry_detail.html')

        outcome = sector_drilldown.classify_industry(page, f"{INDUSTRY_1010}&region=Europe", LabelFilter.accept_all())

        assert [task.location for task in outcome.children] == [f"{SNAPSHOT}6491293", f"{SNAPSHOT}248501"]
        assert all(task.stage is SectorStage.COMPANY for task in outcome.children)

    def test_industry_paging_uses_row_offsets(self):
        page = parse_fixture('industry_detail.html')
        pager = sector_drilldown.STAGES[SectorStage.INDUSTRY].pager
        head = Task(f"{INDUSTRY_1010}&region=Europe", SectorStage.INDUSTRY, depth=2)

        follow_ups = list(pager.extra_tasks(head, page))

        assert follow_ups == [Task(f"{INDUSTRY_1010}&region=Europe&firstrow=20", SectorStage.INDUSTRY, depth=2)]
        assert list(pager.extra_tasks(follow_ups[0], page)) == []

    def test_industry_paging_reaches_the_last_partial_page(self):
        page = HTMLParser().parse('<div id="columnLeft"><div class="paging">1 - 20 of 57</div></div>')
        pager = sector_drilldown.STAGES[SectorStage.INDUSTRY].pager
        head = Task(f"{INDUSTRY_1010}&region=Europe", SectorStage.INDUSTRY)

        assert [task.location for task in pager.extra_tasks(head, page)] == [
            f"{INDUSTRY_1010}&region=Europe&firstrow=20",
            f"{INDUSTRY_1010}&region=Europe&firstrow=40",
        ]


class TestTicker:
    def test_from_effective_url(self):
        page = parse_fixture('company_quote_box.html')

        assert sector_drilldown.ticker(page, 'http://www.bloomberg.com/quote/FB2A:GR') == 'FB2A:GR'

    def test_from_quote_box(self):
        page = parse_fixture('company_quote_box.html')

        assert sector_drilldown.ticker(page, f"{SNAPSHOT}6491293") == 'ATO:FP'

    def test_from_basic_quote(self):
        page = parse_fixture('company_basic_quote.html')

        assert sector_drilldown.ticker(page, f"{SNAPSHOT}77") == 'GAS:US'

    def test_missing(self):
        page = HTMLParser().parse('<html><body><p>Company profile</p></body></html>')

        assert sector_drilldown.ticker(page, f"{SNAPSHOT}1") is None
        assert not sector_drilldown.classify_company(page, f"{SNAPSHOT}1", LabelFilter.accept_all())

    def test_search_redirect_yields_nothing(self):
        page = parse_fixture('company_quote_box.html')

        outcome = sector_drilldown.classify_company(page, 'http://www.bloomberg.com/markets/stocks',
                                                    LabelFilter.accept_all())

        assert not outcome


def company_listing(*capids):
    rows = ''.join(
        f'<tr><td><a class="link_s" href="../../stocks/snapshot/snapshot.asp?capid={capid}">Co {capid}</a></td></tr>'
        for capid in capids
    )
    return f'<html><body><div id="columnLeft"><table>{rows}</table></div></body></html>'


def test_full_sector_crawl():
    europe_1010 = f"{INDUSTRY_1010}&region=Europe"
    transport = FakeTransport({
        sector_drilldown.LANDING_URL: read_fixture('sector_landing.html'),
        f"{SECTORS}sectors/sectordetail.asp?code=10": read_fixture('sector_detail.html'),
        europe_1010: read_fixture('industry_detail.html'),
        f"{europe_1010}&firstrow=20": company_listing(3),
        f"{INDUSTRY_1020}&region=Europe": company_listing(77),
        f"{SNAPSHOT}6491293": read_fixture('company_quote_box.html'),
        f"{SNAPSHOT}248501": FetchResult(
            url=f"{SNAPSHOT}248501", content='<html><body></body></html>',
            effective_url='http://www.bloomberg.com/quote/FB2A:GR', status_code=200),
        f"{SNAPSHOT}3": FetchResult(
            url=f"{SNAPSHOT}3", content='<html><body><p>Search</p></body></html>',
            effective_url='http://www.bloomberg.com/markets/stocks', status_code=200),
        f"{SNAPSHOT}77": read_fixture('company_basic_quote.html'),
    })
    crawler = (sector_drilldown.builder(LabelFilter.exact('Europe'))
               .transport(transport)
               .progress_interval(None)
               .build())

    result = crawler.run([sector_drilldown.LANDING_URL])

    assert sorted(result) == ['ATO:FP', 'FB2A:GR', 'GAS:US']
    # sector 15 is not served and fails without affecting its sibling
    assert crawler.stats.fetch_failures == 1
    assert len(transport.requests) == 10
