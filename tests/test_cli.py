import asyncio

import pytest

from tickercrawl import cli
from tickercrawl.catalogs import sector_drilldown, symbol_search
from tickercrawl.crawler import identity, ticker_root

from .helpers import BASE, FakeTransport, page, tree_builder


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, 'LogManager', lambda **kwargs: None)


def parse(*argv):
    return cli.build_parser().parse_args(list(argv))


class TestBuildCrawler:
    def test_search_defaults(self):
        args = parse('search')
        crawler = cli.build_crawler(args)

        assert cli.seeds(args) == list(symbol_search.ABBREVIATIONS)
        assert repr(crawler.config.label_filter) == "LabelFilter(exact(Common Stock))"
        assert crawler.config.dedup_key is ticker_root
        assert crawler.config.max_concurrent == 100
        assert crawler.config.progress_interval == 30.0

    def test_search_options(self):
        args = parse('search', '--abbrev', 'GR', '--abbrev', 'US', '--type', 'ADR', '--keep-exchange',
                     '--concurrency', '8', '--timeout', '5', '--max-tasks', '50', '--progress-interval', '0')
        crawler = cli.build_crawler(args)

        assert cli.seeds(args) == ['GR', 'US']
        assert repr(crawler.config.label_filter) == "LabelFilter(exact(ADR))"
        assert crawler.config.dedup_key is identity
        assert crawler.config.max_concurrent == 8
        assert crawler.config.timeout == 5.0
        assert crawler.config.max_tasks == 50
        assert crawler.config.progress_interval is None

    @pytest.mark.parametrize("argv,description", [
        (['--type-pattern', 'Fund$'], "LabelFilter(pattern(Fund$))"),
        (['--all-types'], "LabelFilter(all)"),
    ])
    def test_type_selection(self, argv, description):
        crawler = cli.build_crawler(parse('search', *argv))

        assert repr(crawler.config.label_filter) == description

    def test_type_options_are_exclusive(self):
        with pytest.raises(SystemExit):
            parse('search', '--type', 'ADR', '--all-types')

    def test_sectors(self):
        args = parse('sectors', '--region', 'Europe', '--region', 'Asia')
        crawler = cli.build_crawler(args)

        assert cli.seeds(args) == [sector_drilldown.LANDING_URL]
        assert crawler.config.label_filter('Europe')
        assert not crawler.config.label_filter('Americas')

    def test_unknown_region(self):
        with pytest.raises(SystemExit):
            parse('sectors', '--region', 'Atlantis')


class TestMain:
    @pytest.fixture
    def fake_crawl(self, monkeypatch):
        calls = []

        async def crawl(crawler, seed_values, output):
            calls.append((seed_values, output))
            return ['ABC:GR', 'DEF:US']

        monkeypatch.setattr(cli, 'crawl', crawl)
        return calls

    def test_prints_tickers(self, fake_crawl, capsys):
        assert cli.main(['search', '--abbrev', 'GR', '--log-dir', '']) == 0

        assert capsys.readouterr().out == 'ABC:GR\nDEF:US\n'
        assert fake_crawl == [(['GR'], None)]

    def test_output_file_suppresses_stdout(self, fake_crawl, capsys, tmp_path):
        output = str(tmp_path / 'tickers.txt')

        assert cli.main(['sectors', '-o', output, '--log-dir', '']) == 0

        assert capsys.readouterr().out == ''
        assert fake_crawl == [([sector_drilldown.LANDING_URL], output)]

    def test_invalid_configuration(self, fake_crawl):
        assert cli.main(['search', '--concurrency', '0', '--log-dir', '']) == 2
        assert fake_crawl == []


def test_crawl_saves_results(tmp_path):
    crawler = tree_builder(FakeTransport({f"{BASE}/list?q=A": page(leaves=["X:US"])})).build()
    output = str(tmp_path / 'out.txt')

    assert asyncio.run(cli.crawl(crawler, ['A'], output)) == ['X:US']
    assert (tmp_path / 'out.txt').read_text(encoding='utf-8') == 'X:US\n'
