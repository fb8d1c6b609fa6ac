"""
Catalog definitions - stage tables, classifiers and pagers per remote catalog
"""

from . import sector_drilldown, symbol_search

CATALOGS = {
    'search': symbol_search,
    'sectors': sector_drilldown,
}

__all__ = ['CATALOGS', 'sector_drilldown', 'symbol_search']
