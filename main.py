#!/usr/bin/env python3
"""
Ticker Crawler
Collects exchange tickers from paginated stock catalogs
"""

import sys

from tickercrawl.cli import main

if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\n🛑 Crawler stopped by user")
        sys.exit(130)
