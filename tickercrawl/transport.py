"""
Transport - Asynchronous HTTP fetching on top of aiohttp
"""

import time
import asyncio
import logging
from typing import Optional

import aiohttp

from .crawler.result import FetchResult

logger = logging.getLogger(__name__)

USER_AGENT = 'TickerCrawler/1.0'


class AiohttpTransport:
    """
    Fetches pages through one shared aiohttp session

    HTTP failure statuses, timeouts and connection errors never raise; they
    come back as a ``FetchResult`` whose ``success`` is False.

    Usage:
        async with AiohttpTransport(max_concurrent=50, timeout=10) as transport:
            result = await transport.fetch(url)
    """

    def __init__(self, max_concurrent: int = 100, timeout: float = 30.0, user_agent: str = USER_AGENT):
        self.max_concurrent = max_concurrent
        self.timeout = timeout
        self.user_agent = user_agent
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def start(self):
        if self.session is None:
            connector = aiohttp.TCPConnector(limit=self.max_concurrent)
            self.session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers={'User-Agent': self.user_agent}
            )

    async def close(self):
        if self.session is not None:
            await self.session.close()
            self.session = None

    async def fetch(self, url: str, follow_redirects: bool = True) -> FetchResult:
        """Fetch a single URL and return the result"""
        if self.session is None:
            raise RuntimeError("Transport is not started, use it as an async context manager")

        start_time = time.time()

        try:
            async with self.session.get(url, allow_redirects=follow_redirects) as response:
                content = await response.text(errors='replace')
                response_time = time.time() - start_time

                result = FetchResult(
                    url=url,
                    content=content,
                    effective_url=str(response.url),
                    response_time=response_time,
                    status_code=response.status
                )
                if not result.success:
                    result.error = f"HTTP {response.status}"
                return result

        except asyncio.TimeoutError:
            return FetchResult(
                url=url,
                error="timeout",
                response_time=time.time() - start_time
            )
        except aiohttp.ClientError as e:
            return FetchResult(
                url=url,
                error=f"{type(e).__name__}: {e}",
                response_time=time.time() - start_time
            )
