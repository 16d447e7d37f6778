"""
Scraper Manager - runs ad library scrapes for the API.

Each scrape owns a full browser, so the manager caps how many run at
once and keeps simple run statistics for the health endpoint.
"""

import asyncio
from typing import Dict, Optional
import logging

from .base import ScrapeRequest, ScrapeResult, BrowserSessionError
from .sites.ad_library import AdLibraryScraper

logger = logging.getLogger(__name__)


class ScraperManager:
    """
    Runs scrapes with bounded concurrency.

    Usage:
        manager = ScraperManager(max_concurrent=2)
        result = await manager.scrape(ScrapeRequest(keyword='shoes'))
        status = manager.get_status()
    """

    def __init__(self, scraper: Optional[AdLibraryScraper] = None, max_concurrent: int = 2):
        """
        Initialize the scraper manager.

        Args:
            scraper: Scraper to run requests with
            max_concurrent: Maximum browser sessions alive at once
        """
        if max_concurrent < 1:
            raise ValueError("max_concurrent must be at least 1")
        self.scraper = scraper or AdLibraryScraper()
        self.max_concurrent = max_concurrent
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self.active = 0
        self.waiting = 0
        self.completed = 0
        self.blocked = 0
        self.failed = 0

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        """
        Run one scrape, waiting for a free slot first.

        Raises:
            BrowserSessionError: Propagated from the scraper
        """
        self.waiting += 1
        try:
            await self._semaphore.acquire()
        finally:
            self.waiting -= 1

        self.active += 1
        try:
            result = await self.scraper.scrape(request)
        except BrowserSessionError:
            self.failed += 1
            raise
        finally:
            self.active -= 1
            self._semaphore.release()

        self.completed += 1
        if result.rate_limited:
            self.blocked += 1
        return result

    def get_status(self) -> Dict:
        """Current load and totals."""
        return {
            'active': self.active,
            'waiting': self.waiting,
            'max_concurrent': self.max_concurrent,
            'completed': self.completed,
            'blocked': self.blocked,
            'failed': self.failed,
        }


# Convenience function for standalone usage

async def scrape_ad_library(
    keyword: str,
    country: str = 'US',
    max_ads: int = 50,
    scroll_count: int = 5,
) -> ScrapeResult:
    """
    Scrape the ad library once with default settings.

    Raises:
        ScrapeRequestError: If the arguments are invalid (no browser is started)
        BrowserSessionError: If the browser could not be launched or driven
    """
    request = ScrapeRequest(keyword=keyword, country=country, max_ads=max_ads, scroll_count=scroll_count)
    return await ScraperManager(max_concurrent=1).scrape(request)
