"""
Playwright-based scraper for the Facebook Ad Library.

This package provides:
- Keyword searches rendered in a stealth headless Chromium session
- Cascading-selector extraction of ad cards into AdRecord objects
- Block/challenge detection that stops the scrape instead of evading it
"""

from .base import (
    AdRecord,
    ScrapeRequest,
    ScrapeResult,
    ScrapeSession,
    ScrapeState,
    ScraperError,
    ScrapeRequestError,
    BrowserSessionError,
)
from .config import AD_LIBRARY, AdLibraryConfig
from .sites.ad_library import AdLibraryScraper
from .manager import ScraperManager, scrape_ad_library

__all__ = [
    'AdRecord',
    'ScrapeRequest',
    'ScrapeResult',
    'ScrapeSession',
    'ScrapeState',
    'ScraperError',
    'ScrapeRequestError',
    'BrowserSessionError',
    'AD_LIBRARY',
    'AdLibraryConfig',
    'AdLibraryScraper',
    'ScraperManager',
    'scrape_ad_library',
]
