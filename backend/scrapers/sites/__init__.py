"""Per-site scraper implementations."""

from .ad_library import AdLibraryScraper

__all__ = ['AdLibraryScraper']
