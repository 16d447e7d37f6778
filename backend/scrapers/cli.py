#!/usr/bin/env python3
"""
Run a single ad library scrape from the command line.

Usage:
    cd backend
    python -m scrapers.cli KEYWORD [options]

Examples:
    python -m scrapers.cli "running shoes"                  # US, 50 ads, 5 scrolls
    python -m scrapers.cli shoes --country GB --max-ads 20
    python -m scrapers.cli shoes --headed --output ads.json  # Watch the browser, save JSON
"""

import asyncio
import argparse
import logging
import json
import sys
from dataclasses import replace

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

from scrapers.base import ScrapeRequest, ScrapeRequestError, BrowserSessionError
from scrapers.config import AD_LIBRARY
from scrapers.sites.ad_library import AdLibraryScraper


def print_result(result, limit: int = 10):
    print(f"\n{'='*60}")
    print(f"Found {result.ads_found} ads (rate limited: {result.rate_limited}, scrolls: {result.scrolls})")
    print(f"{'='*60}\n")

    for i, ad in enumerate(result.ads[:limit]):
        print(f"{i+1}. {ad.advertiser_name} [{ad.ad_id}]")
        print(f"   Started: {ad.ad_start_date or '-'}")
        print(f"   CTA: {ad.cta_text or '-'}")
        print(f"   Landing: {ad.landing_page_url or '-'}")
        print(f"   Preview: {ad.preview_url}")
        if ad.ad_copy:
            print(f"   Copy: {ad.ad_copy[:120]}")
        print()

    if result.ads_found > limit:
        print(f"... and {result.ads_found - limit} more ads")


async def run() -> int:
    parser = argparse.ArgumentParser(description='Scrape the Facebook Ad Library for a keyword')
    parser.add_argument('keyword', help='Search keyword')
    parser.add_argument('--country', default='US', help='Country code (default: US)')
    parser.add_argument('--max-ads', type=int, default=50, help='Maximum ads to return')
    parser.add_argument('--scroll-count', type=int, default=5, help='Number of scroll steps')
    parser.add_argument('--headed', action='store_true', help='Show the browser window')
    parser.add_argument('--output', type=str, help='Write the JSON result to this file')
    parser.add_argument('--debug', action='store_true', help='Verbose logging')

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        request = ScrapeRequest(
            keyword=args.keyword,
            country=args.country,
            max_ads=args.max_ads,
            scroll_count=args.scroll_count,
        )
    except ScrapeRequestError as e:
        parser.error(str(e))

    scraper = AdLibraryScraper(config=replace(AD_LIBRARY, headless=not args.headed))

    try:
        result = await scraper.scrape(request)
    except BrowserSessionError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print_result(result)

    if args.output:
        with open(args.output, 'w', encoding='utf-8') as f:
            json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
        print(f"Saved result to {args.output}")

    return 0


def main() -> int:
    return asyncio.run(run())


if __name__ == '__main__':
    sys.exit(main())
