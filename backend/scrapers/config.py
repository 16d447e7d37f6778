"""
Configuration for the Facebook Ad Library scraper.

Defines:
- The AdLibraryConfig for browser session and timing settings
- Browser identities used for session rotation
- Selector cascades used by the extractors (most specific first)
- Block/challenge phrases used by the rate limit detector
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple


AD_LIBRARY_URL = 'https://www.facebook.com/ads/library/'


# ============================================================
# BROWSER IDENTITIES
# ============================================================

USER_AGENTS = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:121.0) Gecko/20100101 Firefox/121.0',
    'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.1 Safari/605.1.15',
)


@dataclass
class AdLibraryConfig:
    """Browser and timing configuration for an ad library scrape."""
    base_url: str = AD_LIBRARY_URL
    headless: bool = True
    navigation_timeout: float = 60.0            # Hard ceiling for page.goto (seconds)
    viewport: Dict[str, int] = field(default_factory=lambda: {'width': 1920, 'height': 1080})
    locale: str = 'en-US'
    timezone_id: str = 'America/New_York'
    extra_http_headers: Dict[str, str] = field(default_factory=lambda: {
        'Accept-Language': 'en-US,en;q=0.9',
        'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8',
    })
    launch_args: List[str] = field(default_factory=lambda: [
        '--disable-blink-features=AutomationControlled',
        '--no-sandbox',
        '--disable-setuid-sandbox',
        '--disable-dev-shm-usage',
        '--disable-accelerated-2d-canvas',
        '--no-first-run',
        '--no-zygote',
        '--disable-gpu',
    ])
    settle_delay: Tuple[float, float] = (2.0, 4.0)      # After navigation
    scroll_distance: Tuple[int, int] = (800, 1200)      # Wheel delta in pixels
    scroll_pause: Tuple[float, float] = (1.5, 3.0)      # After each scroll


AD_LIBRARY = AdLibraryConfig()


# ============================================================
# RATE LIMIT / CHALLENGE SIGNATURES
# ============================================================

# Matched against lower-cased page content
RATE_LIMIT_INDICATORS = (
    'rate limit',
    'too many requests',
    'try again later',
    'temporarily blocked',
    'captcha',
    "verify you're human",
    'verify you’re human',
    'unusual traffic',
)


# ============================================================
# SELECTOR CASCADES
# Class names on the ad library are obfuscated and drift, so each
# field is resolved from an ordered list of candidates.
# ============================================================

# Anchors pointing at an ad detail page
AD_LINK_SELECTOR = 'a[href*="/ads/library/"]'
AD_ID_PATTERN = r'[?&]id=(\d+)'

CARD_SELECTORS = (
    'div[class*="xh8yej3"]',
    'div[class*="x1qjc9v5"]',
    '[data-testid="ad_library_card"]',
    'div[class*="x1dr59a3"]',
)

ADVERTISER_SELECTORS = (
    'span[class*="x1lliihq"]',
    'strong',
    'a[href*="/ads/library/?active_status"] span',
    'div[class*="x1heor9g"] span',
)

ADVERTISER_PAGE_PATTERNS = (
    r'view_all_page_id=(\d+)',
    r'facebook\.com/(\d{5,})(?:[/?]|$)',
)

MEDIA_SELECTORS = (
    'img[src*="scontent"]',
    'img[src*="fbcdn"]',
    'video[src*="scontent"]',
    'video[src*="fbcdn"]',
    'video[poster*="scontent"]',
    'video[poster*="fbcdn"]',
)

AD_COPY_SELECTORS = (
    'div[class*="x1iorvi4"]',
    'div[class*="xdj266r"]',
    'span[class*="x193iq5w"]',
)

AD_COPY_MIN_LENGTH = 20     # Exclusive
AD_COPY_MAX_SOURCE_LENGTH = 5000
AD_COPY_MAX_LENGTH = 500

# Card chrome that is never ad copy
AD_COPY_BOILERPLATE = (
    'Library ID',
    'Started running on',
    'See ad details',
    'See summary details',
    'This ad has multiple versions',
)

START_DATE_PATTERNS = (
    r'Started running on ([A-Za-z]+ \d+, \d{4})',
    r'Started running on (\d{1,2} [A-Za-z]+ \d{4})',
    r'Running since ([A-Za-z]+ \d+, \d{4})',
)

# Redirect wrapper used for outbound links
REDIRECT_LINK_SELECTOR = 'a[href*="l.facebook.com/l.php"]'
REDIRECT_PARAM = 'u'
EXTERNAL_LINK_SELECTOR = 'a[href^="http"]'

# Hosts owned by the ad library itself; never a landing page
INTERNAL_DOMAINS = ('facebook.com', 'fb.com', 'fb.me', 'fbcdn.net')

# Order matters: first label found in the card text wins
CTA_LABELS = (
    'Shop Now',
    'Learn More',
    'Sign Up',
    'Get Offer',
    'Buy Now',
    'Order Now',
    'Subscribe',
)
