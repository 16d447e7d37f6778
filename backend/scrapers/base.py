"""
Base data structures for the ad library scraper.

This module defines the request/record/result types, the per-request
scrape session accumulator, and the error classes shared by the
crawler, the extractors and the API layer.
"""

from typing import List, Dict, Optional, Any, Iterable, Set
from dataclasses import dataclass, field, asdict
from enum import Enum
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

PREVIEW_URL_TEMPLATE = 'https://www.facebook.com/ads/library/?id={ad_id}'
DEFAULT_ADVERTISER_NAME = 'Unknown'


# ANSI color codes for terminal output
class Colors:
    """ANSI color codes for colorized logging."""
    RESET = '\033[0m'
    BOLD = '\033[1m'

    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    RED = '\033[91m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'

    @staticmethod
    def green(text):
        return f"{Colors.GREEN}{text}{Colors.RESET}"

    @staticmethod
    def yellow(text):
        return f"{Colors.YELLOW}{text}{Colors.RESET}"

    @staticmethod
    def red(text):
        return f"{Colors.RED}{text}{Colors.RESET}"

    @staticmethod
    def cyan(text):
        return f"{Colors.CYAN}{text}{Colors.RESET}"

    @staticmethod
    def gray(text):
        return f"{Colors.GRAY}{text}{Colors.RESET}"

    @staticmethod
    def bold(text):
        return f"{Colors.BOLD}{text}{Colors.RESET}"


# ============================================================
# ERRORS
# ============================================================

class ScraperError(Exception):
    """Base class for scraper errors."""


class ScrapeRequestError(ScraperError, ValueError):
    """Raised when a scrape request is invalid. Never reaches the browser."""


class BrowserSessionError(ScraperError):
    """Raised when the browser cannot be launched or driven."""


# ============================================================
# STATE
# ============================================================

class ScrapeState(Enum):
    """States of a single scrape run."""
    LAUNCHING = "launching"
    NAVIGATING = "navigating"
    CHECKING_RATE_LIMIT = "checking_rate_limit"
    EXTRACTING = "extracting"
    SCROLLING = "scrolling"
    DONE = "done"
    BLOCKED = "blocked"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ScrapeState.DONE, ScrapeState.BLOCKED, ScrapeState.FAILED)


# ============================================================
# DATA
# ============================================================

@dataclass(frozen=True)
class ScrapeRequest:
    """A validated scrape request."""
    keyword: str
    country: str = 'US'
    max_ads: int = 50
    scroll_count: int = 5

    def __post_init__(self):
        keyword = self.keyword.strip() if isinstance(self.keyword, str) else ''
        if not keyword:
            raise ScrapeRequestError("keyword is required")

        country = self.country.strip().upper() if isinstance(self.country, str) else ''
        if not country:
            raise ScrapeRequestError("country must be a non-empty country code")

        for name in ('max_ads', 'scroll_count'):
            value = getattr(self, name)
            # bool is an int subclass but never a meaningful count
            if isinstance(value, bool) or not isinstance(value, int):
                raise ScrapeRequestError(f"{name} must be an integer, got {value!r}")
            if value < 0:
                raise ScrapeRequestError(f"{name} must be >= 0, got {value}")

        # Frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, 'keyword', keyword)
        object.__setattr__(self, 'country', country)


@dataclass(frozen=True)
class AdRecord:
    """One advertisement extracted from the ad library page."""
    ad_id: str
    advertiser_name: str = DEFAULT_ADVERTISER_NAME
    advertiser_page_id: Optional[str] = None
    landing_page_url: Optional[str] = None
    preview_url: str = ''
    preview_image: Optional[str] = None
    ad_start_date: Optional[str] = None
    ad_copy: Optional[str] = None
    cta_text: str = ''

    def __post_init__(self):
        if not self.preview_url:
            object.__setattr__(self, 'preview_url', PREVIEW_URL_TEMPLATE.format(ad_id=self.ad_id))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScrapeResult:
    """Result of a scraping operation."""
    ads: List[AdRecord] = field(default_factory=list)
    rate_limited: bool = False
    scrolls: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def ads_found(self) -> int:
        return len(self.ads)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at and self.started_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> Dict:
        return {
            'ads': [ad.to_dict() for ad in self.ads],
            'rateLimited': self.rate_limited,
            'adsFound': self.ads_found,
            'scrolls': self.scrolls,
            'durationSeconds': self.duration_seconds,
        }


@dataclass
class ScrapeSession:
    """
    Per-request scrape state owned by the orchestrator.

    Holds the live browser handle, the seen ad IDs and the ordered
    accumulator. Never shared between requests.
    """
    request: ScrapeRequest
    browser: Optional[Any] = None
    state: ScrapeState = ScrapeState.LAUNCHING
    seen_ids: Set[str] = field(default_factory=set)
    ads: List[AdRecord] = field(default_factory=list)
    scrolls: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_full(self) -> bool:
        return len(self.ads) >= self.request.max_ads

    @property
    def scrolls_exhausted(self) -> bool:
        return self.scrolls >= self.request.scroll_count

    def add(self, records: Iterable[AdRecord]) -> int:
        """
        Merge records keyed by ad_id. First sighting wins.

        Returns:
            Number of records newly added
        """
        added = 0
        for record in records:
            if self.is_full:
                break
            if record.ad_id in self.seen_ids:
                continue
            self.seen_ids.add(record.ad_id)
            self.ads.append(record)
            added += 1
        return added

    def to_result(self) -> ScrapeResult:
        return ScrapeResult(
            ads=self.ads[:self.request.max_ads],
            rate_limited=self.state is ScrapeState.BLOCKED,
            scrolls=self.scrolls,
            started_at=self.started_at,
            completed_at=datetime.now(timezone.utc),
        )
