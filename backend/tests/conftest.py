"""
Pytest configuration and fixtures for ad library scraper tests.
"""

import random

import pytest

from fastapi.testclient import TestClient

from api.config import get_settings, Settings
from api.main import app, get_scraper_manager
from scrapers.base import BrowserSessionError


TEST_API_KEY = "test-key"


# ============================================================
# HTML FIXTURES
# ============================================================

def make_card(
    ad_id: str,
    advertiser: str = "Acme Co",
    landing: str = None,
    redirect_to: str = None,
    ad_copy: str = None,
    start_date: str = "Jan 5, 2024",
    cta: str = None,
    image: str = None,
    page_id: str = None,
    card_class: str = "xh8yej3",
) -> str:
    """Build the markup of one ad card in the ad library's shape."""
    parts = [f'<div class="{card_class} x1n2onr6">']
    if page_id:
        parts.append(
            f'<a href="/ads/library/?active_status=all&amp;ad_type=all&amp;country=US'
            f'&amp;view_all_page_id={page_id}"><span class="x8t9es0">{advertiser}</span></a>'
        )
    parts.append(f'<span class="x1lliihq x6ikm8r">{advertiser}</span>')
    parts.append(f'<span>Library ID: {ad_id}</span>')
    if start_date:
        parts.append(f'<span>Started running on {start_date}</span>')
    parts.append(f'<a href="https://www.facebook.com/ads/library/?id={ad_id}">See ad details</a>')
    if ad_copy:
        parts.append(f'<div class="x1iorvi4 x1pi30zi">{ad_copy}</div>')
    if image:
        parts.append(f'<img src="{image}" alt="">')
    if redirect_to:
        parts.append(
            f'<a href="https://l.facebook.com/l.php?u={redirect_to}&amp;h=AT0abc">'
            f'<div>{cta or "Learn more"}</div></a>'
        )
    if landing:
        parts.append(f'<a href="{landing}">Visit site</a>')
    if cta and not redirect_to:
        parts.append(f'<div role="button">{cta}</div>')
    parts.append('</div>')
    return ''.join(parts)


def make_page(cards, extra: str = "") -> str:
    """Wrap cards in a minimal ad library page."""
    return (
        '<html><head><title>Ad Library</title></head><body>'
        '<div class="x1dr59a3 results">'
        + ''.join(cards)
        + '</div>'
        + extra
        + '</body></html>'
    )


@pytest.fixture
def card_html():
    return make_card


@pytest.fixture
def page_html():
    return make_page


# ============================================================
# FAKE BROWSER
# ============================================================

class FakeBrowserSession:
    """
    Stands in for StealthSession.

    `pages[i]` is the content shown after i scrolls; the last page
    repeats once the list runs out.
    """

    def __init__(self, pages, fail_on=None, fail_with=BrowserSessionError):
        self.pages = list(pages) or [make_page([])]
        self.fail_on = fail_on
        self.fail_with = fail_with
        self.visited = []
        self.scroll_deltas = []
        self.close_calls = 0

    @property
    def scrolls(self) -> int:
        return len(self.scroll_deltas)

    def _maybe_fail(self, operation):
        if self.fail_on == operation:
            raise self.fail_with(f"{operation} failed")

    async def goto(self, url):
        self._maybe_fail('goto')
        self.visited.append(url)
        return 200

    async def content(self):
        self._maybe_fail('content')
        return self.pages[min(self.scrolls, len(self.pages) - 1)]

    async def scroll(self, delta_y):
        self._maybe_fail('scroll')
        self.scroll_deltas.append(delta_y)

    async def close(self):
        self.close_calls += 1

    async def __aenter__(self):
        self._maybe_fail('launch')
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class FakeSessionFactory:
    """Records every launch and hands out FakeBrowserSession objects."""

    def __init__(self, pages=None, fail_on=None, fail_with=BrowserSessionError):
        self.pages = pages or []
        self.fail_on = fail_on
        self.fail_with = fail_with
        self.user_agents = []
        self.sessions = []

    @property
    def launches(self) -> int:
        return len(self.sessions)

    @property
    def session(self) -> FakeBrowserSession:
        return self.sessions[-1]

    def __call__(self, user_agent):
        self.user_agents.append(user_agent)
        session = FakeBrowserSession(self.pages, fail_on=self.fail_on, fail_with=self.fail_with)
        self.sessions.append(session)
        return session


async def no_sleep(seconds):
    return None


@pytest.fixture
def session_factory():
    return FakeSessionFactory


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def make_scraper(rng):
    """Build an AdLibraryScraper wired to a fake browser, with no waiting."""
    from scrapers.sites.ad_library import AdLibraryScraper

    def _make(factory):
        return AdLibraryScraper(session_factory=factory, rng=rng, sleep=no_sleep)

    return _make


# ============================================================
# API
# ============================================================

class StubManager:
    """Scraper manager replacement for API tests."""

    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.requests = []
        self.active = 0

    async def scrape(self, request):
        self.requests.append(request)
        if self.error:
            raise self.error
        return self.result


@pytest.fixture
def stub_manager():
    from scrapers.base import ScrapeResult
    return StubManager(result=ScrapeResult())


@pytest.fixture(scope="function")
def client(stub_manager):
    """Create a test client with settings and manager overrides."""
    app.dependency_overrides[get_settings] = lambda: Settings(playwright_api_key=TEST_API_KEY)
    app.dependency_overrides[get_scraper_manager] = lambda: stub_manager

    # Use TestClient directly without context manager for compatibility
    test_client = TestClient(app)
    yield test_client

    app.dependency_overrides.clear()
