"""
Facebook Ad Library scraper.

Drives one stealth browser session through a keyword search:

    LAUNCHING -> NAVIGATING -> CHECKING_RATE_LIMIT -> EXTRACTING <-> SCROLLING
              -> DONE | BLOCKED | FAILED

The page is an infinite list, so after the first render the scraper
alternates between extracting visible ad cards and scrolling to load
more, checking for block pages after every scroll. A detected block is
reported as `rate_limited=True` with whatever was collected so far.
"""

import asyncio
import random
import logging
from typing import Callable, Optional

from ..base import (
    Colors,
    ScrapeRequest,
    ScrapeResult,
    ScrapeSession,
    ScrapeState,
    BrowserSessionError,
)
from ..config import AdLibraryConfig, AD_LIBRARY
from ..crawlers.stealth import StealthSession
from ..utils.detection import find_block_signature
from ..utils.extractors import extract_ads
from ..utils.humanize import UserAgentPool, ScrollDriver, SleepFunc, random_delay
from ..utils.urls import build_search_url


class AdLibraryScraper:
    """
    Scrapes ads for one keyword search per call to `scrape()`.

    Every collaborator with side effects or randomness is injectable:
    - session_factory: user_agent -> async context manager browser session
    - user_agents: UserAgentPool picking the session identity
    - scroll_driver: ScrollDriver performing scroll steps
    - rng / sleep: randomness and waiting for settle delays

    A scraper instance holds no per-request state, so it can serve
    concurrent requests; each call gets its own ScrapeSession.
    """

    def __init__(
        self,
        config: AdLibraryConfig = AD_LIBRARY,
        session_factory: Optional[Callable[[str], StealthSession]] = None,
        user_agents: Optional[UserAgentPool] = None,
        scroll_driver: Optional[ScrollDriver] = None,
        rng: Optional[random.Random] = None,
        sleep: SleepFunc = asyncio.sleep,
    ):
        self.config = config
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.user_agents = user_agents or UserAgentPool(rng=self.rng)
        self.scroll_driver = scroll_driver or ScrollDriver(
            rng=self.rng,
            sleep=sleep,
            distance=config.scroll_distance,
            pause=config.scroll_pause,
        )
        self.session_factory = session_factory or self._default_session
        self.logger = logging.getLogger("scraper.ad_library")

    def _default_session(self, user_agent: str) -> StealthSession:
        return StealthSession(user_agent, self.config)

    def _transition(self, session: ScrapeSession, state: ScrapeState):
        self.logger.debug(f"{session.state.value} -> {state.value}")
        session.state = state

    async def scrape(self, request: ScrapeRequest) -> ScrapeResult:
        """
        Run a full scrape for a validated request.

        Args:
            request: Validated ScrapeRequest

        Returns:
            ScrapeResult with at most `request.max_ads` unique ads

        Raises:
            BrowserSessionError: If the browser could not be launched or driven.
                The session is already closed when this is raised.
        """
        session = ScrapeSession(request=request)
        url = build_search_url(request.keyword, request.country, self.config.base_url)
        user_agent = self.user_agents.pick()

        self.logger.info(
            f"Starting scrape for {Colors.bold(request.keyword)} "
            f"(country={request.country}, max_ads={request.max_ads}, scrolls={request.scroll_count})"
        )
        self.logger.debug(f"User agent: {Colors.gray(user_agent)}")

        try:
            async with self.session_factory(user_agent) as browser:
                session.browser = browser
                await self._run(session, url)

        except asyncio.CancelledError:
            self._transition(session, ScrapeState.FAILED)
            self.logger.warning(f"Scrape for {request.keyword!r} cancelled")
            raise

        except BrowserSessionError as e:
            self._transition(session, ScrapeState.FAILED)
            self.logger.error(f"   {Colors.red('[ERR]')} Scrape failed: {e}")
            raise

        except Exception as e:
            self._transition(session, ScrapeState.FAILED)
            self.logger.error(f"   {Colors.red('[ERR]')} Scrape failed: {e}")
            raise BrowserSessionError(f"Scrape failed: {e}") from e

        finally:
            session.browser = None

        result = session.to_result()
        duration = result.duration_seconds or 0
        if result.rate_limited:
            self.logger.warning(
                f"{Colors.yellow('[BLOCKED]')} Stopped after {result.scrolls} scroll(s) "
                f"with {result.ads_found} ads in {duration:.1f}s"
            )
        else:
            self.logger.info(
                f"{Colors.green('[DONE]')} Found {result.ads_found} ads "
                f"in {result.scrolls} scroll(s), {duration:.1f}s"
            )
        return result

    async def _run(self, session: ScrapeSession, url: str):
        """Drive the state machine until DONE or BLOCKED."""
        browser = session.browser

        self._transition(session, ScrapeState.NAVIGATING)
        self.logger.info(f"Navigating to: {url}")
        await browser.goto(url)
        await random_delay(self.config.settle_delay, self.rng, self.sleep)

        snapshot = await self._check_rate_limit(session)
        if snapshot is None:
            return

        while True:
            self._transition(session, ScrapeState.EXTRACTING)
            added = session.add(extract_ads(snapshot))
            self.logger.info(
                f"{Colors.cyan('❯')} Pass {session.scrolls + 1}: "
                f"{added} new, {len(session.ads)} unique ads total"
            )

            if session.is_full:
                self.logger.info("Reached max_ads limit")
                self._transition(session, ScrapeState.DONE)
                return

            if session.scrolls_exhausted:
                self._transition(session, ScrapeState.DONE)
                return

            self._transition(session, ScrapeState.SCROLLING)
            await self.scroll_driver.step(browser)
            session.scrolls += 1
            self.logger.debug(f"Scroll {session.scrolls}/{session.request.scroll_count}")

            snapshot = await self._check_rate_limit(session)
            if snapshot is None:
                return

    async def _check_rate_limit(self, session: ScrapeSession) -> Optional[str]:
        """
        Read the page and check it for block signatures.

        Returns:
            The page content, or None if the page is blocked (state -> BLOCKED)
        """
        self._transition(session, ScrapeState.CHECKING_RATE_LIMIT)
        content = await session.browser.content()
        signature = find_block_signature(content)
        if signature:
            self.logger.warning(f"Rate limit detected ({signature!r}) after {session.scrolls} scroll(s)")
            self._transition(session, ScrapeState.BLOCKED)
            return None
        return content
