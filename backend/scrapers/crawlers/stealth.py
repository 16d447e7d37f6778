"""
Stealth browser session for the ad library.

Uses Playwright with stealth settings: a rotated user agent, a realistic
viewport/locale/timezone, humanizing headers and an init script hiding
automation indicators. One session serves exactly one scrape request.
"""

import asyncio
import logging
from typing import Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Error as PlaywrightError,
    TimeoutError as PlaywrightTimeoutError,
)

from ..base import BrowserSessionError
from ..config import AdLibraryConfig, AD_LIBRARY

logger = logging.getLogger(__name__)

STEALTH_INIT_SCRIPT = """
    Object.defineProperty(navigator, 'webdriver', {
        get: () => undefined
    });

    // Override plugins
    Object.defineProperty(navigator, 'plugins', {
        get: () => [1, 2, 3, 4, 5]
    });

    // Override languages
    Object.defineProperty(navigator, 'languages', {
        get: () => ['en-US', 'en']
    });
"""


class StealthSession:
    """
    A single isolated Playwright browser session.

    Usage:
        async with StealthSession(user_agent) as session:
            await session.goto(url)
            html = await session.content()
            await session.scroll(1000)

    The browser is torn down once when the context exits, whether the
    block finished, raised or was cancelled.
    """

    def __init__(self, user_agent: str, config: AdLibraryConfig = AD_LIBRARY):
        """
        Initialize the session.

        Args:
            user_agent: Browser identity for this session
            config: Browser and timing configuration
        """
        self.user_agent = user_agent
        self.config = config
        self._playwright = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._closed = False

    async def _init_browser(self):
        """Launch Chromium and open a page with stealth settings."""
        try:
            self._playwright = await async_playwright().start()

            logger.debug("Launching Chromium browser...")
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                args=self.config.launch_args,
                handle_sigint=False,
                handle_sigterm=False,
                handle_sighup=False,
            )

            self._context = await self._browser.new_context(
                viewport=self.config.viewport,
                user_agent=self.user_agent,
                locale=self.config.locale,
                timezone_id=self.config.timezone_id,
                extra_http_headers=self.config.extra_http_headers,
            )
            await self._context.add_init_script(STEALTH_INIT_SCRIPT)

            self._page = await self._context.new_page()
            logger.debug("Browser initialization successful")

        except Exception as e:
            logger.error(f"Failed to initialize browser: {e}")
            await self._cleanup()
            raise BrowserSessionError(f"Failed to launch browser: {e}") from e

    async def _cleanup(self):
        """Clean up browser resources with timeouts to prevent hanging."""
        cleanup_timeout = 2.0  # 2 second timeout per cleanup operation

        if self._page:
            try:
                await asyncio.wait_for(self._page.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Page close timed out, forcing cleanup")
            except Exception as e:
                logger.debug(f"Error closing page: {e}")
            self._page = None

        if self._context:
            try:
                await asyncio.wait_for(self._context.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Context close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing context: {e}")
            self._context = None

        if self._browser:
            try:
                await asyncio.wait_for(self._browser.close(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Browser close timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")
            self._browser = None

        if self._playwright:
            try:
                await asyncio.wait_for(self._playwright.stop(), timeout=cleanup_timeout)
            except asyncio.TimeoutError:
                logger.warning("Playwright stop timed out, forcing cleanup")
            except Exception as e:
                logger.warning(f"Error stopping playwright: {e}")
            self._playwright = None

    def _require_page(self) -> Page:
        if self._page is None:
            raise BrowserSessionError("Browser session is not open")
        return self._page

    async def goto(self, url: str) -> Optional[int]:
        """
        Navigate and wait for the network to settle.

        Args:
            url: URL to load

        Returns:
            HTTP status of the main response, if any

        Raises:
            BrowserSessionError: On timeout or navigation failure
        """
        page = self._require_page()
        timeout = self.config.navigation_timeout
        try:
            response = await page.goto(url, wait_until='networkidle', timeout=int(timeout * 1000))
        except PlaywrightTimeoutError as e:
            raise BrowserSessionError(f"Navigation timed out after {timeout:.0f}s: {url}") from e
        except PlaywrightError as e:
            raise BrowserSessionError(f"Navigation failed for {url}: {e}") from e

        status = response.status if response else None
        if status and status >= 400:
            # Block pages often come back with an error status; the content check decides
            logger.warning(f"HTTP {status} for {url}")
        return status

    async def content(self) -> str:
        """Full rendered HTML of the current page."""
        page = self._require_page()
        try:
            return await page.content()
        except PlaywrightError as e:
            raise BrowserSessionError(f"Could not read page content: {e}") from e

    async def scroll(self, delta_y: int):
        """Issue a mouse wheel scroll gesture."""
        page = self._require_page()
        try:
            await page.mouse.wheel(0, delta_y)
        except PlaywrightError as e:
            raise BrowserSessionError(f"Scroll failed: {e}") from e

    async def close(self):
        """Close the browser and cleanup resources. Safe to call twice."""
        if self._closed:
            return
        self._closed = True
        await self._cleanup()
        logger.debug("Browser closed")

    async def __aenter__(self):
        """Async context manager entry."""
        await self._init_browser()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
