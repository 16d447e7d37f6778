"""
Human-like browsing behaviour: identity rotation, pauses and scrolling.

Randomness comes from an injectable `random.Random` and waits from an
injectable `sleep` coroutine, so tests can run deterministically.
"""

import asyncio
import random
import logging
from typing import Awaitable, Callable, Optional, Sequence, Tuple

from ..config import USER_AGENTS, AD_LIBRARY

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class UserAgentPool:
    """Picks a browser identity for each new session."""

    def __init__(self, agents: Sequence[str] = USER_AGENTS, rng: Optional[random.Random] = None):
        if not agents:
            raise ValueError("UserAgentPool needs at least one user agent")
        self.agents = tuple(agents)
        self.rng = rng or random.Random()

    def pick(self) -> str:
        return self.rng.choice(self.agents)


async def random_delay(
    bounds: Tuple[float, float],
    rng: Optional[random.Random] = None,
    sleep: SleepFunc = asyncio.sleep,
) -> float:
    """
    Sleep for a random duration within bounds.

    Returns:
        Seconds slept
    """
    rng = rng or random
    delay = rng.uniform(*bounds)
    await sleep(delay)
    return delay


class ScrollDriver:
    """
    Scrolls the page to trigger lazy loading of more ad cards.

    Each step is one wheel scroll of random distance followed by a
    random pause so new cards can render.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        sleep: SleepFunc = asyncio.sleep,
        distance: Tuple[int, int] = AD_LIBRARY.scroll_distance,
        pause: Tuple[float, float] = AD_LIBRARY.scroll_pause,
    ):
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.distance = distance
        self.pause = pause

    async def step(self, session) -> int:
        """
        Perform one scroll step on a browser session.

        Args:
            session: Object with an async `scroll(delta_y)` method

        Returns:
            Distance scrolled in pixels
        """
        delta = self.rng.randint(*self.distance)
        await session.scroll(delta)
        waited = await random_delay(self.pause, self.rng, self.sleep)
        logger.debug(f"Scrolled {delta}px, paused {waited:.2f}s")
        return delta
