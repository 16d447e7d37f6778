"""
Block and challenge detection.

A plain substring scan over the rendered page. It can miss a block page,
but a false positive only ends the scrape early.
"""

from typing import Iterable, Optional

from ..config import RATE_LIMIT_INDICATORS


def find_block_signature(content: str, indicators: Iterable[str] = RATE_LIMIT_INDICATORS) -> Optional[str]:
    """
    Return the first block/challenge phrase found in the content.

    Args:
        content: Rendered page content (HTML or text)
        indicators: Lower-case phrases to look for

    Returns:
        The matching phrase, or None
    """
    if not content:
        return None
    content_lower = content.lower()
    for indicator in indicators:
        if indicator in content_lower:
            return indicator
    return None


def detect_rate_limit(content: str, indicators: Iterable[str] = RATE_LIMIT_INDICATORS) -> bool:
    """True if the page looks rate limited or challenged."""
    return find_block_signature(content, indicators) is not None
