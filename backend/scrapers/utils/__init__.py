"""Shared utilities for scrapers."""

from .normalizers import (
    normalize_text,
    truncate_text,
    decode_redirect_url,
    is_external_url,
)
from .urls import build_search_url, build_preview_url
from .detection import detect_rate_limit, find_block_signature
from .humanize import UserAgentPool, ScrollDriver, random_delay
from .extractors import (
    first_match,
    find_card,
    extract_ad,
    extract_ads,
)

__all__ = [
    'normalize_text',
    'truncate_text',
    'decode_redirect_url',
    'is_external_url',
    'build_search_url',
    'build_preview_url',
    'detect_rate_limit',
    'find_block_signature',
    'UserAgentPool',
    'ScrollDriver',
    'random_delay',
    'first_match',
    'find_card',
    'extract_ad',
    'extract_ads',
]
