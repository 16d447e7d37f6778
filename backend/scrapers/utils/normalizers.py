"""
Data normalization utilities for scrapers.

These functions standardize scraped text and URLs into consistent formats.
"""

import re
from typing import Optional, Iterable
from urllib.parse import urlparse, parse_qs

from ..config import INTERNAL_DOMAINS, REDIRECT_PARAM


def normalize_text(text: str) -> str:
    """
    Collapse runs of whitespace and strip.

    Examples:
        "  Acme\n   Co " -> "Acme Co"
        "\xa0Shop\xa0Now" -> "Shop Now"
    """
    if not text:
        return ''
    return re.sub(r'\s+', ' ', text.replace('\xa0', ' ')).strip()


def truncate_text(text: str, limit: int) -> str:
    """Cut text to at most `limit` characters."""
    if not text or len(text) <= limit:
        return text
    return text[:limit]


def get_host(url: str) -> Optional[str]:
    """
    Lower-cased host of an absolute URL, or None.

    Examples:
        "https://WWW.Example.com:8080/path" -> "www.example.com"
        "/relative/path" -> None
    """
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    return host.lower() if host else None


def is_internal_host(host: str, domains: Iterable[str] = INTERNAL_DOMAINS) -> bool:
    """True when host is one of the domains or a subdomain of one."""
    if not host:
        return False
    return any(host == d or host.endswith('.' + d) for d in domains)


def is_external_url(url: str, domains: Iterable[str] = INTERNAL_DOMAINS) -> bool:
    """
    True for absolute http(s) URLs that leave the ad library.

    Examples:
        "https://acme.example/shop" -> True
        "https://www.facebook.com/acme" -> False
        "https://l.facebook.com/l.php?u=..." -> False
    """
    if not url or not url.lower().startswith(('http://', 'https://')):
        return False
    host = get_host(url)
    return bool(host) and not is_internal_host(host, domains)


def decode_redirect_url(href: str, param: str = REDIRECT_PARAM) -> Optional[str]:
    """
    Extract the destination from a redirect wrapper link.

    Examples:
        "https://l.facebook.com/l.php?u=https%3A%2F%2Facme.example%2F&h=AT0"
            -> "https://acme.example/"
        "https://l.facebook.com/l.php?h=AT0" -> None

    Returns:
        Decoded absolute URL, or None if the parameter is missing or not a URL
    """
    if not href:
        return None
    try:
        values = parse_qs(urlparse(href).query).get(param)
    except ValueError:
        return None
    if not values:
        return None
    destination = values[0].strip()
    if not destination.lower().startswith(('http://', 'https://')):
        return None
    return destination
