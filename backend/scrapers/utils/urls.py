"""URL construction for the ad library."""

from urllib.parse import urlencode

from ..base import PREVIEW_URL_TEMPLATE
from ..config import AD_LIBRARY_URL


def build_search_url(keyword: str, country: str, base_url: str = AD_LIBRARY_URL) -> str:
    """
    Build the ad library keyword search URL.

    Examples:
        build_search_url("running shoes", "US")
            -> "https://www.facebook.com/ads/library/?active_status=active&ad_type=all
                &country=US&q=running+shoes&media_type=all"
    """
    params = {
        'active_status': 'active',
        'ad_type': 'all',
        'country': country,
        'q': keyword,
        'media_type': 'all',
    }
    return f"{base_url}?{urlencode(params)}"


def build_preview_url(ad_id: str) -> str:
    """Canonical link back to a single ad."""
    return PREVIEW_URL_TEMPLATE.format(ad_id=ad_id)
