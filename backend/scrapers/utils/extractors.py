"""
Ad card extraction for the ad library.

These functions parse a rendered page snapshot into AdRecord objects.
Every field is resolved from an ordered list of candidates scoped to
the ad's card; the first candidate yielding a valid value wins.
"""

import re
import logging
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Set, TypeVar, Union

from bs4 import BeautifulSoup, Tag

from ..base import AdRecord, DEFAULT_ADVERTISER_NAME
from ..config import (
    AD_LINK_SELECTOR,
    AD_ID_PATTERN,
    CARD_SELECTORS,
    ADVERTISER_SELECTORS,
    ADVERTISER_PAGE_PATTERNS,
    MEDIA_SELECTORS,
    AD_COPY_SELECTORS,
    AD_COPY_MIN_LENGTH,
    AD_COPY_MAX_SOURCE_LENGTH,
    AD_COPY_MAX_LENGTH,
    AD_COPY_BOILERPLATE,
    START_DATE_PATTERNS,
    REDIRECT_LINK_SELECTOR,
    EXTERNAL_LINK_SELECTOR,
    CTA_LABELS,
)
from .normalizers import normalize_text, truncate_text, decode_redirect_url, is_external_url
from .urls import build_preview_url

logger = logging.getLogger(__name__)

T = TypeVar('T')

AD_ID_RE = re.compile(AD_ID_PATTERN)


def first_match(
    candidates: Iterable[T],
    resolve: Callable[[T], Optional[str]],
    accept: Callable[[str], bool] = bool,
) -> Optional[str]:
    """
    Return the first resolved value that passes `accept`.

    Candidates are resolved lazily, so later ones are never touched
    once a value is accepted.

    Args:
        candidates: Ordered candidates (elements, patterns, ...)
        resolve: Turns a candidate into a value (or None)
        accept: Validation for a resolved, non-empty value

    Returns:
        First accepted value, or None
    """
    for candidate in candidates:
        value = resolve(candidate)
        if value and accept(value):
            return value
    return None


def select_cascade(card: Tag, selectors: Sequence[str]) -> Iterator[Tag]:
    """Yield elements matching each selector in priority order."""
    for selector in selectors:
        yield from card.select(selector)


def element_text(element: Tag) -> str:
    return normalize_text(element.get_text(' '))


def extract_ad_id(href: str) -> Optional[str]:
    """
    Extract the ad ID from an ad detail link.

    Examples:
        "/ads/library/?id=123456789" -> "123456789"
        "/ads/library/?active_status=all&view_all_page_id=42" -> None
    """
    if not href:
        return None
    match = AD_ID_RE.search(href)
    return match.group(1) if match else None


def linked_ad_ids(element: Tag) -> Set[str]:
    """Distinct ad IDs linked from inside an element."""
    return {
        ad_id
        for ad_id in (extract_ad_id(a.get('href', '')) for a in element.select(AD_LINK_SELECTOR))
        if ad_id
    }


def find_card(
    anchor: Tag,
    selectors: Sequence[str] = CARD_SELECTORS,
    ad_id: Optional[str] = None,
) -> Optional[Tag]:
    """
    Find the card container enclosing an ad link.

    For each selector in order, walk up from the anchor and return the
    nearest ancestor matching it. The first selector with a match wins.

    An ancestor that also links to a different ad is a list wrapper, not
    a card, and is never returned.
    """
    ad_id = ad_id or extract_ad_id(anchor.get('href', ''))
    for selector in selectors:
        for parent in anchor.parents:
            if isinstance(parent, BeautifulSoup):
                break
            if not parent.css.match(selector):
                continue
            if linked_ad_ids(parent) - {ad_id}:
                # Wrappers only get wider further up
                break
            return parent
    return None


def extract_advertiser_name(card: Tag) -> str:
    name = first_match(
        select_cascade(card, ADVERTISER_SELECTORS),
        element_text,
        accept=lambda text: len(text) > 1,
    )
    return name or DEFAULT_ADVERTISER_NAME


def extract_advertiser_page_id(card: Tag) -> Optional[str]:
    """Page ID of the advertiser, from 'view all' or page links."""
    hrefs = [a.get('href', '') for a in card.find_all('a', href=True)]

    def search(pattern: str) -> Optional[str]:
        return first_match(hrefs, lambda href: _group(re.search(pattern, href)))

    return first_match(ADVERTISER_PAGE_PATTERNS, search)


def extract_landing_page_url(card: Tag) -> Optional[str]:
    """
    Resolve the advertiser's destination URL.

    Prefers the decoded target of a redirect wrapper link, then falls
    back to any outbound link that leaves the ad library.
    """
    redirect = first_match(
        card.select(REDIRECT_LINK_SELECTOR),
        lambda a: decode_redirect_url(a.get('href', '')),
    )
    if redirect:
        return redirect

    return first_match(
        card.select(EXTERNAL_LINK_SELECTOR),
        lambda a: a.get('href', '').strip(),
        accept=is_external_url,
    )


def extract_preview_image(card: Tag) -> Optional[str]:
    return first_match(
        select_cascade(card, MEDIA_SELECTORS),
        lambda el: (el.get('src') or el.get('poster') or '').strip(),
    )


def extract_start_date(text: str) -> Optional[str]:
    """
    Extract the ad's start date from card text.

    Handles:
        Started running on Jan 5, 2024
        Started running on 5 Jan 2024
        Running since Jan 5, 2024
    """
    return first_match(START_DATE_PATTERNS, lambda pattern: _group(re.search(pattern, text)))


def is_ad_copy(text: str) -> bool:
    if not AD_COPY_MIN_LENGTH < len(text) <= AD_COPY_MAX_SOURCE_LENGTH:
        return False
    return not any(phrase in text for phrase in AD_COPY_BOILERPLATE)


def extract_ad_copy(card: Tag) -> Optional[str]:
    copy = first_match(select_cascade(card, AD_COPY_SELECTORS), element_text, accept=is_ad_copy)
    return truncate_text(copy, AD_COPY_MAX_LENGTH) if copy else None


def extract_cta(text: str, labels: Sequence[str] = CTA_LABELS) -> str:
    """First known call-to-action label in the text, or ''."""
    return first_match(labels, lambda label: label if label in text else None) or ''


def extract_ad(ad_id: str, card: Tag) -> AdRecord:
    """Build an AdRecord from one card. May raise on malformed markup."""
    card_text = element_text(card)
    return AdRecord(
        ad_id=ad_id,
        advertiser_name=extract_advertiser_name(card),
        advertiser_page_id=extract_advertiser_page_id(card),
        landing_page_url=extract_landing_page_url(card),
        preview_url=build_preview_url(ad_id),
        preview_image=extract_preview_image(card),
        ad_start_date=extract_start_date(card_text),
        ad_copy=extract_ad_copy(card),
        cta_text=extract_cta(card_text),
    )


def extract_ads(page: Union[str, BeautifulSoup], card_selectors: Sequence[str] = CARD_SELECTORS) -> List[AdRecord]:
    """
    Extract all ads from a rendered page snapshot.

    A card that fails to parse is skipped; this function never raises.

    Args:
        page: Page HTML or an already parsed BeautifulSoup
        card_selectors: Card container cascade

    Returns:
        One AdRecord per distinct ad ID, in document order
    """
    try:
        soup = page if isinstance(page, BeautifulSoup) else BeautifulSoup(page or '', 'html.parser')
        anchors = soup.select(AD_LINK_SELECTOR)
    except Exception as e:
        logger.warning(f"Could not parse page snapshot: {e}")
        return []

    ads: List[AdRecord] = []
    extracted = set()
    skipped = set()

    for anchor in anchors:
        ad_id = extract_ad_id(anchor.get('href', ''))
        if not ad_id or ad_id in extracted:
            continue
        try:
            card = find_card(anchor, card_selectors, ad_id)
            if card is None:
                skipped.add(ad_id)
                continue
            ads.append(extract_ad(ad_id, card))
            extracted.add(ad_id)
        except Exception as e:
            skipped.add(ad_id)
            logger.debug(f"Skipping ad {ad_id}: {e}")

    skipped -= extracted
    if skipped:
        logger.debug(f"Extracted {len(ads)} ads, skipped {len(skipped)} without a usable card")
    return ads


def _group(match: Optional[re.Match]) -> Optional[str]:
    return match.group(1) if match else None
