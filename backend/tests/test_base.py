"""
Tests for request validation and the scrape session accumulator.
"""

import dataclasses

import pytest

from scrapers.base import (
    AdRecord,
    Colors,
    ScrapeRequest,
    ScrapeRequestError,
    ScrapeResult,
    ScrapeSession,
    ScrapeState,
)


class TestScrapeRequest:
    """Test ScrapeRequest validation."""

    def test_defaults(self):
        request = ScrapeRequest(keyword="shoes")

        assert request.country == "US"
        assert request.max_ads == 50
        assert request.scroll_count == 5

    def test_normalizes_values(self):
        request = ScrapeRequest(keyword="  running shoes ", country=" gb ")

        assert request.keyword == "running shoes"
        assert request.country == "GB"

    @pytest.mark.parametrize("keyword", ["", "   ", "\t\n", None])
    def test_empty_keyword_rejected(self, keyword):
        with pytest.raises(ScrapeRequestError, match="keyword"):
            ScrapeRequest(keyword=keyword)

    @pytest.mark.parametrize("field,value", [
        ("max_ads", -1),
        ("scroll_count", -5),
        ("max_ads", "10"),
        ("scroll_count", True),
    ])
    def test_invalid_counts_rejected(self, field, value):
        with pytest.raises(ScrapeRequestError):
            ScrapeRequest(keyword="shoes", **{field: value})

    def test_zero_counts_allowed(self):
        request = ScrapeRequest(keyword="shoes", max_ads=0, scroll_count=0)
        assert request.max_ads == 0

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            ScrapeRequest(keyword="")

    def test_immutable(self):
        request = ScrapeRequest(keyword="shoes")
        with pytest.raises(dataclasses.FrozenInstanceError):
            request.keyword = "boots"


class TestAdRecord:
    """Test the AdRecord model."""

    def test_preview_url_synthesized(self):
        record = AdRecord(ad_id="123")

        assert record.preview_url == "https://www.facebook.com/ads/library/?id=123"
        assert record.advertiser_name == "Unknown"
        assert record.cta_text == ""

    def test_to_dict_keys(self):
        data = AdRecord(ad_id="123", advertiser_name="Acme Co").to_dict()

        assert data["ad_id"] == "123"
        assert data["advertiser_name"] == "Acme Co"
        assert set(data) == {
            "ad_id", "advertiser_name", "advertiser_page_id", "landing_page_url", "preview_url",
            "preview_image", "ad_start_date", "ad_copy", "cta_text",
        }


class TestScrapeSession:
    """Test deduplication and capping in the session accumulator."""

    def test_first_sighting_wins(self):
        session = ScrapeSession(request=ScrapeRequest(keyword="shoes"))

        session.add([AdRecord(ad_id="1", advertiser_name="First")])
        added = session.add([AdRecord(ad_id="1", advertiser_name="Later"), AdRecord(ad_id="2")])

        assert added == 1
        assert [a.ad_id for a in session.ads] == ["1", "2"]
        assert session.ads[0].advertiser_name == "First"

    def test_never_exceeds_max_ads(self):
        session = ScrapeSession(request=ScrapeRequest(keyword="shoes", max_ads=3))

        session.add([AdRecord(ad_id=str(i)) for i in range(10)])

        assert len(session.ads) == 3
        assert session.is_full

    def test_zero_max_ads(self):
        session = ScrapeSession(request=ScrapeRequest(keyword="shoes", max_ads=0))

        assert session.add([AdRecord(ad_id="1")]) == 0
        assert session.to_result().ads == []

    def test_result_flags_blocked_state(self):
        session = ScrapeSession(request=ScrapeRequest(keyword="shoes"))
        session.state = ScrapeState.BLOCKED

        result = session.to_result()

        assert result.rate_limited is True
        assert result.duration_seconds is not None

    def test_result_to_dict(self):
        result = ScrapeResult(ads=[AdRecord(ad_id="1")], rate_limited=False, scrolls=2)

        data = result.to_dict()

        assert data["rateLimited"] is False
        assert data["adsFound"] == 1
        assert data["scrolls"] == 2
        assert data["ads"][0]["ad_id"] == "1"


class TestColors:
    """Test ANSI log highlighting."""

    @pytest.mark.parametrize("name", ["green", "yellow", "red", "cyan", "gray", "bold"])
    def test_wraps_and_resets(self, name):
        text = getattr(Colors, name)("hello")

        assert text.startswith(getattr(Colors, name.upper()))
        assert text.endswith(Colors.RESET)
        assert "hello" in text
