"""
Tests for API endpoints.
"""

import pytest
from fastapi import status

from scrapers.base import AdRecord, ScrapeResult, BrowserSessionError
from conftest import TEST_API_KEY, StubManager


AUTH = {"x-api-key": TEST_API_KEY}


class TestHealthEndpoint:
    """Test the health endpoint."""

    def test_health_without_auth(self, client):
        """Health needs no API key."""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "ok"
        assert data["browser"] == "chromium"
        assert "timestamp" in data
        assert data["activeScrapes"] == 0


class TestScrapeAuth:
    """Test API key checks on /scrape."""

    def test_missing_key(self, client, stub_manager):
        response = client.post("/scrape", json={"keyword": "shoes"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Unauthorized"
        assert stub_manager.requests == []

    def test_wrong_key(self, client, stub_manager):
        response = client.post("/scrape", json={"keyword": "shoes"}, headers={"x-api-key": "nope"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert stub_manager.requests == []

    def test_unconfigured_key_rejects_everything(self, client, stub_manager):
        from api.config import get_settings, Settings
        from api.main import app

        app.dependency_overrides[get_settings] = lambda: Settings(playwright_api_key=None)

        response = client.post("/scrape", json={"keyword": "shoes"}, headers={"x-api-key": ""})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert stub_manager.requests == []

    def test_header_key(self, client):
        response = client.post("/scrape", json={"keyword": "shoes"}, headers=AUTH)

        assert response.status_code == status.HTTP_200_OK

    def test_body_key(self, client):
        response = client.post("/scrape", json={"keyword": "shoes", "apiKey": TEST_API_KEY})

        assert response.status_code == status.HTTP_200_OK


class TestScrapeValidation:
    """Test request validation on /scrape."""

    @pytest.mark.parametrize("body", [
        {},
        {"keyword": ""},
        {"keyword": "   "},
        {"keyword": "shoes", "maxAds": -1},
        {"keyword": "shoes", "scrollCount": -2},
        {"keyword": "shoes", "maxAds": "abc"},
        {"keyword": "shoes", "maxAds": 2.5},
        {"keyword": "shoes", "maxAds": True},
        {"keyword": "shoes", "scrollCount": "3"},
        {"keyword": 123},
        {"keyword": "shoes", "country": None},
    ])
    def test_bad_request(self, client, stub_manager, body):
        response = client.post("/scrape", json=body, headers=AUTH)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert stub_manager.requests == []

    def test_request_is_parsed(self, client, stub_manager):
        response = client.post(
            "/scrape",
            json={"keyword": " running shoes ", "country": "gb", "maxAds": 12, "scrollCount": 3},
            headers=AUTH,
        )

        assert response.status_code == status.HTTP_200_OK
        request = stub_manager.requests[0]
        assert request.keyword == "running shoes"
        assert request.country == "GB"
        assert request.max_ads == 12
        assert request.scroll_count == 3

    def test_defaults(self, client, stub_manager):
        client.post("/scrape", json={"keyword": "shoes"}, headers=AUTH)

        request = stub_manager.requests[0]
        assert request.country == "US"
        assert request.max_ads == 50
        assert request.scroll_count == 5


class TestScrapeResponse:
    """Test /scrape response payloads."""

    def test_success_payload(self, client):
        from api.main import app, get_scraper_manager

        result = ScrapeResult(
            ads=[AdRecord(ad_id="123456789", advertiser_name="Acme Co", landing_page_url="https://acme.example/")],
            rate_limited=False,
            scrolls=2,
        )
        app.dependency_overrides[get_scraper_manager] = lambda: StubManager(result=result)

        response = client.post("/scrape", json={"keyword": "shoes"}, headers=AUTH)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["adsFound"] == 1
        assert data["rateLimited"] is False
        assert data["scrolls"] == 2
        ad = data["ads"][0]
        assert ad["ad_id"] == "123456789"
        assert ad["advertiser_name"] == "Acme Co"
        assert ad["preview_url"] == "https://www.facebook.com/ads/library/?id=123456789"
        assert ad["cta_text"] == ""

    def test_rate_limited_is_success(self, client):
        from api.main import app, get_scraper_manager

        app.dependency_overrides[get_scraper_manager] = lambda: StubManager(
            result=ScrapeResult(rate_limited=True)
        )

        response = client.post("/scrape", json={"keyword": "shoes"}, headers=AUTH)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["success"] is True
        assert data["rateLimited"] is True
        assert data["ads"] == []

    def test_browser_failure(self, client):
        from api.main import app, get_scraper_manager

        app.dependency_overrides[get_scraper_manager] = lambda: StubManager(
            error=BrowserSessionError("Failed to launch browser: no chromium")
        )

        response = client.post("/scrape", json={"keyword": "shoes"}, headers=AUTH)

        assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
        assert response.json() == {"success": False, "error": "Failed to launch browser: no chromium"}
