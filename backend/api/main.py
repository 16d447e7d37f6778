from contextlib import asynccontextmanager
from fastapi import FastAPI, Depends, HTTPException, Header
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Optional
from datetime import datetime, timezone
import logging
import secrets
import re

from api.config import settings, get_settings, Settings
from scrapers.base import ScrapeRequest, ScrapeRequestError, BrowserSessionError
from scrapers.manager import ScraperManager
from scrapers.sites.ad_library import AdLibraryScraper

# Setup logging directory
settings.log_dir.mkdir(exist_ok=True)


# Custom formatter to strip ANSI color codes from file logs
class ColorStripFormatter(logging.Formatter):
    """Formatter that strips ANSI color codes from log messages."""
    ansi_escape = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')

    def format(self, record):
        message = super().format(record)
        return self.ansi_escape.sub('', message)


# Setup logging with color support for console, stripped for file
file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
file_handler.setFormatter(ColorStripFormatter(settings.log_format))

console_handler = logging.StreamHandler()
console_handler.setFormatter(logging.Formatter(settings.log_format))

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    handlers=[file_handler, console_handler],
    force=True  # Override any existing configuration
)

# Scraper loggers get their own handlers and don't propagate, so messages appear once
scraper_logger = logging.getLogger('scraper')
scraper_logger.propagate = False
# Only add handlers if not already present (prevents duplicates on module reload)
if not scraper_logger.handlers:
    scraper_file_handler = logging.FileHandler(settings.log_file, encoding='utf-8')
    scraper_file_handler.setFormatter(ColorStripFormatter(settings.log_format))
    scraper_logger.addHandler(scraper_file_handler)

    scraper_console_handler = logging.StreamHandler()
    scraper_console_handler.setFormatter(logging.Formatter(settings.log_format))
    scraper_logger.addHandler(scraper_console_handler)
scraper_logger.setLevel(getattr(logging, settings.log_level.upper()))

logger = logging.getLogger(__name__)


# Filter to suppress noisy health check access logs
class HealthCheckFilter(logging.Filter):
    SUPPRESSED_ENDPOINTS = ['/health']

    def filter(self, record):
        try:
            msg = record.getMessage()
        except Exception:
            msg = str(record.msg)
        for endpoint in self.SUPPRESSED_ENDPOINTS:
            if endpoint in msg:
                return False
        return True


logging.getLogger("uvicorn.access").addFilter(HealthCheckFilter())


# One manager per process; created on first use
_scraper_manager: Optional[ScraperManager] = None


def get_scraper_manager() -> ScraperManager:
    """FastAPI dependency returning the process-wide scraper manager."""
    global _scraper_manager
    if _scraper_manager is None:
        _scraper_manager = ScraperManager(
            scraper=AdLibraryScraper(config=settings.scraper_config()),
            max_concurrent=settings.max_concurrent_scrapes,
        )
    return _scraper_manager


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Handles startup and shutdown events.
    """
    # Startup
    logger.info("=" * 60)
    logger.info("Ad Library Scraper Starting Up")
    logger.info("=" * 60)
    logger.info(f"Log file: {settings.log_file}")
    logger.info(f"Max concurrent scrapes: {settings.max_concurrent_scrapes}")
    if not settings.playwright_api_key:
        logger.warning("PLAYWRIGHT_API_KEY is not set; /scrape will reject every request")
    logger.info("Backend ready to accept requests")

    yield  # Application runs here

    # Shutdown
    logger.info("=" * 60)
    logger.info("Ad Library Scraper Shutting Down")
    logger.info("=" * 60)


app = FastAPI(
    title="Ad Library Scraper API",
    version="1.0.0",
    lifespan=lifespan
)

# Note: allow_credentials must be False when allow_origins is ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/favicon.ico", include_in_schema=False)
async def favicon():
    """Return empty response for favicon requests"""
    return Response(status_code=204)


# Pydantic models for API requests
class ScrapeBody(BaseModel):
    # Values are checked by ScrapeRequest so bad input maps to 400, not 422
    model_config = ConfigDict(populate_by_name=True)

    keyword: Any = None
    country: Any = "US"
    max_ads: Any = Field(50, alias="maxAds")
    scroll_count: Any = Field(5, alias="scrollCount")
    api_key: Optional[str] = Field(None, alias="apiKey")


def is_authorized(provided: Optional[str], expected: Optional[str]) -> bool:
    """Both keys must be present and equal."""
    if not expected or not provided:
        return False
    return secrets.compare_digest(provided.encode(), expected.encode())


# API Endpoints

@app.get("/health")
async def health(manager: ScraperManager = Depends(get_scraper_manager)):
    """Health check - no auth required"""
    return {
        "status": "ok",
        "browser": "chromium",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "activeScrapes": manager.active,
    }


@app.post("/scrape")
async def scrape(
    body: ScrapeBody,
    x_api_key: Optional[str] = Header(None),
    app_settings: Settings = Depends(get_settings),
    manager: ScraperManager = Depends(get_scraper_manager),
):
    """Scrape the ad library for a keyword"""
    if not is_authorized(x_api_key or body.api_key, app_settings.playwright_api_key):
        raise HTTPException(status_code=401, detail="Unauthorized")

    try:
        request = ScrapeRequest(
            keyword=body.keyword,
            country=body.country,
            max_ads=body.max_ads,
            scroll_count=body.scroll_count,
        )
    except ScrapeRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))

    logger.info(
        f"Starting scrape: keyword={request.keyword!r}, country={request.country!r}, "
        f"maxAds={request.max_ads}, scrollCount={request.scroll_count}"
    )

    try:
        result = await manager.scrape(request)
    except BrowserSessionError as e:
        logger.error(f"Scrape error: {e}")
        return JSONResponse(status_code=500, content={"success": False, "error": str(e)})

    logger.info(f"Scrape complete: found {result.ads_found} ads, rateLimited={result.rate_limited}")
    return {"success": True, **result.to_dict()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.port,
        access_log=True,
        log_config=None,  # Keep the handlers configured above
        timeout_keep_alive=5,
        timeout_graceful_shutdown=5.0,
    )
