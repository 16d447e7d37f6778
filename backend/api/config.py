"""
Application Configuration
Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from typing import List, Optional
from pathlib import Path
from dataclasses import replace

from scrapers.config import AD_LIBRARY, AdLibraryConfig


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API Configuration
    api_host: str = "0.0.0.0"
    port: int = 3000                        # PORT
    api_debug: bool = False
    playwright_api_key: Optional[str] = None  # PLAYWRIGHT_API_KEY, required for /scrape

    # CORS Configuration
    cors_origins: List[str] = ["*"]

    # Scraper Configuration
    max_concurrent_scrapes: int = 2
    scraper_headless: bool = True
    scraper_navigation_timeout: float = 60.0

    # Logging Configuration
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Paths
    @property
    def log_dir(self) -> Path:
        """Get the log directory path."""
        return Path(__file__).parent.parent.parent / "logs"

    @property
    def log_file(self) -> Path:
        """Get the log file path."""
        return self.log_dir / "scraper.log"

    def scraper_config(self) -> AdLibraryConfig:
        """Ad library config with the environment overrides applied."""
        return replace(
            AD_LIBRARY,
            headless=self.scraper_headless,
            navigation_timeout=self.scraper_navigation_timeout,
        )

    class Config:
        # Only load .env if it exists to avoid permission errors
        env_file = ".env" if __import__("pathlib").Path(".env").exists() else None
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Ignore extra environment variables


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """FastAPI dependency returning the global settings."""
    return settings
