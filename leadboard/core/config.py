"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    """Raised when mandatory configuration is missing."""


@dataclass(frozen=True)
class Settings:
    google_maps_api_key: str
    port: int = 5000
    search_radius: int = 5000
    results_per_type: int = 3
    max_results: int = 8
    max_pages: int = 2
    max_workers: int = 8
    message_send_delay: float = 2.0
    default_location: str = "São Paulo, SP"
    default_business_type: str = "Restaurantes"

    def require_api_key(self) -> str:
        if not self.google_maps_api_key:
            raise ConfigError("GOOGLE_MAPS_API_KEY environment variable is required")
        return self.google_maps_api_key


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables with sensible defaults."""
    load_dotenv()

    google_maps_api_key = os.getenv("GOOGLE_MAPS_API_KEY", "")
    port = int(os.getenv("PORT", "5000"))
    search_radius = int(os.getenv("SEARCH_RADIUS", "5000"))
    results_per_type = int(os.getenv("RESULTS_PER_TYPE", "3"))
    max_results = int(os.getenv("MAX_RESULTS", "8"))
    max_pages = int(os.getenv("SEARCH_MAX_PAGES", "2"))
    max_workers = int(os.getenv("SEARCH_MAX_WORKERS", "8"))
    message_send_delay = float(os.getenv("MESSAGE_SEND_DELAY", "2.0"))
    default_location = os.getenv("DEFAULT_LOCATION") or "São Paulo, SP"
    default_business_type = os.getenv("DEFAULT_BUSINESS_TYPE") or "Restaurantes"

    if not google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not configured; Google Places searches will fail.")

    return Settings(
        google_maps_api_key=google_maps_api_key,
        port=port,
        search_radius=search_radius,
        results_per_type=results_per_type,
        max_results=max_results,
        max_pages=max_pages,
        max_workers=max_workers,
        message_send_delay=message_send_delay,
        default_location=default_location,
        default_business_type=default_business_type,
    )
