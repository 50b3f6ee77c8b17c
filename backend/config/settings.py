"""
Centralized configuration management for the WeatherWise Journey backend.

Loads environment variables from the .env file and provides typed settings
to all backend modules. Includes validation for required configuration.

Usage:
    from config.settings import settings
    api_key = settings.GEMINI_KEY
"""

import os
import logging
from typing import List
from pathlib import Path

from dotenv import load_dotenv

# Load .env from backend directory
_backend_dir = Path(__file__).resolve().parent.parent
load_dotenv(_backend_dir / ".env")

logger = logging.getLogger(__name__)


class Settings:
    """Centralized configuration singleton for all backend services."""

    # ===== FastAPI Configuration =====
    HOST: str = os.getenv("HOST", "127.0.0.1")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "False").lower() == "true"
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # ===== Gemini API Configuration (itinerary, recommendations, chat) =====
    GEMINI_KEY: str = os.getenv("GEMINI_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
    GEMINI_TEMPERATURE: float = float(os.getenv("GEMINI_TEMPERATURE", "0.7"))
    GEMINI_MAX_TOKENS: int = int(os.getenv("GEMINI_MAX_TOKENS", "8192"))
    GEMINI_TIMEOUT: int = int(os.getenv("GEMINI_TIMEOUT", "60"))

    # ===== Itinerary retry policy (applied around the single-attempt adapter) =====
    ITINERARY_MAX_ATTEMPTS: int = int(os.getenv("ITINERARY_MAX_ATTEMPTS", "2"))
    ITINERARY_RETRY_BACKOFF: float = float(os.getenv("ITINERARY_RETRY_BACKOFF", "1.0"))

    # ===== Weather / News =====
    WEATHER_API_KEY: str = os.getenv("WEATHER_API_KEY", "")
    NEWSDATA_API_KEY: str = os.getenv("NEWSDATA_API_KEY", "")

    # ===== Geocoding (Nominatim) =====
    NOMINATIM_USER_AGENT: str = os.getenv(
        "NOMINATIM_USER_AGENT", "WeatherWiseJourneyApp/1.0"
    )
    SUGGESTION_COUNTRY_CODES: str = os.getenv("SUGGESTION_COUNTRY_CODES", "in")
    SUGGESTION_COUNTRY_NAME: str = os.getenv("SUGGESTION_COUNTRY_NAME", "india")
    PLACES_RADIUS_KM: float = float(os.getenv("PLACES_RADIUS_KM", "20"))
    PLACES_LIMIT: int = int(os.getenv("PLACES_LIMIT", "20"))

    HTTP_TIMEOUT: float = float(os.getenv("HTTP_TIMEOUT", "15"))

    # ===== User accounts database =====
    APP_DB_URL: str = os.getenv("APP_DB_URL", "sqlite:///./weatherwise.db")
    BCRYPT_ROUNDS: int = int(os.getenv("BCRYPT_ROUNDS", "10"))

    # ===== Logging =====
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")

    @classmethod
    def validate(cls) -> List[str]:
        """Validate configuration values. Returns list of errors (empty = valid)."""
        errors = []

        if not 0 <= cls.GEMINI_TEMPERATURE <= 2:
            errors.append(
                f"GEMINI_TEMPERATURE must be 0-2, got {cls.GEMINI_TEMPERATURE}"
            )

        if cls.ITINERARY_MAX_ATTEMPTS < 1:
            errors.append(
                f"ITINERARY_MAX_ATTEMPTS must be at least 1, got {cls.ITINERARY_MAX_ATTEMPTS}"
            )

        if not 1 <= cls.PORT <= 65535:
            errors.append(f"PORT must be 1-65535, got {cls.PORT}")

        return errors

    @classmethod
    def missing_keys(cls) -> List[str]:
        """API keys that are not set. The server still starts without them."""
        keys = {
            "GEMINI_KEY": "trip plans fail with a configuration error",
            "WEATHER_API_KEY": "current weather returns 503",
            "NEWSDATA_API_KEY": "weather news shows a placeholder",
        }
        return [
            f"{name} is not set; {effect}"
            for name, effect in keys.items()
            if not getattr(cls, name)
        ]


def redact_api_key(key: str) -> str:
    """Redact API key to show only last 4 characters."""
    if not key or len(key) < 8:
        return "***INVALID***"
    return f"***...{key[-4:]}"


# Singleton instance, import this everywhere
settings = Settings()
