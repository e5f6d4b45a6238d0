from pydantic_settings import BaseSettings
from pydantic import ConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    model_config = ConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )
    # App
    environment: str = "development"
    app_url: str = "http://localhost:5173"   # Frontend URL for report links
    log_level: str = "INFO"
    # MongoDB (optional; in-memory store when unset)
    mongo_uri: Optional[str] = None
    mongo_db_name: str = "brandscore"
    # Gemini
    google_gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.5-flash"
    ai_temperature: float = 0.4
    ai_max_attempts: int = 2
    ai_retry_delay_seconds: float = 1.0
    max_grounding_urls: int = 5
    # PageSpeed Insights
    pagespeed_api_key: Optional[str] = None
    pagespeed_timeout_seconds: float = 30.0
    pagespeed_rate_limit_backoff_seconds: float = 4.0
    pagespeed_retry_delay_seconds: float = 1.0
    # Scoring policy: allow the model to lower the score when the scan failed
    penalize_failed_scan: bool = False
    # CRM / email automation relay
    webhook_url: Optional[str] = None
    webhook_timeout_seconds: float = 10.0
    # Rate limiting
    rate_limit_per_minute: int = 10


@lru_cache()
def get_settings() -> Settings:
    return Settings()
