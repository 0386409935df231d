# stockwatch/core/config.py

import os
from functools import lru_cache
from typing import Optional

from pydantic import ConfigDict
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # Shopify webhooks / Admin API
    SHOPIFY_WEBHOOK_SECRET: str = ""
    SHOPIFY_API_SECRET: str = ""  # Used when no dedicated webhook secret is configured
    SHOPIFY_API_VERSION: str = "2024-01"
    CATALOG_TIMEOUT_SECONDS: float = 15.0

    # Item resolver fallback scan
    FALLBACK_SCAN_PAGE_SIZE: int = 250  # Admin API maximum
    FALLBACK_SCAN_MAX_PAGES: int = 1

    # Alerting
    ALERT_DEDUP_WINDOW_HOURS: int = 24
    DEFAULT_LOW_STOCK_THRESHOLD: int = 5
    CHAT_TIMEOUT_SECONDS: float = 10.0

    # SMTP / Email
    SMTP_HOST: str = ""
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT: int = 30
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: Optional[str] = None

    # Basic Auth for admin routes
    BASIC_AUTH_USERNAME: str = "admin"
    BASIC_AUTH_PASSWORD: Optional[str] = None

    # Environment
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def webhook_secret(self) -> str:
        return self.SHOPIFY_WEBHOOK_SECRET or self.SHOPIFY_API_SECRET


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()


def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()


def get_webhook_secret():
    """Get the shared secret used to sign inbound webhooks"""
    return get_settings().webhook_secret
