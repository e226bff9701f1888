"""
Configuration management for the Ad Campaign Builder application.
Handles backend settings, credentials, and environment configuration.
"""

import os
import logging
import streamlit as st
from typing import Optional
from dataclasses import dataclass
from dotenv import load_dotenv

from models.data_models import Credentials

logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


@dataclass
class AppConfig:
    """Application configuration settings."""
    api_base_url: str = "https://api.leadscraftmarketing.com/api/v1"
    request_timeout_seconds: int = 30
    min_daily_budget: int = 225
    budget_minor_unit_factor: int = 100
    default_currency: str = "INR"
    listing_page_size: int = 25
    insights_max_workers: int = 10


class ConfigManager:
    """Manages application configuration and settings."""

    def __init__(self):
        self._config: Optional[AppConfig] = None

    def load_config(self) -> AppConfig:
        """Load configuration from Streamlit secrets and environment."""
        if self._config is not None:
            return self._config

        api_base_url = self._get_setting("ADS_API_BASE_URL", AppConfig.api_base_url).rstrip("/")
        if not api_base_url.startswith(("http://", "https://")):
            raise ValueError(
                f"ADS_API_BASE_URL must be an http(s) URL, got '{api_base_url}'. "
                "Please set it in Streamlit secrets or environment variables."
            )

        self._config = AppConfig(
            api_base_url=api_base_url,
            request_timeout_seconds=self._get_int_setting("ADS_REQUEST_TIMEOUT_SECONDS", 30),
            min_daily_budget=self._get_int_setting("ADS_MIN_DAILY_BUDGET", 225),
            budget_minor_unit_factor=self._get_int_setting("ADS_BUDGET_MINOR_UNIT_FACTOR", 100),
            default_currency=self._get_setting("ADS_DEFAULT_CURRENCY", "INR"),
            listing_page_size=self._get_int_setting("ADS_LISTING_PAGE_SIZE", 25),
            insights_max_workers=self._get_int_setting("ADS_INSIGHTS_MAX_WORKERS", 10)
        )

        logger.info(f"Configuration loaded for backend {self._config.api_base_url}")
        return self._config

    def _get_secret_or_env(self, key: str) -> Optional[str]:
        """Get value from Streamlit secrets or environment variables."""
        # Try Streamlit secrets first
        try:
            if hasattr(st, 'secrets') and key in st.secrets:
                return st.secrets[key]
        except Exception:
            # No secrets.toml outside a Streamlit run
            pass

        return os.getenv(key)

    def _get_setting(self, key: str, default: str) -> str:
        """Get string setting with default value."""
        value = self._get_secret_or_env(key)
        return value if value is not None else default

    def _get_int_setting(self, key: str, default: int) -> int:
        """Get integer setting with default value."""
        value = self._get_secret_or_env(key)
        if value is not None:
            try:
                return int(value)
            except ValueError:
                logger.warning(f"Ignoring non-integer value for {key}")
        return default

    def get_default_credentials(self) -> Optional[Credentials]:
        """Credentials seeded from secrets/environment, if both parts are set."""
        token = self._get_secret_or_env("FB_ACCESS_TOKEN")
        account_id = self._get_secret_or_env("FB_AD_ACCOUNT_ID")
        if token and account_id:
            return Credentials(ad_account_id=account_id, access_token=token)
        return None


class CredentialStore:
    """
    Holds the connected ad account for the running session.

    Connecting an account is handled elsewhere; the builder only reads the
    credentials and invalidates them when the platform reports expiry.
    """

    def __init__(self, credentials: Optional[Credentials] = None):
        self._credentials = credentials

    def get(self) -> Optional[Credentials]:
        return self._credentials

    def set(self, credentials: Credentials):
        self._credentials = credentials

    def invalidate(self):
        logger.warning("Clearing stored ad account credentials")
        self._credentials = None

    def is_connected(self) -> bool:
        return self._credentials is not None and self._credentials.is_complete()


# Global configuration manager instance
config_manager = ConfigManager()
