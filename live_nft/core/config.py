"""
Application Configuration

Centralized settings management using Pydantic Settings.
Supports environment variables and .env files.

Every variable is optional at load time; each run mode asks for the
variables it needs through ``Settings.require`` so that a test-image run
does not demand chain credentials.
"""

from functools import lru_cache
from typing import Any, Literal, Optional

from pydantic_settings import BaseSettings

from live_nft.core.exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # ==========================================================================
    # App Settings
    # ==========================================================================
    APP_NAME: str = "Live NFT Updater"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"  # development, staging, PROD

    # ==========================================================================
    # Data Sources
    # ==========================================================================
    DATA_SOURCE: Literal["api", "weather"] = "api"

    # Generic numeric API (bearer token)
    API_URL: Optional[str] = None
    API_KEY: Optional[str] = None

    # OpenWeatherMap (appid query parameter)
    WEATHER_API_URL: str = "https://api.openweathermap.org/data/2.5/weather"
    WEATHER_API_KEY: Optional[str] = None
    WEATHER_CITY: Optional[str] = None
    WEATHER_UNITS: Literal["metric", "imperial", "standard"] = "metric"

    HTTP_TIMEOUT: float = 30.0

    # ==========================================================================
    # Image Rendering
    # ==========================================================================
    FILES_DIR: str = "files"  # holds template.png and Rubik-Medium.ttf
    OUTPUT_IMAGES_DIR: Optional[str] = None
    FONT_SIZE: int = 36
    TEXT_COLOR: str = "white"
    TEXT_X: int = 980
    TEXT_Y: int = 250
    LINE_SPACING: int = 48
    RENDER_GROUP_DIGITS: bool = False

    # ==========================================================================
    # Chain SDK
    # ==========================================================================
    SDK_REST_URL: Optional[str] = None
    SDK_REST_URL_FOR_IPFS: Optional[str] = None  # Falls back to SDK_REST_URL
    COLLECTION_ADMIN_MNEMONIC: Optional[str] = None
    OWNER_ADDRESS: Optional[str] = None
    COLLECTION_ID: Optional[int] = None
    TOKEN_ID: Optional[int] = None

    EXTRINSIC_POLL_INTERVAL: float = 2.0
    EXTRINSIC_TIMEOUT: float = 120.0

    MIN_BALANCE_CREATE: float = 3.0
    MIN_BALANCE_UPDATE: float = 1.0

    # ==========================================================================
    # Collection Defaults
    # ==========================================================================
    COLLECTION_NAME: str = "Live NFT"
    COLLECTION_DESCRIPTION: str = "Live NFT collection"
    COLLECTION_TOKEN_PREFIX: str = "LIVE"
    IPFS_GATEWAY_URL: str = "https://ipfs.unique.network/ipfs"
    COVER_PICTURE_CID: str = "QmPCqY7Lmxerm8cLKmB18kT1RxkwnpasPVksA8XLhViVT7"

    # ==========================================================================
    # Scheduling
    # ==========================================================================
    CRON_TIME: Optional[str] = None
    CRON_TIMEZONE: str = "Europe/Moscow"
    METRICS_PORT: Optional[int] = None

    # Celery beat deployments only
    REDIS_URL: str = "redis://localhost:6379/0"

    # ==========================================================================
    # Logging Settings
    # ==========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT_JSON: bool = False  # JSON for log shippers, console for a terminal

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True

    def require(self, name: str) -> Any:
        """Return a setting that the current run mode cannot do without."""
        value = getattr(self, name)
        if value is None or value == "":
            raise ConfigError(f"env var {name} should be set", variable=name)
        return value

    @property
    def ipfs_rest_url(self) -> str:
        if self.SDK_REST_URL_FOR_IPFS:
            return self.SDK_REST_URL_FOR_IPFS
        return self.require("SDK_REST_URL")


@lru_cache
def get_settings() -> Settings:
    """Load settings once per process."""
    return Settings()
