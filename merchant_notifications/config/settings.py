"""Application settings and configuration."""

from enum import Enum
from typing import List, Optional

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Environment types for deployment."""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class OrderFeedMode(str, Enum):
    """How new orders are picked up from the orders collection."""
    CHANGE_STREAM = "change_stream"
    POLLING = "polling"


class Settings(BaseSettings):
    """Application settings."""

    # Environment
    ENVIRONMENT: Environment = Environment.DEVELOPMENT

    # Application
    APP_NAME: str = "Merchant Notifications"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database - MongoDB
    MONGODB_URI: Optional[str] = None
    MONGODB_DATABASE: str = "merchants"
    ORDERS_COLLECTION: str = "orders"
    CONFIG_COLLECTION: str = "branch_config"

    # Mail relay (the relay attaches its own secret, we never send one)
    MAIL_RELAY_URL: str = "http://localhost:8787/send"
    MAIL_RELAY_TIMEOUT: float = Field(10.0, description="Seconds before a relay call is abandoned")

    # Order listener
    ORDER_FRESHNESS_WINDOW_SECONDS: int = 300  # 5 minutes
    ORDER_FEED_MODE: OrderFeedMode = OrderFeedMode.CHANGE_STREAM
    ORDER_POLL_INTERVAL: float = 5.0
    ORDER_FEED_RETRY_DELAY: float = 1.0
    ORDER_FEED_MAX_RETRY_DELAY: float = 60.0
    WATCHED_BRANCHES: List[str] = Field(
        default_factory=list,
        description="Scopes to listen on at startup, as 'merchantId/branchId'"
    )

    # Reports
    DEFAULT_MERCHANT_NAME: str = "Your Store"
    REPORT_TOP_ITEMS_LIMIT: int = 10

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8080",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "json"
    LOG_FILE: Optional[str] = None

    @field_validator("MONGODB_URI")
    @classmethod
    def validate_mongodb_uri(cls, v: Optional[str]) -> Optional[str]:
        """Validate MongoDB URI format."""
        if v and not v.startswith(("mongodb://", "mongodb+srv://")):
            raise ValueError("MONGODB_URI must be a valid MongoDB connection string")
        return v

    @field_validator("MAIL_RELAY_URL")
    @classmethod
    def validate_mail_relay_url(cls, v: str) -> str:
        """Relay endpoint must be an absolute http(s) URL."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("MAIL_RELAY_URL must start with http:// or https://")
        return v

    @field_validator(
        "MAIL_RELAY_TIMEOUT",
        "ORDER_POLL_INTERVAL",
        "ORDER_FEED_RETRY_DELAY",
        "ORDER_FEED_MAX_RETRY_DELAY",
    )
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be greater than zero")
        return v

    @field_validator("REPORT_TOP_ITEMS_LIMIT")
    @classmethod
    def validate_top_items_limit(cls, v: int) -> int:
        """Reports list between 1 and 10 top products."""
        if not 1 <= v <= 10:
            raise ValueError("REPORT_TOP_ITEMS_LIMIT must be between 1 and 10")
        return v

    @field_validator("WATCHED_BRANCHES")
    @classmethod
    def validate_watched_branches(cls, v: List[str]) -> List[str]:
        """Each entry must look like 'merchantId/branchId'."""
        for entry in v:
            parts = entry.split("/")
            if len(parts) != 2 or not all(part.strip() for part in parts):
                raise ValueError(f"invalid scope '{entry}', expected 'merchantId/branchId'")
        return v

    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development."""
        return self.ENVIRONMENT == Environment.DEVELOPMENT

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
        "extra": "ignore"  # Ignore extra environment variables
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get application settings."""
    return settings
