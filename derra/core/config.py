"""Application configuration"""

from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # API
    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Derra Business Directory API"
    VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Storage
    # WHY: The orchestrator is written against the Storage protocol; the
    # concrete backend is chosen once, at startup, from this value.
    STORAGE_BACKEND: Literal["memory", "database"] = "memory"
    DATABASE_URL: str = "sqlite+aiosqlite:///./derra.db"
    SEED_DEFAULT_CATEGORIES: bool = True

    # Security
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 1440  # 24 hours

    # Redis (token blacklist)
    REDIS_URL: str = "redis://localhost:6379/0"

    # PayPal
    PAYPAL_CLIENT_ID: Optional[str] = None
    PAYPAL_CLIENT_SECRET: Optional[str] = None
    PAYPAL_BASE_URL: str = "https://api-m.sandbox.paypal.com"
    PAYPAL_RETURN_URL: str = "https://derra-marketplace.app/subscription/success"
    PAYPAL_CANCEL_URL: str = "https://derra-marketplace.app/subscription/cancel"

    # Listing subscription
    SUBSCRIPTION_PRICE: str = "5.00"
    SUBSCRIPTION_CURRENCY: str = "USD"
    SUBSCRIPTION_PRICE_ID: str = "derra_monthly_listing"
    SUBSCRIPTION_PERIOD_DAYS: int = 30
    SUBSCRIPTION_DESCRIPTION: str = "Derra Business Listing Subscription"
    # WHY: Manual activation skips the payment provider entirely, so it is
    # only exposed when explicitly enabled (local demos, staging).
    SUBSCRIPTION_DEMO_MODE: bool = False

    # CORS
    CORS_ORIGINS: list[str] = [
        "http://localhost:3000",
        "http://localhost:5000",
        "http://localhost:5173",
    ]

    @property
    def paypal_configured(self) -> bool:
        """Check if PayPal credentials are present."""
        return all([self.PAYPAL_CLIENT_ID, self.PAYPAL_CLIENT_SECRET])

    @property
    def async_database_url(self) -> str:
        """Get async database URL"""
        if self.DATABASE_URL.startswith("postgresql://"):
            return self.DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
        if self.DATABASE_URL.startswith("sqlite:///"):
            return self.DATABASE_URL.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return self.DATABASE_URL


settings = Settings()
