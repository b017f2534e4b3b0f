"""
Application configuration using Pydantic Settings
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Application
    APP_NAME: str = "Parking QR"
    ENVIRONMENT: str = "development"
    PORT: int = 3001

    # API
    API_PREFIX: str = "/api"
    ALLOWED_ORIGINS: list[str] = ["*"]

    # Public base URL used for QR targets and provider callbacks.
    # Falls back to the incoming request's base URL when unset.
    BASE_URL: Optional[str] = None

    # Record store
    STORE_BACKEND: str = "json"  # json | sql
    STORE_PATH: str = "database.json"
    DATABASE_URL: str = "sqlite:///./parking_qr.db"

    # Plans
    FREE_TIER_QR_LIMIT: int = 3
    ENFORCE_TIER_LIMITS: bool = True
    PUBLIC_QR_INCLUDES_PHONE: bool = False

    # Twilio
    TWILIO_ACCOUNT_SID: Optional[str] = None
    TWILIO_AUTH_TOKEN: Optional[str] = None
    TWILIO_PHONE_NUMBER: Optional[str] = None
    TWILIO_TIMEOUT_SECONDS: float = 10.0

    @property
    def is_development(self) -> bool:
        return self.ENVIRONMENT == "development"

    @property
    def telephony_enabled(self) -> bool:
        """Call placing is only available when all Twilio credentials are present"""
        return bool(
            self.TWILIO_ACCOUNT_SID
            and self.TWILIO_AUTH_TOKEN
            and self.TWILIO_PHONE_NUMBER
        )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
