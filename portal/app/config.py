"""Configuration for the applicant portal service"""

from pathlib import Path
import sys
from typing import List, Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
SERVICE_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from config.shared_settings import shared_settings


class Settings(BaseSettings):
    """Configuration for the applicant portal service."""

    # Service metadata
    SERVICE_NAME: str = shared_settings.PORTAL_SERVICE_NAME
    SERVICE_VERSION: str = shared_settings.PORTAL_SERVICE_VERSION
    APP_HOST: str = Field(
        default=shared_settings.PORTAL_SERVICE_HOST,
        validation_alias=AliasChoices("HOST", "APP_HOST"),
    )
    APP_PORT: int = Field(
        default=shared_settings.PORTAL_SERVICE_PORT,
        validation_alias=AliasChoices("PORT", "APP_PORT"),
    )
    APP_ENV: str = shared_settings.APP_ENV
    DEBUG: bool = Field(
        default=shared_settings.PORTAL_DEBUG,
        validation_alias=AliasChoices("DEBUG", "APP_DEBUG"),
    )

    # CORS
    CORS_ORIGINS: str = shared_settings.CORS_ORIGINS
    CORS_ALLOW_CREDENTIALS: bool = True

    # Public addresses
    PORTAL_PUBLIC_URL: str = shared_settings.PORTAL_PUBLIC_URL
    INTAKE_SERVICE_URL: str = Field(
        default=shared_settings.INTAKE_SERVICE_URL,
        validation_alias=AliasChoices("INTAKE_SERVICE_URL", "FILE_SERVER_URL"),
    )
    FILE_BASE_URL: Optional[str] = None
    INTAKE_TIMEOUT_SECONDS: float = shared_settings.INTAKE_TIMEOUT_SECONDS

    # MongoDB
    MONGODB_URI: str = shared_settings.MONGODB_URI
    DATABASE_NAME: str = shared_settings.DATABASE_NAME
    COLLECTION_NAME: str = shared_settings.COLLECTION_NAME

    # Admin session
    ADMIN_EMAIL: str = shared_settings.ADMIN_EMAIL
    ADMIN_PASSWORD: Optional[str] = shared_settings.ADMIN_PASSWORD
    SESSION_TTL_MINUTES: int = Field(
        default=shared_settings.SESSION_TTL_MINUTES,
        validation_alias="SESSION_TTL_MINUTES",
    )

    model_config = SettingsConfigDict(
        env_file=[str(SERVICE_DIR / ".env"), str(ROOT_DIR / ".env")],
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        if self.CORS_ORIGINS.strip() == "*":
            return ["*"]
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    @property
    def file_base_url(self) -> str:
        return (self.FILE_BASE_URL or self.INTAKE_SERVICE_URL).rstrip("/")


settings = Settings()
