"""Shared configuration definitions for all microservices."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict  # type: ignore[import-not-found]


class SharedSettings(BaseSettings):
    """Global defaults and environment-driven overrides for all services."""

    # Environment
    APP_ENV: str = "development"

    # Intake service defaults
    INTAKE_SERVICE_NAME: str = "RTS File Intake Service"
    INTAKE_SERVICE_VERSION: str = "1.0.0"
    INTAKE_SERVICE_HOST: str = "0.0.0.0"
    INTAKE_SERVICE_PORT: int = 3000
    INTAKE_DEBUG: bool = False
    INTAKE_STORAGE_DIR: str = str(Path("intake") / "uploads")
    INTAKE_TEMP_DIR: str = str(Path("intake") / "temp")
    INTAKE_MAX_FILE_SIZE_MB: int = 10
    INTAKE_LOG_FILE: str = str(Path("logs") / "intake_service.log")

    # Portal service defaults
    PORTAL_SERVICE_NAME: str = "RTS Applicant Portal"
    PORTAL_SERVICE_VERSION: str = "1.0.0"
    PORTAL_SERVICE_HOST: str = "0.0.0.0"
    PORTAL_SERVICE_PORT: int = 8300
    PORTAL_DEBUG: bool = False
    PORTAL_LOG_FILE: str = str(Path("logs") / "portal_service.log")
    PORTAL_PUBLIC_URL: str = "http://localhost:3000"
    INTAKE_SERVICE_URL: str = "http://localhost:3000"
    INTAKE_TIMEOUT_SECONDS: float = 30.0

    # CORS defaults
    CORS_ORIGINS: str = "http://localhost:3000,http://127.0.0.1:3000"

    # MongoDB defaults
    MONGODB_URI: str = "mongodb://localhost:27017/"
    DATABASE_NAME: str = "rts_portal"
    COLLECTION_NAME: str = "applicants"

    # Admin session defaults
    ADMIN_EMAIL: str = "admin@example.com"
    ADMIN_PASSWORD: Optional[str] = None
    SESSION_TTL_MINUTES: int = 60

    model_config = SettingsConfigDict(
        env_file=str(Path(__file__).resolve().parent.parent / ".env"),
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="allow",
    )


shared_settings = SharedSettings()
