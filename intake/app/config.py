from pathlib import Path
import sys
from typing import List

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

ROOT_DIR = Path(__file__).resolve().parents[2]
SERVICE_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from config.shared_settings import shared_settings


class Settings(BaseSettings):
    """Configuration for the file intake service."""

    SERVICE_NAME: str = shared_settings.INTAKE_SERVICE_NAME
    SERVICE_VERSION: str = shared_settings.INTAKE_SERVICE_VERSION
    APP_HOST: str = Field(
        default=shared_settings.INTAKE_SERVICE_HOST,
        validation_alias=AliasChoices("HOST", "APP_HOST"),
    )
    APP_PORT: int = Field(
        default=shared_settings.INTAKE_SERVICE_PORT,
        validation_alias=AliasChoices("PORT", "APP_PORT"),
    )
    APP_ENV: str = shared_settings.APP_ENV
    DEBUG: bool = Field(
        default=shared_settings.INTAKE_DEBUG,
        validation_alias=AliasChoices("DEBUG", "APP_DEBUG"),
    )

    STORAGE_ROOT: Path = Field(
        default=Path(shared_settings.INTAKE_STORAGE_DIR),
        validation_alias=AliasChoices("STORAGE_ROOT", "UPLOAD_ROOT"),
    )
    TEMP_ROOT: Path = Field(
        default=Path(shared_settings.INTAKE_TEMP_DIR),
        validation_alias=AliasChoices("TEMP_ROOT", "HOLDING_ROOT"),
    )
    ALLOWED_MIME_TYPES: List[str] = Field(
        default=[
            "image/jpeg",
            "image/png",
            "image/jpg",
            "application/pdf",
        ]
    )
    MAX_FILE_SIZE_MB: int = Field(
        default=shared_settings.INTAKE_MAX_FILE_SIZE_MB,
        validation_alias="MAX_FILE_SIZE_MB",
    )

    # Path segment under which stored files are addressed and served
    PUBLIC_ROOT_MARKER: str = "uploads"

    CORS_ORIGINS: str = shared_settings.CORS_ORIGINS
    CORS_ALLOW_CREDENTIALS: bool = True

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
    def max_file_size_bytes(self) -> int:
        return self.MAX_FILE_SIZE_MB * 1024 * 1024

    @property
    def storage_root_path(self) -> Path:
        return self._resolve_service_path(self.STORAGE_ROOT)

    @property
    def temp_root_path(self) -> Path:
        return self._resolve_service_path(self.TEMP_ROOT)

    @staticmethod
    def _resolve_service_path(configured: Path) -> Path:
        path = Path(configured)
        if path.is_absolute():
            return path

        parts = path.parts
        if parts and parts[0].lower() == "intake":
            path = Path(*parts[1:]) if len(parts) > 1 else Path()

        return (SERVICE_DIR / path).resolve()


settings = Settings()
