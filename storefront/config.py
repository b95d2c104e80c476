"""Application configuration using pydantic-settings."""

import secrets
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class UploadWidgetConfig:
    """Credentials handed to the browser-side image upload widget."""

    cloud_name: str | None = None
    api_key: str | None = None
    upload_preset: str | None = None

    def template_context(self) -> dict[str, str | None]:
        """Values exposed to the create/update templates."""
        return {
            "cloudinary_name": self.cloud_name,
            "cloudinary_api_key": self.api_key,
            "cloudinary_preset": self.upload_preset,
        }


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False

    # Database
    database_url: str = "sqlite+aiosqlite:///./data/storefront.db"

    # Paths
    data_dir: Path = Path("./data")

    # Security
    secret_key: str = Field(
        default_factory=lambda: secrets.token_urlsafe(32), validate_default=True
    )
    login_url: str = "/users/login"

    # Cloudinary upload widget
    cloudinary_name: str | None = Field(None, validation_alias="CLOUDINARY_NAME")
    cloudinary_api_key: str | None = Field(None, validation_alias="CLOUDINARY_API_KEY")
    cloudinary_upload_preset: str | None = Field(
        None, validation_alias="CLOUDINARY_UPLOAD_PRESET"
    )

    @field_validator('secret_key')
    @classmethod
    def warn_default_secret(cls, v: str) -> str:
        """Warn if using auto-generated secret (sessions won't survive restarts)."""
        import warnings
        if len(v) == 43:  # Length of secrets.token_urlsafe(32)
            warnings.warn(
                "Using auto-generated SECRET_KEY. Set SECRET_KEY environment variable for production.",
                UserWarning
            )
        return v

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def upload_widget(self) -> UploadWidgetConfig:
        """Build the upload widget configuration."""
        return UploadWidgetConfig(
            cloud_name=self.cloudinary_name,
            api_key=self.cloudinary_api_key,
            upload_preset=self.cloudinary_upload_preset,
        )


settings = Settings()
