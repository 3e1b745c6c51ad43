"""
Application settings with Pydantic v2 validation.

Loads configuration from environment variables with sensible defaults.
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Storage configuration."""

    model_config = SettingsConfigDict(env_prefix="STORAGE_")

    data_dir: Path = Path("data")
    db_name: str = "lumix.db"

    # SQLite settings
    pool_size: int = 5
    busy_timeout: int = 30000  # ms

    @property
    def db_path(self) -> Path:
        return self.data_dir / self.db_name


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="API_")

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: list[str] = ["*"]


class PdfSettings(BaseSettings):
    """PDF document configuration."""

    model_config = SettingsConfigDict(env_prefix="PDF_")

    # Used when the company record has no name
    company_name: str = "Lumix"
    footer_text: str = "Generated by Lumix"

    # Optional TTF font with full Unicode coverage (e.g. DejaVuSans.ttf)
    unicode_font_path: str = ""


class EmailSettings(BaseSettings):
    """Outbound email (Resend-compatible API) configuration."""

    model_config = SettingsConfigDict(env_prefix="EMAIL_")

    base_url: str = "https://api.resend.com"
    api_key: str = ""
    sender: str = "Lumix <onboarding@resend.dev>"
    timeout: float = 30.0
    attach_pdf: bool = True


class InvoicingSettings(BaseSettings):
    """Invoice numbering and defaults."""

    model_config = SettingsConfigDict(env_prefix="INVOICE_")

    number_prefix: str = "INV"
    number_attempts: int = 5
    default_currency: str = "EUR"


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "Lumix Back Office"
    app_version: str = "1.0.0"
    environment: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Sub-settings
    storage: StorageSettings = Field(default_factory=StorageSettings)
    api: APISettings = Field(default_factory=APISettings)
    pdf: PdfSettings = Field(default_factory=PdfSettings)
    email: EmailSettings = Field(default_factory=EmailSettings)
    invoicing: InvoicingSettings = Field(default_factory=InvoicingSettings)

    @field_validator("storage", mode="before")
    @classmethod
    def ensure_data_dir(cls, v: Any) -> StorageSettings:
        if isinstance(v, dict):
            settings = StorageSettings(**v)
        else:
            settings = v or StorageSettings()
        settings.data_dir.mkdir(parents=True, exist_ok=True)
        return settings


# Global settings instance
_settings: Settings | None = None


def get_settings() -> Settings:
    """Get or create global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings (for testing)."""
    global _settings
    _settings = None
