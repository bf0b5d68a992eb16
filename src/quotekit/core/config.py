# QuoteKit - Embeddable Quote Calculator Platform
# Copyright (C) 2025 Luiz Frias <luizf35@gmail.com>
# Form F[x] Labs
#
# This software is dual-licensed under AGPL-3.0 and Commercial License.
# For commercial licensing, contact: luizf35@gmail.com
# See LICENSE file for full terms.

"""Configuration management using Pydantic Settings."""

from pathlib import Path

from beartype import beartype
from pydantic import Field, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DEFAULT_CATALOG_DIR = Path(__file__).resolve().parent.parent / "data" / "verticals"


class Settings(BaseSettings):
    """Application settings with immutable configuration."""

    model_config = SettingsConfigDict(
        env_prefix="QUOTEKIT_",
        env_file=None,
        env_file_encoding="utf-8",
        frozen=True,
        validate_default=True,
        extra="forbid",
    )

    # API Configuration
    app_name: str = Field(
        default="QuoteKit",
        description="Application name",
        min_length=1,
    )
    api_host: str = Field(
        default="0.0.0.0",  # nosec B104 - containerized deployment binds all interfaces
        description="API host to bind to",
    )
    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="API port to bind to",
    )
    api_env: str = Field(
        default="development",
        pattern="^(development|staging|production)$",
        description="API environment",
    )
    api_cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5000"],
        description="Allowed CORS origins",
    )
    public_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL used to build embed and admin links",
        min_length=1,
    )

    # Catalogs and sessions
    catalog_dir: Path = Field(
        default=_DEFAULT_CATALOG_DIR,
        description="Directory holding one JSON option catalog per vertical",
    )
    session_ttl_seconds: int = Field(
        default=3600,
        ge=60,
        le=86400,
        description="Lifetime of an unsubmitted quote session",
    )

    # OpenAI (optional, natural-language pre-fill)
    openai_api_key: str | None = Field(
        default=None,
        description="OpenAI API key for natural-language pre-fill",
    )
    openai_model: str = Field(
        default="gpt-4o",
        description="Chat model used for natural-language pre-fill",
        min_length=1,
    )
    openai_timeout_seconds: float = Field(
        default=20.0,
        ge=1.0,
        le=120.0,
        description="Timeout for a single extraction request",
    )

    # Email delivery
    smtp_host: str | None = Field(
        default=None,
        description="SMTP host; quote emails are only logged when unset",
    )
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP port")
    smtp_user: str | None = Field(default=None, description="SMTP username")
    smtp_password: str | None = Field(default=None, description="SMTP password")
    smtp_use_tls: bool = Field(default=True, description="Use STARTTLS")
    smtp_sender: str = Field(
        default="QuoteKit <quotes@quotekit.ai>",
        description="From header for quote emails",
        min_length=3,
    )

    @field_validator("api_cors_origins")
    @classmethod
    def validate_cors_origins(cls: type["Settings"], v: list[str]) -> list[str]:
        """Validate CORS origins are proper URLs."""
        for origin in v:
            if not origin.startswith(("http://", "https://")):
                raise ValueError(f"Invalid CORS origin: {origin}")
        return v

    @field_validator("public_base_url")
    @classmethod
    def validate_public_base_url(cls: type["Settings"], v: str) -> str:
        """Require an absolute http(s) URL without trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Invalid public base URL: {v}")
        return v.rstrip("/")

    @field_validator("smtp_password")
    @classmethod
    def validate_smtp_password(
        cls: type["Settings"], v: str | None, info: ValidationInfo
    ) -> str | None:
        """A password without a user is a misconfiguration."""
        if v and not info.data.get("smtp_user"):
            raise ValueError("smtp_password requires smtp_user to be set")
        return v

    @property
    @beartype
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.api_env == "production"

    @property
    @beartype
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.api_env == "development"

    @property
    @beartype
    def email_enabled(self) -> bool:
        """Whether an SMTP transport is configured."""
        return bool(self.smtp_host)


_settings: Settings | None = None


@beartype
def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


@beartype
def clear_settings_cache() -> None:
    """Clear settings cache (for testing)."""
    global _settings
    _settings = None
