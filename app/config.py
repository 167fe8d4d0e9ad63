# =============================================================================
# app/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from app.config import settings
#   print(settings.SUPABASE_URL)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
#
# The Settings class validates all values at startup, catching configuration
# errors early rather than at runtime.
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses pydantic-settings to:
    - Automatically load from .env file
    - Validate types and constraints
    - Provide sensible defaults for development

    All settings are accessed via the global `settings` instance.
    """

    # -------------------------------------------------------------------------
    # Supabase Configuration
    # -------------------------------------------------------------------------
    # These are required - app won't start without them

    SUPABASE_URL: str = Field(
        ...,  # ... means required (no default)
        description="Supabase project URL (e.g., https://xxx.supabase.co)"
    )

    SUPABASE_ANON_KEY: str = Field(
        ...,
        description="Supabase anon/public API key"
    )

    SUPABASE_SERVICE_KEY: str = Field(
        ...,
        description="Supabase service_role key (bypasses RLS)"
    )

    SUPABASE_JWT_SECRET: str = Field(
        default="",
        description="Legacy HS256 JWT secret used to verify Supabase access tokens"
    )

    # -------------------------------------------------------------------------
    # Redis Configuration (for Celery)
    # -------------------------------------------------------------------------
    # Default to localhost for development

    REDIS_URL: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for Celery broker"
    )

    # -------------------------------------------------------------------------
    # Billing (Stripe)
    # -------------------------------------------------------------------------

    STRIPE_SECRET_KEY: str = Field(
        default="",
        description="Stripe secret key used by the subscription check"
    )

    # -------------------------------------------------------------------------
    # Tier Entitlements
    # -------------------------------------------------------------------------
    # Numeric allowances per role. Unknown roles always fall back to FREE_*.

    FREE_MAX_TEAMS: int = Field(
        default=1,
        ge=0,
        description="Team slots available to free users"
    )

    PAID_MAX_TEAMS: int = Field(
        default=3,
        ge=0,
        description="Team slots available to paid users and admins"
    )

    FREE_MONTHLY_CREDITS: int = Field(
        default=3,
        ge=0,
        description="Credits granted to free users at each monthly reset"
    )

    PAID_MONTHLY_CREDITS: int = Field(
        default=10,
        ge=0,
        description="Credits granted to paid users and admins at each monthly reset"
    )

    TEAM_SLOT_COOLDOWN_DAYS: int = Field(
        default=7,
        ge=0,
        description="Whole days a team slot is locked after its team was last changed"
    )

    # -------------------------------------------------------------------------
    # Sports Data API
    # -------------------------------------------------------------------------

    SPORTS_API_BASE_URL: str = Field(
        default="https://europe-west6-myclubmanagement.cloudfunctions.net/api",
        description="Base URL of the league data proxy (one path per sport)"
    )

    SPORTS_API_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        description="Timeout in seconds for league data requests"
    )

    # -------------------------------------------------------------------------
    # Email / Announcements
    # -------------------------------------------------------------------------

    SMTP_HOST: str = Field(
        default="",
        description="SMTP server hostname (empty disables email sending)"
    )

    SMTP_PORT: int = Field(
        default=465,
        ge=1,
        le=65535,
        description="SMTP server port (implicit TLS)"
    )

    SMTP_USER: str = Field(default="", description="SMTP username")

    SMTP_PASS: str = Field(default="", description="SMTP password")

    EMAIL_FROM: str = Field(
        default="KANVA <info@my-club.app>",
        description="Sender address for outgoing emails"
    )

    APP_BASE_URL: str = Field(
        default="https://kanva.app",
        description="Public frontend URL used in email links"
    )

    ANNOUNCEMENT_DAYS_AHEAD: int = Field(
        default=3,
        ge=1,
        le=14,
        description="How many days before a game the announcement reminder is sent"
    )

    GAME_RESULT_TEMPLATE_ID: str = Field(
        default="5cc48985-a846-4ef3-85e7-ede1ef834367",
        description="Template preselected by announcement email links"
    )

    # -------------------------------------------------------------------------
    # Application Settings
    # -------------------------------------------------------------------------

    ENVIRONMENT: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Current environment"
    )

    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode (verbose logging, auto-reload)"
    )

    API_HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    # CORS origins (comma-separated string that gets parsed)
    CORS_ORIGINS: str = Field(
        default="http://localhost:8080",
        description="Allowed CORS origins (comma-separated)"
    )

    # -------------------------------------------------------------------------
    # Pydantic Settings Configuration
    # -------------------------------------------------------------------------

    model_config = SettingsConfigDict(
        # Load from .env file in project root
        env_file=".env",
        env_file_encoding="utf-8",
        # Don't fail if .env doesn't exist (useful for production where
        # env vars are set directly)
        env_ignore_empty=True,
        # Case-sensitive environment variable names
        case_sensitive=True,
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Parse CORS_ORIGINS string into a list.

        Example: "http://localhost:8080, https://kanva.app" -> ["http://localhost:8080", "https://kanva.app"]
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]

    @property
    def smtp_configured(self) -> bool:
        """True when enough SMTP settings are present to send mail."""
        return bool(self.SMTP_HOST and self.SMTP_USER and self.SMTP_PASS)

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()


# Global settings instance for easy importing
# Usage: from app.config import settings
settings = get_settings()
