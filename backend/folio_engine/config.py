# backend/folio_engine/config.py
"""
Application configuration using Pydantic Settings.

Loads configuration from environment variables with validation:
- ENVIRONMENT: Runtime mode (development, test, production)
- LOG_LEVEL / LOG_FORMAT: Logging verbosity and output format
- ZERO_BALANCE_TOLERANCE: Epsilon used by cycle detection
- STALE_AFTER_MINUTES: Age after which a display aggregate is stale
- DISPLAY_MAX_HOLDINGS: Holdings kept in the display aggregate

The accounting engine never reads settings directly. The service layer
passes these values into the calculators so that the calculators remain
pure functions of their inputs.

Usage:
    from folio_engine.config import settings

    if settings.is_production:
        # Production-specific logic
        ...
"""
from decimal import Decimal
from pathlib import Path
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from folio_engine.services.constants import (
    DISPLAY_MAX_HOLDINGS,
    STALE_AFTER_MINUTES,
    ZERO_BALANCE_TOLERANCE,
)

# Find the .env file in project root (parent of backend/)
_BACKEND_DIR = Path(__file__).resolve().parent.parent
_PROJECT_ROOT = _BACKEND_DIR.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Environment variables:
        - ENVIRONMENT: Runtime environment (development, test, production)
        - APP_NAME: Application name (default: "Folio Engine")
        - LOG_LEVEL: Logging level (default: "INFO")
        - LOG_FORMAT: "text" or "json" (default: "text")

    Accounting settings:
        - ZERO_BALANCE_TOLERANCE: |balance| below this closes a cycle (default: 1e-8)
        - STALE_AFTER_MINUTES: Display staleness threshold (default: 60)
        - DISPLAY_MAX_HOLDINGS: Holdings kept for display (default: 5)
    """

    environment: Literal["development", "test", "production"] = Field(
        default="development",
        description="Runtime environment (development, test, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: Literal["text", "json"] = Field(
        default="text",
        description="Log output format"
    )

    app_name: str = "Folio Engine"
    app_version: str = "0.1.0"
    debug: bool = False

    # =========================================================================
    # ACCOUNTING
    # =========================================================================
    zero_balance_tolerance: Decimal = Field(
        default=ZERO_BALANCE_TOLERANCE,
        ge=0,
        description="Running balance magnitude below which a cycle is closed"
    )
    stale_after_minutes: int = Field(
        default=STALE_AFTER_MINUTES,
        ge=1,
        description="Minutes after which a display aggregate is considered stale"
    )
    display_max_holdings: int = Field(
        default=DISPLAY_MAX_HOLDINGS,
        ge=1,
        le=50,
        description="Number of holdings retained in the display aggregate"
    )

    # =========================================================================
    # CORS
    # =========================================================================
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://127.0.0.1:3000"],
        description="Allowed CORS origins"
    )
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = Field(default=["*"])
    cors_allow_headers: list[str] = Field(default=["*"])

    # =========================================================================
    # RATE LIMITING
    # =========================================================================
    rate_limit_enabled: bool = Field(
        default=True,
        description="Disable to turn off slowapi limits (e.g. in load tests)"
    )

    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE) if _ENV_FILE.exists() else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_production_config(self) -> "Settings":
        """
        Reject debug mode in production.

        Everything else has a safe default in every environment.
        """
        if self.environment == "production" and self.debug:
            raise ValueError(
                "DEBUG must be disabled in production environment."
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test environment."""
        return self.environment == "test"


# Create single instance
settings = Settings()
