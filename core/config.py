"""
Configuration Management Module

This module handles loading, validating, and providing access to gateway
configuration from environment variables (.env file).

Uses Pydantic Settings for automatic validation and type conversion.

Key Features:
- Loads configuration from .env file
- Selects the active provider through the PROVIDER discriminant
- Holds the credentials of every provider (only the selected one is checked)
- Retry and timeout tuning shared by all providers

Usage:
    from core.config import settings

    print(settings.provider)            # "stripe"
    print(settings.plaid_base_url)      # Resolved from PLAID_ENVIRONMENT
"""

from typing import Dict, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


PLAID_ENVIRONMENTS: Dict[str, str] = {
    "sandbox": "https://sandbox.plaid.com",
    "development": "https://development.plaid.com",
    "production": "https://production.plaid.com",
}

RETRY_BACKOFF_STRATEGIES = ("exponential", "fixed")


class Settings(BaseSettings):
    """
    Gateway Settings

    Values are automatically loaded from environment variables or .env file.
    Credentials default to empty strings; a provider complains about missing
    credentials only when it is the one being constructed.

    Attributes:
        provider: Active provider discriminant (plaid, teller, gocardless, stripe)
        environment: Current environment (development, production)
        log_level: Logging level
        request_timeout: Per-call HTTP timeout in seconds
        health_check_timeout: Timeout for a single provider health probe
        retry_max_attempts: Total attempts per gateway operation (including the first)
        retry_backoff: "exponential" or "fixed"
        retry_base_delay: First backoff delay in seconds
        retry_max_delay: Upper bound for a single backoff delay
    """

    # ============================================
    # Gateway Configuration
    # ============================================

    provider: Optional[str] = Field(
        default=None,
        description="Active provider (plaid, teller, gocardless, stripe)"
    )

    environment: str = Field(
        default="development",
        description="Application environment (development, production)"
    )

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # ============================================
    # Timeouts & Retry
    # ============================================

    request_timeout: float = Field(
        default=30,
        description="HTTP request timeout in seconds"
    )

    health_check_timeout: float = Field(
        default=5,
        description="Timeout for a single provider health probe (seconds)"
    )

    retry_max_attempts: int = Field(
        default=3,
        description="Maximum attempts per operation, first attempt included"
    )

    retry_backoff: str = Field(
        default="exponential",
        description="Backoff strategy between attempts (exponential, fixed)"
    )

    retry_base_delay: float = Field(
        default=0.5,
        description="Initial delay between attempts (seconds)"
    )

    retry_max_delay: float = Field(
        default=8.0,
        description="Maximum delay between attempts (seconds)"
    )

    # ============================================
    # Plaid Configuration
    # ============================================

    plaid_client_id: str = Field(default="", description="Plaid client id")
    plaid_secret: str = Field(default="", description="Plaid secret")
    plaid_environment: str = Field(
        default="sandbox",
        description="Plaid environment (sandbox, development, production)"
    )
    plaid_base_url: str = Field(
        default="",
        description="Override for the Plaid API base URL (empty = derive from environment)"
    )

    # ============================================
    # Teller Configuration
    # ============================================

    teller_certificate_path: str = Field(
        default="",
        description="Path to the Teller client certificate (PEM)"
    )
    teller_certificate_private_key_path: str = Field(
        default="",
        description="Path to the Teller client certificate private key (PEM)"
    )
    teller_base_url: str = Field(default="https://api.teller.io")

    # ============================================
    # GoCardless Configuration
    # ============================================

    gocardless_secret_id: str = Field(default="", description="GoCardless secret id")
    gocardless_secret_key: str = Field(default="", description="GoCardless secret key")
    gocardless_base_url: str = Field(default="https://bankaccountdata.gocardless.com/api/v2")

    # ============================================
    # Stripe Configuration
    # ============================================

    stripe_secret_key: str = Field(default="", description="Stripe secret API key")
    stripe_api_version: str = Field(default="2024-06-20", description="Stripe-Version header")
    stripe_base_url: str = Field(default="https://api.stripe.com/v1")

    # ============================================
    # Pydantic Settings Configuration
    # ============================================

    model_config = SettingsConfigDict(
        # Look for .env file in the project root
        env_file=".env",
        # Ignore extra fields in .env that aren't defined here
        extra="ignore",
        # Case-insensitive environment variable matching
        case_sensitive=False
    )

    # ============================================
    # Custom Validators and Properties
    # ============================================

    @field_validator("provider")
    @classmethod
    def normalize_provider(cls, v: Optional[str]) -> Optional[str]:
        """Lower-case the discriminant; blank means no provider selected."""
        if v is None:
            return None
        v = v.strip().lower()
        return v or None

    @field_validator("retry_backoff")
    @classmethod
    def validate_backoff(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in RETRY_BACKOFF_STRATEGIES:
            raise ValueError(
                f"Invalid RETRY_BACKOFF: '{v}'. Must be one of: {', '.join(RETRY_BACKOFF_STRATEGIES)}"
            )
        return v

    @field_validator("retry_max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        if v < 1:
            raise ValueError("RETRY_MAX_ATTEMPTS must be at least 1")
        return v

    @property
    def resolved_plaid_base_url(self) -> str:
        """
        Plaid base URL for the configured environment.

        Example:
            >>> Settings(plaid_environment="production").resolved_plaid_base_url
            'https://production.plaid.com'
        """
        if self.plaid_base_url:
            return self.plaid_base_url
        return PLAID_ENVIRONMENTS.get(self.plaid_environment.lower(), PLAID_ENVIRONMENTS["sandbox"])


# ============================================
# Global Settings Instance
# ============================================

# Loaded once and reused
settings = Settings()


# ============================================
# Configuration Validation
# ============================================

def validate_configuration(config: Optional[Settings] = None) -> None:
    """
    Validate configuration settings on application startup.

    Raises:
        ValueError: If a setting is out of range

    Credentials are not checked here; the selected provider checks its own
    when it is constructed.
    """
    # Import logger here to avoid circular import
    # (logging.py imports config.py, so we can't import at module level)
    from core.logging import logger

    config = config or settings

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        raise ValueError(
            f"Invalid LOG_LEVEL: '{config.log_level}'. "
            f"Must be one of: {', '.join(valid_log_levels)}"
        )

    if config.plaid_environment.lower() not in PLAID_ENVIRONMENTS:
        raise ValueError(
            f"Invalid PLAID_ENVIRONMENT: '{config.plaid_environment}'. "
            f"Must be one of: {', '.join(PLAID_ENVIRONMENTS)}"
        )

    if config.request_timeout <= 0 or config.health_check_timeout <= 0:
        raise ValueError("REQUEST_TIMEOUT and HEALTH_CHECK_TIMEOUT must be positive")

    if config.retry_base_delay < 0 or config.retry_max_delay < config.retry_base_delay:
        raise ValueError("RETRY_BASE_DELAY must be >= 0 and <= RETRY_MAX_DELAY")

    logger.info("Configuration validated successfully")
    logger.info(f"Provider: {config.provider or 'none (degraded)'}")
    logger.info(f"Retry: {config.retry_max_attempts} attempts, {config.retry_backoff} backoff")
    logger.info(f"Log level: {config.log_level.upper()}")
