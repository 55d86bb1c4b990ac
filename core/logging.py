"""
Unified Logging Configuration

This module sets up a centralized logging system for the gateway.
All modules should import and use the logger from this module instead of
using print() statements.

Usage:
    from core.logging import logger

    logger.debug("Detailed debugging information")
    logger.info("General informational messages")
    logger.warning("Warning messages for potentially harmful situations")
    logger.error("Error messages for serious problems")

Log Levels used by the gateway:
    DEBUG    - Upstream request/response lines (never bodies or credentials)
    INFO     - Gateway construction, provider calls
    WARNING  - Retry attempts, degraded mode, failed health probes
    ERROR    - Upstream failures that reach the caller

Configuration:
    Log level is controlled by the LOG_LEVEL setting in .env file.
"""

import logging
import sys
from typing import Optional

from core.config import settings


LOGGER_NAME = "fingateway"


def setup_logging(
    log_level: str = "INFO",
    log_format: Optional[str] = None,
    include_timestamp: bool = True,
    include_module: bool = True
) -> logging.Logger:
    """
    Configure and return the gateway logger.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Custom log format string (uses default if None)
        include_timestamp: Include timestamp in log messages
        include_module: Include logger name in log messages

    Returns:
        logging.Logger: Configured logger instance

    Example:
        >>> logger = setup_logging(log_level="DEBUG")
        >>> logger.info("Gateway ready")
        2024-01-01 12:00:00 [INFO] fingateway Gateway ready
    """
    if log_format is None:
        format_parts = []

        if include_timestamp:
            format_parts.append("%(asctime)s")

        format_parts.append("[%(levelname)s]")

        if include_module:
            format_parts.append("%(name)s")

        format_parts.append("%(message)s")

        log_format = " ".join(format_parts)

    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format=log_format,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    return logger


# ============================================
# Initialize Logger with Settings
# ============================================

logger = setup_logging(log_level=settings.log_level)


# ============================================
# Convenience Functions
# ============================================

def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger for a specific module.

    Args:
        name: Name for the logger (typically __name__)

    Returns:
        logging.Logger: Logger instance named "fingateway.<name>"

    Example:
        # In providers/stripe/api_client.py:
        from core.logging import get_logger
        logger = get_logger(__name__)  # "fingateway.providers.stripe.api_client"
    """
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def set_log_level(level: str) -> None:
    """
    Change the log level at runtime.

    Example:
        >>> set_log_level("DEBUG")
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger().setLevel(getattr(logging, level.upper(), logging.INFO))


# ============================================
# Log Helper Functions
# ============================================

def log_api_request(provider: str, method: str, endpoint: str, params: dict = None) -> None:
    """
    Log an upstream API request with consistent formatting.

    Only parameter names are logged; values can carry tokens or account ids.

    Example:
        >>> log_api_request("stripe", "GET", "/balance_transactions", {"limit": 100})
        [DEBUG] API Request: stripe GET /balance_transactions | Params: ['limit']
    """
    if params:
        logger.debug(f"API Request: {provider} {method} {endpoint} | Params: {sorted(dict(params))}")
    else:
        logger.debug(f"API Request: {provider} {method} {endpoint}")


def log_api_response(provider: str, endpoint: str, status: int, response_time: float = None) -> None:
    """
    Log an upstream API response with status and timing information.

    Example:
        >>> log_api_response("plaid", "/accounts/get", 200, 0.342)
        [DEBUG] API Response: plaid /accounts/get | Status: 200 | Time: 0.342s
    """
    time_str = f" | Time: {response_time:.3f}s" if response_time else ""
    logger.debug(f"API Response: {provider} {endpoint} | Status: {status}{time_str}")


def log_provider_call(provider: str, operation: str, outcome: str, details: str = None) -> None:
    """
    Log a gateway operation against a provider.

    Args:
        provider: Provider tag
        operation: Gateway operation (e.g., "get_transactions")
        outcome: "ok", "empty", "degraded" or "error"
        details: Additional details (optional)

    Example:
        >>> log_provider_call("teller", "get_accounts", "ok", "3 items")
        [INFO] Provider: teller get_accounts ok | 3 items
    """
    details_str = f" | {details}" if details else ""

    level = logging.ERROR if outcome == "error" else logging.WARNING if outcome == "degraded" else logging.INFO
    logger.log(level, f"Provider: {provider} {operation} {outcome}{details_str}")


logger.debug("Logging system initialized")
