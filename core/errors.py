"""
Gateway Error Taxonomy

Every failure that leaves the gateway is one of the classes below. The split
matters to callers: the route layer maps each class to a status code through
`http_status` without having to look at messages or provider payloads.

Hierarchy:
    GatewayError
    ├── ValidationError           caller input is invalid (never retried)
    ├── ConfigurationError        credentials missing/malformed at construction
    ├── UnsupportedOperation      provider has no such capability (never retried)
    ├── UpstreamContractError     provider returned a shape we cannot parse
    ├── UpstreamError             HTTP-level failure talking to the provider
    │   ├── UpstreamClientError   4xx from the provider (never retried)
    │   └── TransientUpstreamError  network, 5xx, 408, 429 (retried)
    │       └── UpstreamTimeoutError  per-call timeout elapsed
    └── InternalError             orchestration failure inside the gateway

Only TransientUpstreamError (and its subclass) is retried by core.retry.
"""

from typing import List, Optional


class GatewayError(Exception):
    """
    Base class for all gateway errors.

    Attributes:
        message: Human readable description
        provider: Provider tag the error originated from (None for facade-level errors)
        http_status: Suggested status code for the boundary layer
    """

    http_status: int = 500

    def __init__(self, message: str, provider: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider

    def __str__(self) -> str:
        if self.provider:
            return f"[{self.provider}] {self.message}"
        return self.message


class ValidationError(GatewayError):
    """Caller supplied invalid or incomplete request parameters."""

    http_status = 400

    def __init__(self, message: str, fields: Optional[List[str]] = None, provider: Optional[str] = None):
        super().__init__(message, provider=provider)
        self.fields = list(fields or [])


class ConfigurationError(GatewayError):
    """Provider credentials are missing or malformed."""

    http_status = 500


class UnsupportedOperation(GatewayError):
    """The provider fundamentally cannot perform the requested operation."""

    http_status = 501


class UpstreamContractError(GatewayError):
    """The provider responded with a payload that does not match its declared schema."""

    http_status = 502


class UpstreamError(GatewayError):
    """
    HTTP-level failure while talking to a provider.

    Attributes:
        status_code: Upstream HTTP status (None for network failures)
    """

    http_status = 502

    def __init__(self, message: str, provider: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message, provider=provider)
        self.status_code = status_code


class UpstreamClientError(UpstreamError):
    """Provider rejected the request with a 4xx status."""


class TransientUpstreamError(UpstreamError):
    """Network failure or retryable upstream status (5xx, 408, 429)."""

    http_status = 503


class UpstreamTimeoutError(TransientUpstreamError):
    """The per-call timeout elapsed before the provider answered."""

    http_status = 504


class InternalError(GatewayError):
    """Failure inside the gateway itself (e.g. the health-check fan-out)."""

    http_status = 500
