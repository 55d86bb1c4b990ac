"""
Shared REST API Client

Base class for every provider's async HTTP client. It handles:
- aiohttp session lifecycle (async context manager)
- Per-call timeouts
- Status code classification into the gateway error taxonomy
- JSON decoding and response schema validation

Retries are not done here; core.retry wraps whole gateway operations.

Status classification:
    2xx             -> decoded JSON (204 -> None)
    408, 429, 5xx   -> TransientUpstreamError
    other 4xx       -> UpstreamClientError
    timeout         -> UpstreamTimeoutError
    network error   -> TransientUpstreamError
    undecodable     -> UpstreamContractError

Usage:
    class StripeAPIClient(BaseAPIClient):
        provider = "stripe"

    async with StripeAPIClient(base_url, timeout=30) as client:
        data = await client._request("GET", "/balance")
"""

import asyncio
import json
import ssl
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import aiohttp
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.errors import (
    TransientUpstreamError,
    UpstreamClientError,
    UpstreamContractError,
    UpstreamTimeoutError,
)
from core.logging import get_logger, log_api_request, log_api_response


ModelT = TypeVar("ModelT", bound=BaseModel)

# aiohttp accepts a mapping or a sequence of pairs (repeated keys such as expand[])
QueryParams = Union[Dict[str, Any], Sequence[Tuple[str, Any]]]

TRANSIENT_STATUSES = (408, 429)


def classify_status(status: int) -> Optional[Type[Exception]]:
    """
    Map an HTTP status to the error class it should raise (None for success).

    Examples:
        >>> classify_status(200) is None
        True
        >>> classify_status(503).__name__
        'TransientUpstreamError'
        >>> classify_status(404).__name__
        'UpstreamClientError'
    """
    if 200 <= status < 300:
        return None
    if status in TRANSIENT_STATUSES or status >= 500:
        return TransientUpstreamError
    return UpstreamClientError


class BaseAPIClient:
    """
    Async HTTP client base for provider REST APIs

    Attributes:
        provider: Provider tag used in logs and errors
        base_url: API base URL (no trailing slash)
        timeout: Per-call timeout in seconds
        session: aiohttp ClientSession, open inside `async with`

    Notes:
        - One session per gateway operation; nothing is shared across calls
        - Subclasses add auth through `_headers()` and `_auth()`
    """

    provider: str = "base"

    def __init__(self, base_url: str, timeout: float = 30, ssl_context: Optional[ssl.SSLContext] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.ssl_context = ssl_context
        self.logger = get_logger(f"providers.{self.provider}.api_client")
        self.session: Optional[aiohttp.ClientSession] = None

    # ============================================
    # Context Manager for Session Management
    # ============================================

    async def __aenter__(self):
        connector = aiohttp.TCPConnector(ssl=self.ssl_context) if self.ssl_context else None
        self.session = aiohttp.ClientSession(connector=connector)
        self.logger.debug(f"{self.__class__.__name__} session created")
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self.session:
            await self.session.close()
            self.session = None
            self.logger.debug(f"{self.__class__.__name__} session closed")

    # ============================================
    # Auth Hooks
    # ============================================

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json"}

    def _auth(self) -> Optional[aiohttp.BasicAuth]:
        return None

    # ============================================
    # HTTP Request Handler
    # ============================================

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[QueryParams] = None,
        json_body: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
        form: Optional[QueryParams] = None
    ) -> Any:
        """
        Make one HTTP request and return the decoded JSON body.

        Args:
            method: HTTP method
            path: Path relative to base_url (leading slash)
            params: Query parameters
            json_body: JSON request body
            headers: Extra headers for this call
            form: Form-encoded request body (Stripe write endpoints)

        Raises:
            TransientUpstreamError: Network failure, 408, 429 or 5xx
            UpstreamTimeoutError: Per-call timeout elapsed
            UpstreamClientError: Any other 4xx
            UpstreamContractError: 2xx body is not JSON
        """
        if not self.session:
            raise RuntimeError("Client session not initialized. Use 'async with' statement.")

        url = f"{self.base_url}{path}"
        request_headers = {**self._headers(), **(headers or {})}

        log_api_request(self.provider, method, path, params or json_body or form)
        started = time.monotonic()

        try:
            async with self.session.request(
                method,
                url,
                params=params,
                json=json_body,
                data=form,
                headers=request_headers,
                auth=self._auth(),
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            ) as resp:
                log_api_response(self.provider, path, resp.status, time.monotonic() - started)
                text = await resp.text()

                error_class = classify_status(resp.status)
                if error_class is not None:
                    self.logger.error(f"HTTP {resp.status} on {method} {path}")
                    raise error_class(
                        f"HTTP {resp.status} on {method} {path}: {_error_summary(text)}",
                        provider=self.provider,
                        status_code=resp.status
                    )

                if resp.status == 204 or not text:
                    return None

                try:
                    return json.loads(text)
                except ValueError as e:
                    raise UpstreamContractError(
                        f"Non-JSON response from {method} {path}",
                        provider=self.provider
                    ) from e

        except asyncio.TimeoutError as e:
            self.logger.error(f"Timeout on {method} {path} after {self.timeout}s")
            raise UpstreamTimeoutError(
                f"Timeout on {method} {path} after {self.timeout}s",
                provider=self.provider
            ) from e
        except aiohttp.ClientError as e:
            self.logger.error(f"Request failed on {method} {path}: {e}")
            raise TransientUpstreamError(
                f"Request failed on {method} {path}: {e}",
                provider=self.provider
            ) from e

    async def _get(self, path: str, params: Optional[QueryParams] = None, **kwargs) -> Any:
        return await self._request("GET", path, params=params, **kwargs)

    async def _post(self, path: str, json_body: Optional[Dict[str, Any]] = None, **kwargs) -> Any:
        return await self._request("POST", path, json_body=json_body, **kwargs)

    async def _post_form(self, path: str, form: QueryParams, **kwargs) -> Any:
        return await self._request("POST", path, form=form, **kwargs)

    async def _delete(self, path: str, **kwargs) -> Any:
        return await self._request("DELETE", path, **kwargs)

    # ============================================
    # Response Validation
    # ============================================

    def _parse(self, model: Type[ModelT], data: Any, operation: str) -> ModelT:
        """
        Validate a raw payload against its response model.

        Raises:
            UpstreamContractError: Payload does not match the model
        """
        try:
            return model.model_validate(data)
        except PydanticValidationError as e:
            raise UpstreamContractError(
                f"Unexpected {operation} response: {e.error_count()} validation error(s)",
                provider=self.provider
            ) from e

    def _parse_list(self, model: Type[ModelT], data: Any, operation: str) -> List[ModelT]:
        try:
            return TypeAdapter(List[model]).validate_python(data)
        except PydanticValidationError as e:
            raise UpstreamContractError(
                f"Unexpected {operation} response: {e.error_count()} validation error(s)",
                provider=self.provider
            ) from e


def _error_summary(text: str, limit: int = 200) -> str:
    """Short, single-line excerpt of an error body."""
    text = " ".join(text.split())
    return text[:limit] + ("..." if len(text) > limit else "")
