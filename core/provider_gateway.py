"""
Provider Gateway - Single Entry Point for Financial Data

The gateway holds exactly one active provider adapter, chosen once at
construction from the PROVIDER discriminant, and routes every data operation
through the retry policy.

Degraded Mode:
    An unknown or missing discriminant leaves the gateway without an adapter.
    This is a named state (`is_degraded`), not an error:
        get_transactions     -> []
        get_accounts         -> []
        get_account_balance  -> None
        get_institutions     -> []
        delete_accounts      -> no-op

Health Check:
    get_health_check() ignores the active selection. It builds every
    registered adapter and probes them concurrently, waiting for all of them.
    Per-provider failures become False; only a failure of the fan-out itself
    raises (InternalError).

Example Usage:
    gateway = ProviderGateway("stripe")
    txns = await gateway.get_transactions(GetTransactionsRequest(customer_id="acct_123"))

    health = await gateway.get_health_check()
    health.to_response()   # {"plaid": {"healthy": True}, ...}
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from core.config import Settings, settings as default_settings
from core.errors import InternalError, UnsupportedOperation
from core.logging import logger, log_provider_call
from core.provider_interface import ProviderInterface
from core.retry import RetryPolicy
from core.schemas import (
    Account,
    Balance,
    DeleteAccountsRequest,
    GetAccountBalanceRequest,
    GetAccountsRequest,
    GetInstitutionsRequest,
    GetTransactionsRequest,
    HealthCheckResult,
    Institution,
    Transaction,
)


def _registry() -> Dict[str, Type[ProviderInterface]]:
    # Import here to avoid circular imports
    # (every provider module imports from core)
    from providers import PROVIDER_REGISTRY
    return PROVIDER_REGISTRY


class ProviderGateway:
    """
    Facade over the selected provider adapter

    Attributes:
        provider: Active adapter, None in degraded mode
        settings: Settings used to build adapters
        retry_policy: Policy wrapping every data operation

    Example:
        >>> gateway = ProviderGateway("teller")
        >>> accounts = await gateway.get_accounts({"access_token": "token_..."})
        >>>
        >>> ProviderGateway("unknown").is_degraded
        True

    Notes:
        - Credentials of the selected provider are checked here, so a
          misconfigured deployment fails at startup (ConfigurationError)
        - Errors from data operations are never swallowed
    """

    def __init__(
        self,
        provider: Optional[str] = None,
        config: Optional[Settings] = None,
        retry_policy: Optional[RetryPolicy] = None
    ):
        self.settings = config or default_settings
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)

        name = provider if provider is not None else self.settings.provider
        self.provider: Optional[ProviderInterface] = None

        provider_class = _registry().get((name or "").strip().lower())
        if provider_class is None:
            logger.warning(f"No provider selected (discriminant={name!r}), gateway running degraded")
        else:
            self.provider = provider_class(self.settings)
            logger.info(f"Gateway using provider: {self.provider.name}")

    # ============================================
    # Introspection
    # ============================================

    @property
    def is_degraded(self) -> bool:
        return self.provider is None

    @property
    def provider_name(self) -> Optional[str]:
        return self.provider.name if self.provider else None

    @staticmethod
    def list_providers() -> List[str]:
        """
        Example:
            >>> ProviderGateway.list_providers()
            ['plaid', 'teller', 'gocardless', 'stripe']
        """
        return list(_registry().keys())

    # ============================================
    # Data Operations
    # ============================================

    async def _run(self, capability: str, operation: str, method: str, request: Any, empty: Any) -> Any:
        if self.provider is None:
            log_provider_call("none", operation, "degraded")
            return await self.retry_policy.execute(None, empty=empty, name=operation)

        if not self.provider.supports(capability):
            log_provider_call(self.provider.name, operation, "error", "unsupported")
            raise UnsupportedOperation(
                f"{operation} is not supported by {self.provider.name}",
                provider=self.provider.name
            )

        bound = getattr(self.provider, method)
        try:
            result = await self.retry_policy.execute(lambda: bound(request), empty=empty, name=operation)
        except Exception as e:
            log_provider_call(self.provider.name, operation, "error", type(e).__name__)
            raise

        if isinstance(result, list):
            log_provider_call(self.provider.name, operation, "ok", f"{len(result)} items")
        else:
            log_provider_call(self.provider.name, operation, "ok")
        return result

    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        return await self._run("transactions", "get_transactions", "get_transactions", request, [])

    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        return await self._run("accounts", "get_accounts", "get_accounts", request, [])

    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        return await self._run("balance", "get_account_balance", "get_account_balance", request, None)

    async def get_institutions(self, request: GetInstitutionsRequest) -> List[Institution]:
        return await self._run("institutions", "get_institutions", "get_institutions", request, [])

    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        await self._run("delete", "delete_accounts", "delete_accounts", request, None)

    async def call(self, method: str, *args, **kwargs) -> Any:
        """
        Invoke a provider-specific operation under the retry policy.

        Example:
            >>> await gateway.call("list_bank_accounts", account_id="acct_123", limit=10)

        Raises:
            UnsupportedOperation: Degraded mode, or the provider has no such operation
        """
        if self.provider is None:
            raise UnsupportedOperation(f"{method} requires an active provider")

        operation: Optional[Callable[..., Awaitable[Any]]] = None
        if not method.startswith("_"):
            operation = getattr(self.provider, method, None)
        if operation is None or not callable(operation):
            raise UnsupportedOperation(
                f"{method} is not supported by {self.provider.name}",
                provider=self.provider.name
            )

        result = await self.retry_policy.execute(lambda: operation(*args, **kwargs), name=method)
        log_provider_call(self.provider.name, method, "ok")
        return result

    # ============================================
    # Health Check
    # ============================================

    async def _probe(self, name: str, provider_class: Type[ProviderInterface]) -> bool:
        try:
            provider = provider_class(self.settings)
        except Exception as e:
            logger.warning(f"Health check: cannot build {name}: {e}")
            return False

        try:
            return await provider.health_check()
        except Exception as e:
            logger.error(f"Health check failed for {name}: {e}")
            return False

    async def get_health_check(self) -> HealthCheckResult:
        """
        Probe every registered provider concurrently.

        Returns:
            HealthCheckResult with one entry per registered provider

        Raises:
            InternalError: The concurrent fan-out itself failed
        """
        registry = _registry()
        logger.debug("Running health check on all providers...")

        try:
            results = await asyncio.gather(
                *(self._probe(name, provider_class) for name, provider_class in registry.items())
            )
        except Exception as e:
            logger.error(f"Health check fan-out failed: {e}")
            raise InternalError("Something went wrong") from e

        health = HealthCheckResult(providers=dict(zip(registry.keys(), results)))
        for name, healthy in health.providers.items():
            logger.debug(f"{name}: {'healthy' if healthy else 'unhealthy'}")
        return health

    # ============================================
    # Utility Methods
    # ============================================

    def __repr__(self) -> str:
        return f"<ProviderGateway(provider={self.provider_name!r})>"


# ============================================
# Global Gateway Instance (Optional)
# ============================================

_gateway: Optional[ProviderGateway] = None


def get_gateway() -> ProviderGateway:
    """
    Get the global ProviderGateway built from settings (singleton pattern).

    Example:
        >>> from core.provider_gateway import get_gateway
        >>> gateway = get_gateway()
    """
    global _gateway
    if _gateway is None:
        _gateway = ProviderGateway()
        logger.debug("Created global ProviderGateway instance")
    return _gateway
