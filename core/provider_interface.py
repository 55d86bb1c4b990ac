"""
Provider Interface - Abstract Contract for All Financial Data Providers

This module defines the abstract base class that every provider adapter must
implement. The gateway works with ProviderInterface only, never with a
concrete provider, so adding a provider is one new subclass plus one registry
entry in providers/__init__.py.

Contract (five data operations plus a health probe):
    - get_transactions(request)    -> List[Transaction]
    - get_accounts(request)        -> List[Account]
    - get_account_balance(request) -> Optional[Balance]
    - get_institutions(request)    -> List[Institution]
    - delete_accounts(request)     -> None
    - health_check()               -> bool (never raises)

Capabilities System:
    Each provider declares which operations it supports via `capabilities`.
    An unsupported operation raises UnsupportedOperation, which is a declared
    gap and never retried.

    Example:
        capabilities = {
            "transactions": True,
            "accounts": True,
            "balance": True,
            "institutions": False,  # Payment processors have no institutions
            "delete": True
        }

Validation:
    Every adapter checks its required request fields before any network call
    (ValidationError naming the fields) and validates raw responses against
    pydantic models before transforming them (UpstreamContractError).
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings, settings as default_settings
from core.errors import ConfigurationError, UnsupportedOperation, UpstreamContractError, ValidationError
from core.logging import get_logger
from core.schemas import (
    Account,
    Balance,
    DeleteAccountsRequest,
    GetAccountBalanceRequest,
    GetAccountsRequest,
    GetInstitutionsRequest,
    GetTransactionsRequest,
    Institution,
    Transaction,
)


RequestT = TypeVar("RequestT", bound=BaseModel)
T = TypeVar("T")

OPERATIONS = ("transactions", "accounts", "balance", "institutions", "delete")


class ProviderInterface(ABC):
    """
    Abstract Base Class for Provider Adapters

    Class Attributes:
        name: Unique provider tag (lowercase, e.g., "plaid", "stripe")
        capabilities: Which of the five data operations this provider supports
        required_settings: Settings fields that must be non-empty for construction

    Construction:
        Adapters receive a Settings instance (the global one by default) and
        check their credentials immediately, so a misconfigured provider
        fails at construction instead of on first use.

    Example Implementation:
        >>> class TellerProvider(ProviderInterface):
        ...     name = "teller"
        ...     required_settings = ("teller_certificate_path", "teller_certificate_private_key_path")
        ...
        ...     async def get_accounts(self, request):
        ...         request = self._validate_request(GetAccountsRequest, request, "access_token")
        ...         ...
    """

    # ============================================
    # Class Attributes (must be set by subclasses)
    # ============================================

    name: str
    """Unique provider tag (lowercase). Example: "plaid", "teller" """

    capabilities: Dict[str, bool] = {
        "transactions": True,
        "accounts": True,
        "balance": True,
        "institutions": True,
        "delete": True
    }

    required_settings: Tuple[str, ...] = ()
    """Names of Settings fields holding this provider's credentials"""

    def __init__(self, config: Optional[Settings] = None):
        self.settings = config or default_settings
        self.logger = get_logger(f"providers.{self.name}")
        self._check_credentials()

    # ============================================
    # Data Operations
    # ============================================

    @abstractmethod
    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        """
        Fetch transactions for one account or customer.

        Cursor-paginated providers walk every page when no explicit limit is
        given, in fetch order. Zero transactions is an empty list, not an error.

        Raises:
            ValidationError: Required request fields are missing
            UpstreamError: Provider rejected or failed the request
            UpstreamContractError: Provider payload did not match its schema
        """
        pass

    @abstractmethod
    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        """Return all accounts visible under the credential or customer scope."""
        pass

    @abstractmethod
    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        """Current balance, or None when the account has no queryable balance."""
        pass

    async def get_institutions(self, request: GetInstitutionsRequest) -> List[Institution]:
        """
        List institutions reachable through this provider.

        Default implementation is the capability gap: providers with an
        institution concept override it.

        Raises:
            UnsupportedOperation: Always, unless overridden
        """
        raise UnsupportedOperation(
            f"{self.name} has no institution concept",
            provider=self.name
        )

    @abstractmethod
    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        """Best-effort deregistration; returns once the provider acknowledged it."""
        pass

    # ============================================
    # Health Check
    # ============================================

    @abstractmethod
    async def _ping(self) -> Any:
        """Cheapest authenticated call the provider offers. May raise."""
        pass

    async def health_check(self) -> bool:
        """
        Check that the provider credential and connectivity are valid.

        Returns:
            bool: True if the ping succeeded within health_check_timeout

        Notes:
            - Never raises; every failure is logged and converted to False
        """
        try:
            await asyncio.wait_for(self._ping(), timeout=self.settings.health_check_timeout)
            return True
        except asyncio.TimeoutError:
            self.logger.warning(f"{self.name} health check timed out")
            return False
        except Exception as e:
            self.logger.warning(f"{self.name} health check failed: {e}")
            return False

    # ============================================
    # Helper Methods
    # ============================================

    def supports(self, operation: str) -> bool:
        """
        Check if this provider supports a data operation.

        Example:
            >>> StripeProvider(config).supports("institutions")
            False
        """
        return self.capabilities.get(operation, False)

    def _check_credentials(self) -> None:
        missing = [field for field in self.required_settings if not getattr(self.settings, field, None)]
        if missing:
            env_names = ", ".join(field.upper() for field in missing)
            raise ConfigurationError(f"Missing credentials: {env_names}", provider=self.name)

    def _validate_request(
        self,
        model: Type[RequestT],
        request: Union[RequestT, Dict[str, Any], None],
        *required: str
    ) -> RequestT:
        """
        Coerce `request` into `model` and check the required fields.

        Args:
            model: Request model class
            request: Model instance or plain dict
            required: Field names that must be present and non-empty

        Raises:
            ValidationError: Listing every offending field
        """
        if request is None:
            request = {}
        if not isinstance(request, model):
            data = request.model_dump() if isinstance(request, BaseModel) else request
            try:
                request = model.model_validate(data)
            except PydanticValidationError as e:
                fields = [".".join(str(part) for part in err["loc"]) for err in e.errors()]
                raise ValidationError(
                    f"Invalid request: {', '.join(fields)}",
                    fields=fields,
                    provider=self.name
                ) from e

        missing = _missing_fields(request, required)
        if missing:
            raise ValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                fields=missing,
                provider=self.name
            )
        return request

    def _transform(self, transform: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """
        Run a transform function on validated raw data.

        A raw value can pass its response model and still be unusable
        (an amount of "n/a", a date of "yesterday", a 4-letter currency).
        Those failures surface as UpstreamContractError like any other
        contract break.

        Example:
            >>> txns = [self._transform(transform_transaction, item) for item in raw]
        """
        try:
            return transform(*args, **kwargs)
        except (PydanticValidationError, ValueError, ArithmeticError) as e:
            self.logger.error(f"{self.name} {transform.__name__} rejected upstream data: {e}")
            raise UpstreamContractError(
                f"Malformed {self.name} data in {transform.__name__}: {e}",
                provider=self.name
            ) from e

    def __repr__(self) -> str:
        """String representation of the provider."""
        return f"<{self.__class__.__name__}(name='{self.name}')>"


def _missing_fields(request: BaseModel, required: Iterable[str]) -> List[str]:
    missing = []
    for field in required:
        value = getattr(request, field, None)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing
