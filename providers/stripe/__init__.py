"""
Stripe Provider Adapter

Implements ProviderInterface for Stripe (the payment-processor variant).

Stripe models a connected account with attached bank accounts rather than a
set of bank accounts behind a user credential, so:
    - get_accounts returns exactly one account (the requested bank account)
    - get_institutions is a capability gap (UnsupportedOperation)
    - delete_accounts removes the connected account

Extra operations (reachable through ProviderGateway.call):
    - list_bank_accounts(account_id, limit)
    - get_bank_account(account_id, bank_account_id)
    - create_bank_account(account_id, bank_account)
    - update_bank_account(account_id, bank_account_id, update)
    - delete_bank_account(account_id, bank_account_id)
    - get_business_account(account_id, expand) -> raw StripeAccount

Account-link (hosted onboarding) creation is not offered; onboarding and
consent flows stay with the caller.

Structure:
    providers/stripe/
    ├── __init__.py          # This file (StripeProvider class)
    ├── api_client.py        # REST API client with aiohttp
    ├── schemas.py           # Raw Stripe response models
    └── transform.py         # Raw -> canonical
"""

from typing import Any, Dict, List, Optional, Union

from core.errors import UpstreamContractError, ValidationError
from core.pagination import walk_cursor_pages
from core.provider_interface import ProviderInterface
from core.schemas import (
    Account,
    Balance,
    DeleteAccountsRequest,
    GetAccountBalanceRequest,
    GetAccountsRequest,
    GetTransactionsRequest,
    Transaction,
)
from .api_client import MAX_PAGE_SIZE, StripeAPIClient
from .schemas import StripeAccount
from .transform import transform_balance, transform_bank_account, transform_transaction


class StripeProvider(ProviderInterface):
    """
    Stripe Provider Adapter

    Attributes:
        name: Provider tag ("stripe")
        capabilities: Institutions are not supported

    Example:
        >>> provider = StripeProvider(settings)
        >>> txns = await provider.get_transactions(GetTransactionsRequest(customer_id="acct_123"))
    """

    name = "stripe"

    capabilities = {
        "transactions": True,
        "accounts": True,
        "balance": True,
        "institutions": False,  # No institution concept on a payment processor
        "delete": True
    }

    required_settings = ("stripe_secret_key",)

    def _api(self) -> StripeAPIClient:
        return StripeAPIClient(
            self.settings.stripe_base_url,
            self.settings.stripe_secret_key,
            self.settings.stripe_api_version,
            timeout=self.settings.request_timeout,
        )

    # ============================================
    # Data Operations
    # ============================================

    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        """
        Fetch balance transactions of a connected account.

        Pagination:
            - limit given, latest set, or ending_before given: one page
            - otherwise every page is walked with starting_after
        """
        request = self._validate_request(GetTransactionsRequest, request, "customer_id")
        if request.limit is not None and not 1 <= request.limit <= MAX_PAGE_SIZE:
            raise ValidationError(
                f"limit must be between 1 and {MAX_PAGE_SIZE}",
                fields=["limit"],
                provider=self.name
            )

        async with self._api() as api:

            async def fetch_page(cursor: Optional[str], limit: int = MAX_PAGE_SIZE):
                items, has_more = await api.list_balance_transactions(
                    request.customer_id,
                    limit=limit,
                    starting_after=cursor,
                    ending_before=request.ending_before,
                    currency=request.currency,
                    type=request.type,
                    expand=request.expand,
                )
                next_cursor = items[-1].id if items else None
                return items, next_cursor, has_more

            if request.limit is not None or request.latest or request.ending_before:
                raw, _, _ = await fetch_page(request.starting_after, request.limit or MAX_PAGE_SIZE)
            else:
                raw = await walk_cursor_pages(fetch_page, request.starting_after)

        return [self._transform(transform_transaction, item) for item in raw]

    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        request = self._validate_request(GetAccountsRequest, request, "customer_id", "bank_account_id")

        async with self._api() as api:
            bank_account = await api.get_bank_account(request.customer_id, request.bank_account_id)

        return [self._transform(transform_bank_account, bank_account)]

    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        """
        Balance of the connected account owning the bank account.

        The bank account is fetched first so that a wrong pair of ids fails
        with the upstream 404 instead of returning some other balance.
        """
        request = self._validate_request(GetAccountBalanceRequest, request, "account_id", "bank_account_id")

        async with self._api() as api:
            await api.get_bank_account(request.account_id, request.bank_account_id)
            balance = await api.get_balance(request.account_id)

        return self._transform(transform_balance, balance)

    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        request = self._validate_request(DeleteAccountsRequest, request, "account_id")

        async with self._api() as api:
            result = await api.delete_account(request.account_id)

        if not result.deleted:
            raise UpstreamContractError(
                f"Stripe did not confirm deletion of {request.account_id}",
                provider=self.name
            )
        self.logger.info("Stripe connected account deleted")

    # ============================================
    # Bank Account Management
    # ============================================

    async def list_bank_accounts(self, account_id: Optional[str] = None, limit: int = 10) -> List[Account]:
        """List bank accounts attached to a connected account as canonical accounts."""
        self._require(account_id=account_id)
        if not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}", fields=["limit"], provider=self.name)

        async with self._api() as api:
            bank_accounts = await api.list_bank_accounts(account_id, limit=limit)

        return [self._transform(transform_bank_account, item) for item in bank_accounts]

    async def get_bank_account(
        self,
        account_id: Optional[str] = None,
        bank_account_id: Optional[str] = None
    ) -> Account:
        self._require(account_id=account_id, bank_account_id=bank_account_id)

        async with self._api() as api:
            bank_account = await api.get_bank_account(account_id, bank_account_id)

        return self._transform(transform_bank_account, bank_account)

    async def create_bank_account(
        self,
        account_id: Optional[str] = None,
        bank_account: Union[str, Dict[str, Any], None] = None
    ) -> Account:
        """
        Attach a bank account to a connected account.

        Args:
            account_id: Connected account id
            bank_account: Bank account token, or the raw fields Stripe accepts
                for an external bank account (country, currency,
                account_number, routing_number, account_holder_name, ...)
        """
        self._require(account_id=account_id, bank_account=bank_account)

        async with self._api() as api:
            created = await api.create_bank_account(account_id, bank_account)

        self.logger.info("Stripe bank account attached")
        return self._transform(transform_bank_account, created)

    async def update_bank_account(
        self,
        account_id: Optional[str] = None,
        bank_account_id: Optional[str] = None,
        update: Optional[Dict[str, Any]] = None
    ) -> Account:
        """Update holder details, default_for_currency or metadata of a bank account."""
        self._require(account_id=account_id, bank_account_id=bank_account_id, update=update)

        async with self._api() as api:
            updated = await api.update_bank_account(account_id, bank_account_id, update)

        return self._transform(transform_bank_account, updated)

    async def delete_bank_account(
        self,
        account_id: Optional[str] = None,
        bank_account_id: Optional[str] = None
    ) -> bool:
        self._require(account_id=account_id, bank_account_id=bank_account_id)

        async with self._api() as api:
            result = await api.delete_bank_account(account_id, bank_account_id)

        return result.deleted

    # ============================================
    # Connected Accounts
    # ============================================

    async def get_business_account(
        self,
        account_id: Optional[str] = None,
        expand: Optional[List[str]] = None
    ) -> StripeAccount:
        """
        Connected (business) account details as Stripe returns them.

        There is no canonical shape for a business profile, so the raw
        validated model is returned.
        """
        self._require(account_id=account_id)

        async with self._api() as api:
            return await api.get_account(account_id, expand=expand)

    def _require(self, **values: Any) -> None:
        missing = [name for name, value in values.items() if not value]
        if missing:
            raise ValidationError(
                f"Missing required field(s): {', '.join(missing)}",
                fields=missing,
                provider=self.name
            )

    # ============================================
    # Health Check
    # ============================================

    async def _ping(self) -> None:
        async with self._api() as api:
            await api.get_balance()
