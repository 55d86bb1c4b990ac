"""
Stripe REST API Client

Async client for the Stripe REST API (https://api.stripe.com/v1).

Authentication:
    - Authorization: Bearer <secret key>
    - Stripe-Version: pinned API version
    - Stripe-Account: connected account the call acts on (per call)

Endpoints Used:
    GET    /balance_transactions                               - Balance transactions
    GET    /balance                                            - Account balance (also the health ping)
    GET    /accounts/{account}/external_accounts               - Bank accounts
    GET    /accounts/{account}/external_accounts/{bank}        - One bank account
    POST   /accounts/{account}/external_accounts                - Attach a bank account
    POST   /accounts/{account}/external_accounts/{bank}        - Update a bank account
    DELETE /accounts/{account}/external_accounts/{bank}        - Remove a bank account
    GET    /accounts/{account}                                 - Connected (business) account
    DELETE /accounts/{account}                                 - Remove a connected account

Usage:
    async with StripeAPIClient(base_url, secret_key, api_version) as client:
        page, has_more = await client.list_balance_transactions("acct_123", limit=100)
"""

from typing import Any, Dict, List, Optional, Tuple, Union

from providers.base_client import BaseAPIClient
from .schemas import (
    StripeAccount,
    StripeBalance,
    StripeBalanceTransaction,
    StripeBalanceTransactionList,
    StripeBankAccount,
    StripeBankAccountList,
    StripeDeleted,
)


MAX_PAGE_SIZE = 100


def encode_form(data: Dict[str, Any], prefix: Optional[str] = None) -> List[Tuple[str, str]]:
    """
    Flatten a nested mapping into Stripe's bracketed form fields.

    Example:
        >>> encode_form({"external_account": {"country": "US", "default_for_currency": True}})
        [('external_account[country]', 'US'), ('external_account[default_for_currency]', 'true')]
    """
    fields: List[Tuple[str, str]] = []
    for key, value in data.items():
        name = f"{prefix}[{key}]" if prefix else key
        if value is None:
            continue
        if isinstance(value, dict):
            fields.extend(encode_form(value, name))
        elif isinstance(value, (list, tuple)):
            fields.extend((f"{name}[]", str(item)) for item in value)
        elif isinstance(value, bool):
            fields.append((name, "true" if value else "false"))
        else:
            fields.append((name, str(value)))
    return fields


class StripeAPIClient(BaseAPIClient):
    """
    Async HTTP client for the Stripe API

    Example:
        >>> async with StripeAPIClient("https://api.stripe.com/v1", "sk_test_...", "2024-06-20") as client:
        ...     balance = await client.get_balance("acct_123")
    """

    provider = "stripe"

    def __init__(self, base_url: str, secret_key: str, api_version: str, timeout: float = 30):
        super().__init__(base_url, timeout=timeout)
        self._secret_key = secret_key
        self.api_version = api_version

    def _headers(self) -> Dict[str, str]:
        return {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._secret_key}",
            "Stripe-Version": self.api_version,
        }

    @staticmethod
    def _on_behalf_of(account_id: Optional[str]) -> Optional[Dict[str, str]]:
        return {"Stripe-Account": account_id} if account_id else None

    # ============================================
    # Balance Transactions
    # ============================================

    async def list_balance_transactions(
        self,
        account_id: str,
        limit: int = MAX_PAGE_SIZE,
        starting_after: Optional[str] = None,
        ending_before: Optional[str] = None,
        currency: Optional[str] = None,
        type: Optional[str] = None,
        expand: Optional[List[str]] = None
    ) -> Tuple[List[StripeBalanceTransaction], bool]:
        """
        Fetch one page of balance transactions for a connected account.

        Returns:
            (transactions, has_more)

        Stripe Endpoint:
            GET /v1/balance_transactions (Stripe-Account: account_id)
        """
        params: List[Tuple[str, str]] = [("limit", str(limit))]
        if starting_after:
            params.append(("starting_after", starting_after))
        if ending_before:
            params.append(("ending_before", ending_before))
        if currency:
            params.append(("currency", currency.lower()))
        if type:
            params.append(("type", type))
        for field in expand or []:
            params.append(("expand[]", field))

        data = await self._get(
            "/balance_transactions",
            params=params,
            headers=self._on_behalf_of(account_id)
        )
        page = self._parse(StripeBalanceTransactionList, data, "balance_transactions")
        return page.data, page.has_more

    # ============================================
    # Balance
    # ============================================

    async def get_balance(self, account_id: Optional[str] = None) -> StripeBalance:
        """GET /v1/balance, for the platform account when account_id is None."""
        data = await self._get("/balance", headers=self._on_behalf_of(account_id))
        return self._parse(StripeBalance, data, "balance")

    # ============================================
    # Bank Accounts
    # ============================================

    async def get_bank_account(self, account_id: str, bank_account_id: str) -> StripeBankAccount:
        data = await self._get(f"/accounts/{account_id}/external_accounts/{bank_account_id}")
        return self._parse(StripeBankAccount, data, "bank_account")

    async def list_bank_accounts(self, account_id: str, limit: int = 10) -> List[StripeBankAccount]:
        data = await self._get(
            f"/accounts/{account_id}/external_accounts",
            params={"object": "bank_account", "limit": str(limit)}
        )
        return self._parse(StripeBankAccountList, data, "external_accounts").data

    async def create_bank_account(
        self,
        account_id: str,
        bank_account: Union[str, Dict[str, Any]]
    ) -> StripeBankAccount:
        """
        Attach a bank account to a connected account.

        Args:
            account_id: Connected account id
            bank_account: Bank account token (btok_...) or bank account fields
                (country, currency, account_number, routing_number, ...)
        """
        if isinstance(bank_account, dict):
            form = encode_form({"external_account": {"object": "bank_account", **bank_account}})
        else:
            form = [("external_account", bank_account)]
        data = await self._post_form(f"/accounts/{account_id}/external_accounts", form)
        return self._parse(StripeBankAccount, data, "create_bank_account")

    async def update_bank_account(
        self,
        account_id: str,
        bank_account_id: str,
        update: Dict[str, Any]
    ) -> StripeBankAccount:
        data = await self._post_form(
            f"/accounts/{account_id}/external_accounts/{bank_account_id}",
            encode_form(update)
        )
        return self._parse(StripeBankAccount, data, "update_bank_account")

    async def delete_bank_account(self, account_id: str, bank_account_id: str) -> StripeDeleted:
        data = await self._delete(f"/accounts/{account_id}/external_accounts/{bank_account_id}")
        return self._parse(StripeDeleted, data, "delete_bank_account")

    # ============================================
    # Connected Accounts
    # ============================================

    async def get_account(self, account_id: str, expand: Optional[List[str]] = None) -> StripeAccount:
        params = [("expand[]", field) for field in expand or []]
        data = await self._get(f"/accounts/{account_id}", params=params or None)
        return self._parse(StripeAccount, data, "account")

    async def delete_account(self, account_id: str) -> StripeDeleted:
        data = await self._delete(f"/accounts/{account_id}")
        return self._parse(StripeDeleted, data, "delete_account")
