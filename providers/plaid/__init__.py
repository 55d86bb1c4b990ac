"""
Plaid Provider Adapter

Implements ProviderInterface for Plaid (aggregator, credential = item access token).

Pagination:
    - Transactions: /transactions/sync cursor (next_cursor + has_more)
    - Institutions: offset walk (count + offset against total)

Structure:
    providers/plaid/
    ├── __init__.py          # This file (PlaidProvider class)
    ├── api_client.py        # REST API client with aiohttp
    ├── schemas.py           # Raw Plaid response models
    └── transform.py         # Raw -> canonical
"""

from typing import List, Optional

from core.pagination import walk_cursor_pages
from core.provider_interface import ProviderInterface
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
from .api_client import MAX_INSTITUTIONS_COUNT, MAX_SYNC_COUNT, PlaidAPIClient
from .schemas import PlaidInstitution
from .transform import transform_account, transform_balance, transform_institution, transform_transaction


DEFAULT_COUNTRY_CODE = "US"


class PlaidProvider(ProviderInterface):
    """
    Plaid Provider Adapter

    Example:
        >>> provider = PlaidProvider(settings)
        >>> accounts = await provider.get_accounts(GetAccountsRequest(access_token="access-sandbox-..."))
    """

    name = "plaid"

    capabilities = {
        "transactions": True,
        "accounts": True,
        "balance": True,
        "institutions": True,
        "delete": True
    }

    required_settings = ("plaid_client_id", "plaid_secret")

    def _api(self) -> PlaidAPIClient:
        return PlaidAPIClient(
            self.settings.resolved_plaid_base_url,
            self.settings.plaid_client_id,
            self.settings.plaid_secret,
            timeout=self.settings.request_timeout,
        )

    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        """
        Fetch transactions of one account through /transactions/sync.

        Notes:
            - Without limit/latest every page of the feed is walked
            - With limit (capped at 500) or latest a single page is returned
        """
        request = self._validate_request(GetTransactionsRequest, request, "account_id", "access_token")

        async with self._api() as api:

            async def fetch_page(cursor: Optional[str], count: int = MAX_SYNC_COUNT):
                page = await api.sync_transactions(
                    request.access_token,
                    cursor=cursor,
                    count=count,
                    account_id=request.account_id,
                )
                return page.added, page.next_cursor, page.has_more

            if request.limit is not None or request.latest:
                count = min(request.limit or MAX_SYNC_COUNT, MAX_SYNC_COUNT)
                raw, _, _ = await fetch_page(request.starting_after, count)
            else:
                raw = await walk_cursor_pages(fetch_page, request.starting_after)

        return [
            self._transform(transform_transaction, item)
            for item in raw
            if item.account_id == request.account_id
        ]

    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        request = self._validate_request(GetAccountsRequest, request, "access_token")
        country_code = (request.country_code or DEFAULT_COUNTRY_CODE).upper()

        async with self._api() as api:
            response = await api.get_accounts(request.access_token)

            institution: Optional[PlaidInstitution] = None
            institution_id = request.institution_id or response.item.institution_id
            if institution_id:
                institution = await api.get_institution_by_id(institution_id, country_code)

        return [
            self._transform(transform_account, account, institution=institution, item_id=response.item.item_id)
            for account in response.accounts
        ]

    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        request = self._validate_request(GetAccountBalanceRequest, request, "account_id", "access_token")

        async with self._api() as api:
            response = await api.get_balances(request.access_token, account_ids=[request.account_id])

        for account in response.accounts:
            if account.account_id == request.account_id:
                return self._transform(transform_balance, account)
        return None

    async def get_institutions(self, request: GetInstitutionsRequest) -> List[Institution]:
        """Walk the institution directory by offset until `total` is reached."""
        request = self._validate_request(GetInstitutionsRequest, request)
        country_code = (request.country_code or DEFAULT_COUNTRY_CODE).upper()

        institutions: List[Institution] = []
        offset = 0

        async with self._api() as api:
            while True:
                page = await api.get_institutions(country_code, count=MAX_INSTITUTIONS_COUNT, offset=offset)
                institutions.extend(self._transform(transform_institution, item) for item in page.institutions)
                offset += len(page.institutions)
                if not page.institutions or offset >= page.total:
                    break

        return institutions

    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        request = self._validate_request(DeleteAccountsRequest, request, "access_token")

        async with self._api() as api:
            removed = await api.remove_item(request.access_token)

        self.logger.info(f"Plaid item removed (request_id={removed.request_id})")

    async def _ping(self) -> None:
        async with self._api() as api:
            await api.get_institutions(DEFAULT_COUNTRY_CODE, count=1, offset=0)
