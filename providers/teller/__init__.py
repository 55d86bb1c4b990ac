"""
Teller Provider Adapter

Implements ProviderInterface for Teller (aggregator, credential = enrollment
access token, transport secured with the application's client certificate).

Pagination:
    Teller has no has_more flag. A full page (count items) means there may be
    more, and the last id of the page becomes the next from_id.

Structure:
    providers/teller/
    ├── __init__.py          # This file (TellerProvider class)
    ├── api_client.py        # REST API client with aiohttp + mTLS
    ├── schemas.py           # Raw Teller response models
    └── transform.py         # Raw -> canonical
"""

import ssl
from typing import List, Optional

from core.config import Settings
from core.errors import ConfigurationError
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
from .api_client import PAGE_SIZE, TellerAPIClient
from .transform import transform_account, transform_balance, transform_institution, transform_transaction


class TellerProvider(ProviderInterface):
    """
    Teller Provider Adapter

    The client certificate is loaded once at construction; a missing or
    unreadable certificate is a ConfigurationError.
    """

    name = "teller"

    capabilities = {
        "transactions": True,
        "accounts": True,
        "balance": True,
        "institutions": True,
        "delete": True
    }

    required_settings = ("teller_certificate_path", "teller_certificate_private_key_path")

    def __init__(self, config: Optional[Settings] = None):
        super().__init__(config)
        self._ssl = self._ssl_context()

    def _ssl_context(self) -> Optional[ssl.SSLContext]:
        """Build the mTLS context from the configured certificate pair."""
        cert_path = self.settings.teller_certificate_path
        key_path = self.settings.teller_certificate_private_key_path
        if not cert_path:
            return None

        try:
            context = ssl.create_default_context()
            context.load_cert_chain(certfile=cert_path, keyfile=key_path or None)
        except (OSError, ssl.SSLError) as e:
            raise ConfigurationError(f"Cannot load Teller client certificate: {e}", provider=self.name) from e
        return context

    def _api(self, access_token: Optional[str] = None) -> TellerAPIClient:
        return TellerAPIClient(
            self.settings.teller_base_url,
            ssl_context=self._ssl,
            access_token=access_token,
            timeout=self.settings.request_timeout,
        )

    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        request = self._validate_request(GetTransactionsRequest, request, "account_id", "access_token")

        async with self._api(request.access_token) as api:

            async def fetch_page(cursor: Optional[str], count: int = PAGE_SIZE):
                items = await api.get_transactions(request.account_id, count=count, from_id=cursor)
                next_cursor = items[-1].id if items else None
                return items, next_cursor, len(items) >= count

            if request.limit is not None or request.latest:
                raw, _, _ = await fetch_page(request.starting_after, request.limit or PAGE_SIZE)
            else:
                raw = await walk_cursor_pages(fetch_page, request.starting_after)

        return [self._transform(transform_transaction, item) for item in raw]

    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        request = self._validate_request(GetAccountsRequest, request, "access_token")

        async with self._api(request.access_token) as api:
            accounts = await api.get_accounts()

        return [self._transform(transform_account, account) for account in accounts]

    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        request = self._validate_request(GetAccountBalanceRequest, request, "account_id", "access_token")

        async with self._api(request.access_token) as api:
            balance = await api.get_balance(request.account_id)

        return self._transform(transform_balance, balance)

    async def get_institutions(self, request: GetInstitutionsRequest) -> List[Institution]:
        self._validate_request(GetInstitutionsRequest, request)

        async with self._api() as api:
            institutions = await api.get_institutions()

        return [self._transform(transform_institution, item) for item in institutions]

    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        request = self._validate_request(DeleteAccountsRequest, request, "access_token")

        async with self._api(request.access_token) as api:
            await api.delete_accounts()

        self.logger.info("Teller enrollment disconnected")

    async def _ping(self) -> None:
        async with self._api() as api:
            await api.health()
