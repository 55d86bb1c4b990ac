"""
GoCardless Provider Adapter

Implements ProviderInterface for GoCardless Bank Account Data (aggregator,
credential = requisition id, service credential = secret id/key pair).

Notes:
    - Transactions come back in one response (booked + pending), no paging
    - `latest` narrows the window to the last LATEST_WINDOW_DAYS days
    - Accounts are resolved through the requisition: one details, one
      metadata and one institution lookup per linked account

Structure:
    providers/gocardless/
    ├── __init__.py          # This file (GoCardlessProvider class)
    ├── api_client.py        # REST API client with aiohttp
    ├── schemas.py           # Raw GoCardless response models
    └── transform.py         # Raw -> canonical
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List, Optional

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
from core.utils.time import days_ago
from .api_client import GoCardlessAPIClient
from .schemas import GoCardlessInstitution
from .transform import transform_account, transform_balance, transform_institution, transform_transaction


LATEST_WINDOW_DAYS = 5


class GoCardlessProvider(ProviderInterface):
    """GoCardless Bank Account Data adapter."""

    name = "gocardless"

    capabilities = {
        "transactions": True,
        "accounts": True,
        "balance": True,
        "institutions": True,
        "delete": True
    }

    required_settings = ("gocardless_secret_id", "gocardless_secret_key")

    @asynccontextmanager
    async def _api(self) -> AsyncIterator[GoCardlessAPIClient]:
        """Open a client session and fetch its access token."""
        client = GoCardlessAPIClient(
            self.settings.gocardless_base_url,
            self.settings.gocardless_secret_id,
            self.settings.gocardless_secret_key,
            timeout=self.settings.request_timeout,
        )
        async with client as api:
            await api.authenticate()
            yield api

    async def get_transactions(self, request: GetTransactionsRequest) -> List[Transaction]:
        request = self._validate_request(GetTransactionsRequest, request, "account_id")

        date_from = request.date_from
        if request.latest and not date_from:
            date_from = days_ago(LATEST_WINDOW_DAYS)

        async with self._api() as api:
            response = await api.get_transactions(request.account_id, date_from=date_from)

        booked = [
            self._transform(transform_transaction, item, status="posted")
            for item in response.transactions.booked
        ]
        pending = [
            self._transform(transform_transaction, item, status="pending")
            for item in response.transactions.pending
        ]
        return booked + pending

    async def get_accounts(self, request: GetAccountsRequest) -> List[Account]:
        request = self._validate_request(GetAccountsRequest, request, "id")

        accounts: List[Account] = []
        institutions: Dict[str, GoCardlessInstitution] = {}

        async with self._api() as api:
            requisition = await api.get_requisition(request.id)

            for account_id in requisition.accounts:
                details = await api.get_account_details(account_id)
                metadata = await api.get_account(account_id)

                if metadata.institution_id not in institutions:
                    institutions[metadata.institution_id] = await api.get_institution(metadata.institution_id)

                accounts.append(
                    self._transform(
                        transform_account,
                        metadata,
                        details.account,
                        institution=institutions[metadata.institution_id],
                        requisition_id=requisition.id,
                    )
                )

        return accounts

    async def get_account_balance(self, request: GetAccountBalanceRequest) -> Optional[Balance]:
        request = self._validate_request(GetAccountBalanceRequest, request, "account_id")

        async with self._api() as api:
            balances = await api.get_balances(request.account_id)

        return self._transform(transform_balance, balances)

    async def get_institutions(self, request: GetInstitutionsRequest) -> List[Institution]:
        request = self._validate_request(GetInstitutionsRequest, request, "country_code")

        async with self._api() as api:
            institutions = await api.get_institutions(request.country_code.upper())

        return [self._transform(transform_institution, item) for item in institutions]

    async def delete_accounts(self, request: DeleteAccountsRequest) -> None:
        """Revoke the requisition identified by account_id."""
        request = self._validate_request(DeleteAccountsRequest, request, "account_id")

        async with self._api() as api:
            await api.delete_requisition(request.account_id)

        self.logger.info("GoCardless requisition deleted")

    async def _ping(self) -> None:
        # Token exchange is the cheapest authenticated call
        async with self._api():
            pass
