"""
Plaid REST API Client

Async client for the Plaid API. Every Plaid endpoint is a POST with a JSON
body carrying client_id and secret next to the call's own fields.

Environments:
    sandbox      https://sandbox.plaid.com
    development  https://development.plaid.com
    production   https://production.plaid.com

Endpoints Used:
    POST /transactions/sync        - Incremental transaction feed (cursor)
    POST /accounts/get             - Accounts of an item
    POST /accounts/balance/get     - Real-time balances
    POST /institutions/get         - Institution directory (offset)
    POST /institutions/get_by_id   - One institution
    POST /item/remove              - Revoke an access token
"""

from typing import Any, Dict, List, Optional

from providers.base_client import BaseAPIClient
from .schemas import (
    PlaidAccountsResponse,
    PlaidInstitution,
    PlaidInstitutionResponse,
    PlaidInstitutionsResponse,
    PlaidItemRemoveResponse,
    PlaidTransactionsSyncResponse,
)


MAX_SYNC_COUNT = 500
MAX_INSTITUTIONS_COUNT = 500


class PlaidAPIClient(BaseAPIClient):
    """
    Async HTTP client for the Plaid API

    Example:
        >>> async with PlaidAPIClient(base_url, client_id, secret) as client:
        ...     page = await client.sync_transactions("access-sandbox-...", account_id="acc_1")
    """

    provider = "plaid"

    def __init__(self, base_url: str, client_id: str, secret: str, timeout: float = 30):
        super().__init__(base_url, timeout=timeout)
        self._client_id = client_id
        self._secret = secret

    def _headers(self) -> Dict[str, str]:
        return {"Accept": "application/json", "Content-Type": "application/json"}

    async def _call(self, path: str, body: Dict[str, Any]) -> Any:
        payload = {"client_id": self._client_id, "secret": self._secret, **body}
        return await self._post(path, json_body=payload)

    # ============================================
    # API Methods
    # ============================================

    async def sync_transactions(
        self,
        access_token: str,
        cursor: Optional[str] = None,
        count: int = MAX_SYNC_COUNT,
        account_id: Optional[str] = None
    ) -> PlaidTransactionsSyncResponse:
        """
        Fetch one page of the transactions feed.

        Plaid Endpoint:
            POST /transactions/sync

        Notes:
            - Only `added` is consumed; modified/removed matter to stateful
              consumers, not to a pass-through gateway
        """
        body: Dict[str, Any] = {"access_token": access_token, "count": count}
        if cursor:
            body["cursor"] = cursor
        if account_id:
            body["options"] = {"account_id": account_id}

        data = await self._call("/transactions/sync", body)
        return self._parse(PlaidTransactionsSyncResponse, data, "transactions/sync")

    async def get_accounts(self, access_token: str) -> PlaidAccountsResponse:
        data = await self._call("/accounts/get", {"access_token": access_token})
        return self._parse(PlaidAccountsResponse, data, "accounts/get")

    async def get_balances(self, access_token: str, account_ids: Optional[List[str]] = None) -> PlaidAccountsResponse:
        body: Dict[str, Any] = {"access_token": access_token}
        if account_ids:
            body["options"] = {"account_ids": account_ids}
        data = await self._call("/accounts/balance/get", body)
        return self._parse(PlaidAccountsResponse, data, "accounts/balance/get")

    async def get_institutions(
        self,
        country_code: str,
        count: int = MAX_INSTITUTIONS_COUNT,
        offset: int = 0
    ) -> PlaidInstitutionsResponse:
        data = await self._call(
            "/institutions/get",
            {
                "count": count,
                "offset": offset,
                "country_codes": [country_code],
                "options": {"include_optional_metadata": True},
            }
        )
        return self._parse(PlaidInstitutionsResponse, data, "institutions/get")

    async def get_institution_by_id(self, institution_id: str, country_code: str) -> PlaidInstitution:
        data = await self._call(
            "/institutions/get_by_id",
            {
                "institution_id": institution_id,
                "country_codes": [country_code],
                "options": {"include_optional_metadata": True},
            }
        )
        return self._parse(PlaidInstitutionResponse, data, "institutions/get_by_id").institution

    async def remove_item(self, access_token: str) -> PlaidItemRemoveResponse:
        data = await self._call("/item/remove", {"access_token": access_token})
        return self._parse(PlaidItemRemoveResponse, data, "item/remove")
