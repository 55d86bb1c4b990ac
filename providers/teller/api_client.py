"""
Teller REST API Client

Async client for the Teller API (https://api.teller.io).

Authentication:
    - Mutual TLS with the application certificate (every call)
    - HTTP Basic with the enrollment access token as username (user-scoped calls)

Endpoints Used:
    GET    /accounts                             - Accounts of the enrollment
    GET    /accounts/{id}/transactions           - Transactions (count + from_id)
    GET    /accounts/{id}/balances               - Live balance
    GET    /institutions                         - Supported institutions
    DELETE /accounts                             - Disconnect the enrollment
    GET    /health                               - Liveness
"""

import ssl
from typing import Any, Dict, List, Optional

import aiohttp

from providers.base_client import BaseAPIClient
from .schemas import TellerAccount, TellerBalance, TellerInstitution, TellerTransaction


PAGE_SIZE = 250


class TellerAPIClient(BaseAPIClient):
    """
    Async HTTP client for the Teller API

    Example:
        >>> async with TellerAPIClient(base_url, ssl_context, access_token="token_...") as client:
        ...     accounts = await client.get_accounts()
    """

    provider = "teller"

    def __init__(
        self,
        base_url: str,
        ssl_context: Optional[ssl.SSLContext] = None,
        access_token: Optional[str] = None,
        timeout: float = 30
    ):
        super().__init__(base_url, timeout=timeout, ssl_context=ssl_context)
        self._access_token = access_token

    def _auth(self) -> Optional[aiohttp.BasicAuth]:
        if not self._access_token:
            return None
        return aiohttp.BasicAuth(self._access_token, "")

    # ============================================
    # API Methods
    # ============================================

    async def get_transactions(
        self,
        account_id: str,
        count: int = PAGE_SIZE,
        from_id: Optional[str] = None
    ) -> List[TellerTransaction]:
        """
        Fetch one page of transactions, newest first.

        Teller Endpoint:
            GET /accounts/{account_id}/transactions?count=&from_id=
        """
        params: Dict[str, Any] = {"count": str(count)}
        if from_id:
            params["from_id"] = from_id
        data = await self._get(f"/accounts/{account_id}/transactions", params=params)
        return self._parse_list(TellerTransaction, data, "transactions")

    async def get_accounts(self) -> List[TellerAccount]:
        data = await self._get("/accounts")
        return self._parse_list(TellerAccount, data, "accounts")

    async def get_balance(self, account_id: str) -> TellerBalance:
        data = await self._get(f"/accounts/{account_id}/balances")
        return self._parse(TellerBalance, data, "balances")

    async def get_institutions(self) -> List[TellerInstitution]:
        data = await self._get("/institutions")
        return self._parse_list(TellerInstitution, data, "institutions")

    async def delete_accounts(self) -> None:
        await self._delete("/accounts")

    async def health(self) -> Any:
        return await self._get("/health")
