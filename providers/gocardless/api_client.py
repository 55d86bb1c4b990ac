"""
GoCardless Bank Account Data REST API Client

Async client for https://bankaccountdata.gocardless.com/api/v2.

Authentication:
    POST /token/new/ exchanges the service secret id/key for a short-lived
    access token, sent as a bearer token on every later call. The token is
    requested once per client session and never shared across operations.

Endpoints Used:
    POST   /token/new/                         - Access token
    GET    /requisitions/{id}/                 - Requisition (linked account ids)
    DELETE /requisitions/{id}/                 - Revoke a requisition
    GET    /accounts/{id}/                     - Account metadata
    GET    /accounts/{id}/details/             - Account details
    GET    /accounts/{id}/balances/            - Balances
    GET    /accounts/{id}/transactions/        - Booked + pending transactions
    GET    /institutions/?country=             - Institutions of a country
    GET    /institutions/{id}/                 - One institution
"""

from typing import Any, Dict, List, Optional

from providers.base_client import BaseAPIClient
from .schemas import (
    GoCardlessAccountDetails,
    GoCardlessAccountMetadata,
    GoCardlessBalances,
    GoCardlessInstitution,
    GoCardlessRequisition,
    GoCardlessToken,
    GoCardlessTransactions,
)


class GoCardlessAPIClient(BaseAPIClient):
    """
    Async HTTP client for GoCardless Bank Account Data

    Example:
        >>> async with GoCardlessAPIClient(base_url, secret_id, secret_key) as client:
        ...     await client.authenticate()
        ...     requisition = await client.get_requisition("req_123")
    """

    provider = "gocardless"

    def __init__(self, base_url: str, secret_id: str, secret_key: str, timeout: float = 30):
        super().__init__(base_url, timeout=timeout)
        self._secret_id = secret_id
        self._secret_key = secret_key
        self._access_token: Optional[str] = None

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    async def authenticate(self) -> None:
        data = await self._post(
            "/token/new/",
            json_body={"secret_id": self._secret_id, "secret_key": self._secret_key}
        )
        self._access_token = self._parse(GoCardlessToken, data, "token").access

    # ============================================
    # API Methods
    # ============================================

    async def get_requisition(self, requisition_id: str) -> GoCardlessRequisition:
        data = await self._get(f"/requisitions/{requisition_id}/")
        return self._parse(GoCardlessRequisition, data, "requisition")

    async def delete_requisition(self, requisition_id: str) -> None:
        await self._delete(f"/requisitions/{requisition_id}/")

    async def get_account(self, account_id: str) -> GoCardlessAccountMetadata:
        data = await self._get(f"/accounts/{account_id}/")
        return self._parse(GoCardlessAccountMetadata, data, "account")

    async def get_account_details(self, account_id: str) -> GoCardlessAccountDetails:
        data = await self._get(f"/accounts/{account_id}/details/")
        return self._parse(GoCardlessAccountDetails, data, "account_details")

    async def get_balances(self, account_id: str) -> GoCardlessBalances:
        data = await self._get(f"/accounts/{account_id}/balances/")
        return self._parse(GoCardlessBalances, data, "balances")

    async def get_transactions(self, account_id: str, date_from: Optional[str] = None) -> GoCardlessTransactions:
        """
        GoCardless Endpoint:
            GET /accounts/{account_id}/transactions/?date_from=YYYY-MM-DD
        """
        params: Dict[str, Any] = {}
        if date_from:
            params["date_from"] = date_from
        data = await self._get(f"/accounts/{account_id}/transactions/", params=params or None)
        return self._parse(GoCardlessTransactions, data, "transactions")

    async def get_institutions(self, country_code: str) -> List[GoCardlessInstitution]:
        data = await self._get("/institutions/", params={"country": country_code})
        return self._parse_list(GoCardlessInstitution, data, "institutions")

    async def get_institution(self, institution_id: str) -> GoCardlessInstitution:
        data = await self._get(f"/institutions/{institution_id}/")
        return self._parse(GoCardlessInstitution, data, "institution")
