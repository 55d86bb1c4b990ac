"""
Plaid Raw Response Schemas

Models for the Plaid endpoints the adapter calls. Plaid amounts are floats in
major units with positive values meaning money leaving the account.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict


class PlaidObject(BaseModel):
    model_config = ConfigDict(extra="ignore")


class PlaidPersonalFinanceCategory(PlaidObject):
    primary: str
    detailed: Optional[str] = None


class PlaidTransaction(PlaidObject):
    transaction_id: str
    account_id: str
    amount: float
    iso_currency_code: Optional[str] = None
    unofficial_currency_code: Optional[str] = None
    date: str
    pending: bool = False
    name: Optional[str] = None
    merchant_name: Optional[str] = None
    original_description: Optional[str] = None
    category: Optional[List[str]] = None
    personal_finance_category: Optional[PlaidPersonalFinanceCategory] = None
    transaction_code: Optional[str] = None
    payment_channel: Optional[str] = None


class PlaidTransactionsSyncResponse(PlaidObject):
    """POST /transactions/sync"""

    added: List[PlaidTransaction]
    next_cursor: str
    has_more: bool


class PlaidBalances(PlaidObject):
    available: Optional[float] = None
    current: Optional[float] = None
    iso_currency_code: Optional[str] = None
    unofficial_currency_code: Optional[str] = None


class PlaidAccount(PlaidObject):
    account_id: str
    name: str
    official_name: Optional[str] = None
    type: str
    subtype: Optional[str] = None
    mask: Optional[str] = None
    balances: PlaidBalances


class PlaidItem(PlaidObject):
    item_id: str
    institution_id: Optional[str] = None


class PlaidAccountsResponse(PlaidObject):
    """POST /accounts/get and /accounts/balance/get"""

    accounts: List[PlaidAccount]
    item: PlaidItem


class PlaidInstitution(PlaidObject):
    institution_id: str
    name: str
    logo: Optional[str] = None
    url: Optional[str] = None


class PlaidInstitutionResponse(PlaidObject):
    """POST /institutions/get_by_id"""

    institution: PlaidInstitution


class PlaidInstitutionsResponse(PlaidObject):
    """POST /institutions/get"""

    institutions: List[PlaidInstitution]
    total: int


class PlaidItemRemoveResponse(PlaidObject):
    request_id: Optional[str] = None
