"""
Teller Raw Response Schemas

Teller serializes every amount as a decimal string in major units, signed
from the account holder's point of view.
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict


class TellerObject(BaseModel):
    model_config = ConfigDict(extra="ignore")


class TellerCounterparty(TellerObject):
    name: Optional[str] = None
    type: Optional[str] = None


class TellerTransactionDetails(TellerObject):
    category: Optional[str] = None
    processing_status: Optional[str] = None
    counterparty: Optional[TellerCounterparty] = None


class TellerTransaction(TellerObject):
    id: str
    account_id: str
    amount: str
    date: str
    description: str
    status: str
    type: str
    running_balance: Optional[str] = None
    details: Optional[TellerTransactionDetails] = None


class TellerInstitution(TellerObject):
    id: str
    name: str


class TellerAccount(TellerObject):
    id: str
    name: str
    currency: str
    enrollment_id: str
    institution: TellerInstitution
    type: str
    subtype: Optional[str] = None
    last_four: Optional[str] = None
    status: Optional[str] = None


class TellerBalance(TellerObject):
    account_id: str
    available: Optional[str] = None
    ledger: Optional[str] = None
