"""
Stripe Raw Response Schemas

Pydantic models for the subset of Stripe API objects the adapter consumes.
Unknown fields are ignored; missing required fields raise and surface as
UpstreamContractError.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict


class StripeObject(BaseModel):
    model_config = ConfigDict(extra="ignore")


class StripeBalanceTransaction(StripeObject):
    """GET /v1/balance_transactions item. Amounts are integer minor units."""

    id: str
    amount: int
    currency: str
    created: int
    type: str
    status: Optional[str] = None
    net: Optional[int] = None
    fee: Optional[int] = None
    reporting_category: Optional[str] = None
    description: Optional[str] = None
    exchange_rate: Optional[float] = None


class StripeBalanceTransactionList(StripeObject):
    data: List[StripeBalanceTransaction]
    has_more: bool = False


class StripeBankAccount(StripeObject):
    """External account of type bank_account on a connected account."""

    id: str
    object: str = "bank_account"
    account: Optional[str] = None
    account_holder_name: Optional[str] = None
    bank_name: Optional[str] = None
    country: Optional[str] = None
    currency: str
    last4: str
    routing_number: Optional[str] = None
    status: Optional[str] = None


class StripeBankAccountList(StripeObject):
    data: List[StripeBankAccount]
    has_more: bool = False


class StripeBalanceAmount(StripeObject):
    amount: int
    currency: str


class StripeBalance(StripeObject):
    available: List[StripeBalanceAmount]
    pending: List[StripeBalanceAmount] = []


class StripeDeleted(StripeObject):
    id: str
    deleted: bool = False


class StripeBusinessProfile(StripeObject):
    name: Optional[str] = None
    mcc: Optional[str] = None
    url: Optional[str] = None
    support_email: Optional[str] = None
    support_phone: Optional[str] = None
    product_description: Optional[str] = None


class StripeRequirements(StripeObject):
    currently_due: List[str] = []
    eventually_due: List[str] = []
    past_due: List[str] = []
    disabled_reason: Optional[str] = None
    current_deadline: Optional[int] = None


class StripeAccount(StripeObject):
    """GET /v1/accounts/{account}: the connected (business) account."""

    id: str
    object: Literal["account"] = "account"
    type: Optional[str] = None
    business_type: Optional[str] = None
    business_profile: Optional[StripeBusinessProfile] = None
    country: str
    default_currency: Optional[str] = None
    email: Optional[str] = None
    created: Optional[int] = None
    charges_enabled: bool = False
    payouts_enabled: bool = False
    details_submitted: bool = False
    requirements: Optional[StripeRequirements] = None
    metadata: Dict[str, Any] = {}
