"""
Canonical Data Schemas

This module defines the Pydantic models every provider adapter must produce,
plus the request objects callers hand to the gateway.

Key Principle:
    Regardless of which provider the data comes from (Plaid, Teller,
    GoCardless, Stripe), it gets normalized into these schemas. The route
    layer and its clients only ever see these shapes.

Models:
    - Institution: A bank/financial institution
    - Account: A bank account visible under a credential
    - Transaction: A single movement of money
    - Balance: Current balance of an account
    - HealthCheckResult: Liveness of every known provider

Requests:
    - GetTransactionsRequest, GetAccountsRequest, GetAccountBalanceRequest,
      GetInstitutionsRequest, DeleteAccountsRequest

All canonical models are frozen: they are built once per request from the
provider response and never mutated afterwards.
"""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================
# Closed Vocabularies
# ============================================

ProviderName = Literal["plaid", "teller", "gocardless", "stripe"]

AccountType = Literal["depository", "credit", "other_asset", "loan", "other_liability"]

TransactionStatus = Literal["posted", "pending"]

TransactionMethod = Literal["payment", "refund", "transfer", "payout", "adjustment", "fee", "other"]

ACCOUNT_TYPES = ("depository", "credit", "other_asset", "loan", "other_liability")
TRANSACTION_METHODS = ("payment", "refund", "transfer", "payout", "adjustment", "fee", "other")


# ============================================
# Base Canonical Model
# ============================================

class CanonicalModel(BaseModel):
    """
    Base model for all canonical schemas.

    Frozen so that nothing downstream of the transformation layer can alter
    a record after it has been built.
    """

    model_config = ConfigDict(frozen=True)


def _normalize_currency(value: str) -> str:
    value = value.strip().upper()
    if len(value) != 3:
        raise ValueError(f"Currency must be a 3-letter ISO 4217 code, got '{value}'")
    return value


# ============================================
# Institution Schema
# ============================================

class Institution(CanonicalModel):
    """
    Financial institution (bank) as reported by a provider.

    Attributes:
        id: Provider-specific institution identifier
        name: Display name
        logo: Logo URL (or data URL), None when the provider has none
        provider: Provider that reported the institution
    """

    id: str = Field(..., description="Provider-specific institution identifier")
    name: str = Field(..., description="Institution display name")
    logo: Optional[str] = Field(None, description="Logo URL or data URL")
    provider: ProviderName = Field(..., description="Source provider")


# ============================================
# Account Schema
# ============================================

class Account(CanonicalModel):
    """
    Bank account visible under a credential or customer scope.

    Attributes:
        id: Provider-specific account identifier
        name: Display name
        currency: ISO 4217 code (upper case)
        provider: Provider that produced the account
        institution: Institution the account belongs to (weak reference)
        type: One of depository, credit, other_asset, loan, other_liability
        enrollment_id: Teller enrollment the account belongs to
        routing_number: Stripe bank account routing number

    Example:
        >>> Account(
        ...     id="acc_123",
        ...     name="Checking",
        ...     currency="usd",
        ...     provider="teller",
        ...     type="depository",
        ... ).currency
        'USD'
    """

    id: str
    name: str
    currency: str = Field(..., description="ISO 4217 currency code")
    provider: ProviderName
    institution: Optional[Institution] = None
    type: AccountType
    enrollment_id: Optional[str] = Field(None, description="Aggregator enrollment id (Teller)")
    routing_number: Optional[str] = Field(None, description="Bank routing number (Stripe)")

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Ensure currency is a 3-letter upper-case code"""
        return _normalize_currency(v)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "9293961c-df93-4d6d-a2cc-fc3e353b2d10",
                "name": "Savings account",
                "currency": "USD",
                "provider": "teller",
                "institution": {
                    "id": "chase",
                    "name": "Chase",
                    "logo": None,
                    "provider": "teller",
                },
                "type": "depository",
                "enrollment_id": "enr_123",
                "routing_number": None,
            }
        },
    )


# ============================================
# Transaction Schema
# ============================================

class Transaction(CanonicalModel):
    """
    A single movement of money on an account.

    Amount Convention:
        `amount` is always non-negative and always in major currency units
        (dollars, not cents). Direction is carried by `method` and `status`,
        never by the sign. Converting from a provider's native representation
        is the job of the provider's transform module.

    Attributes:
        id: Provider-specific transaction identifier
        amount: Absolute amount in major units
        currency: ISO 4217 code (upper case)
        date: ISO-8601 date or UTC timestamp
        status: "posted" or "pending"
        balance: Running balance after the transaction, if reported
        category: Provider category, if reported
        method: payment, refund, transfer, payout, adjustment, fee or other
        name: Human readable name (merchant, counterparty or description)
        description: Free text description, if reported
        currency_rate: Exchange rate applied, if any
        currency_source: Source currency of a converted transaction, if any
    """

    id: str
    amount: float = Field(..., ge=0, description="Absolute amount in major currency units")
    currency: str
    date: str = Field(..., description="ISO-8601 date (YYYY-MM-DD) or UTC timestamp")
    status: TransactionStatus
    balance: Optional[float] = None
    category: Optional[str] = None
    method: TransactionMethod
    name: str
    description: Optional[str] = None
    currency_rate: Optional[float] = None
    currency_source: Optional[str] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        """Ensure currency is a 3-letter upper-case code"""
        return _normalize_currency(v)

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "txn_1",
                "amount": 123.45,
                "currency": "USD",
                "date": "2024-06-12",
                "status": "posted",
                "balance": None,
                "category": "travel",
                "method": "payment",
                "name": "Vercel Inc.",
                "description": None,
                "currency_rate": None,
                "currency_source": None,
            }
        },
    )


# ============================================
# Balance Schema
# ============================================

class Balance(CanonicalModel):
    """Current balance of an account, in major units. No history."""

    amount: float
    currency: str

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _normalize_currency(v)


# ============================================
# Health Check Schema
# ============================================

class HealthCheckResult(CanonicalModel):
    """
    Liveness of every known provider.

    Always fully populated: one entry per registered provider, True when the
    provider answered its cheapest live call, False otherwise.

    Example:
        >>> result = HealthCheckResult(providers={"plaid": True, "stripe": False})
        >>> result.to_response()
        {'plaid': {'healthy': True}, 'stripe': {'healthy': False}}
    """

    providers: Dict[str, bool]

    def is_healthy(self, provider: str) -> bool:
        return self.providers.get(provider, False)

    def to_response(self) -> Dict[str, Dict[str, bool]]:
        """Nested shape expected by the health route: {provider: {"healthy": bool}}"""
        return {name: {"healthy": healthy} for name, healthy in self.providers.items()}


# ============================================
# Request Objects
# ============================================

class GatewayRequest(BaseModel):
    """
    Base class for gateway requests.

    Fields are the union of what the four providers need. Every adapter
    checks its own required subset before touching the network.
    """

    model_config = ConfigDict(extra="forbid")


class GetTransactionsRequest(GatewayRequest):
    """
    Attributes:
        account_id: Account to list transactions for (aggregators)
        access_token: User access token (Teller, Plaid)
        customer_id: Connected account / customer id (Stripe)
        latest: Only fetch the most recent page/window instead of the full history
        currency: Filter by currency (Stripe)
        type: Filter by transaction type (Stripe)
        expand: Objects to expand in the response (Stripe)
        ending_before: Cursor, return items before this id (Stripe)
        starting_after: Cursor, return items after this id (Stripe)
        limit: Page size; when given exactly one page is fetched
        date_from: Earliest booking date YYYY-MM-DD (GoCardless)
    """

    account_id: Optional[str] = None
    access_token: Optional[str] = None
    customer_id: Optional[str] = None
    latest: bool = False
    currency: Optional[str] = None
    type: Optional[str] = None
    expand: Optional[List[str]] = None
    ending_before: Optional[str] = None
    starting_after: Optional[str] = None
    limit: Optional[int] = None
    date_from: Optional[str] = None


class GetAccountsRequest(GatewayRequest):
    id: Optional[str] = Field(None, description="Requisition id (GoCardless)")
    country_code: Optional[str] = None
    access_token: Optional[str] = Field(None, description="Access token (Teller, Plaid)")
    institution_id: Optional[str] = Field(None, description="Institution id (Plaid)")
    customer_id: Optional[str] = Field(None, description="Connected account id (Stripe)")
    bank_account_id: Optional[str] = Field(None, description="Bank account id (Stripe)")


class GetAccountBalanceRequest(GatewayRequest):
    account_id: Optional[str] = None
    access_token: Optional[str] = None
    bank_account_id: Optional[str] = None


class GetInstitutionsRequest(GatewayRequest):
    country_code: Optional[str] = None


class DeleteAccountsRequest(GatewayRequest):
    account_id: Optional[str] = None
    access_token: Optional[str] = None
