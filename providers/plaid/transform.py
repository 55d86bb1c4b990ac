"""
Plaid -> canonical transformations

Pure functions, no I/O.
"""

from typing import Dict, Optional

from core.schemas import Account, Balance, Institution, Transaction
from core.utils.money import absolute_amount
from core.utils.time import normalize_date
from .schemas import PlaidAccount, PlaidInstitution, PlaidTransaction


# Plaid transaction_code values (non-US institutions only)
TRANSACTION_METHODS: Dict[str, str] = {
    "adjustment": "adjustment",
    "bank charge": "fee",
    "bill payment": "payment",
    "direct debit": "payment",
    "purchase": "payment",
    "standing order": "payment",
    "transfer": "transfer",
}

ACCOUNT_TYPES: Dict[str, str] = {
    "depository": "depository",
    "credit": "credit",
    "loan": "loan",
    "investment": "other_asset",
    "brokerage": "other_asset",
    "other": "other_asset",
}

DEFAULT_CURRENCY = "USD"


def map_transaction_method(transaction_code: Optional[str]) -> str:
    """
    Examples:
        >>> map_transaction_method("bank charge")
        'fee'
        >>> map_transaction_method(None)
        'other'
    """
    if not transaction_code:
        return "other"
    return TRANSACTION_METHODS.get(transaction_code.lower(), "other")


def map_account_type(account_type: str) -> str:
    return ACCOUNT_TYPES.get(account_type.lower(), "other_asset")


def logo_data_url(logo: Optional[str]) -> Optional[str]:
    """Plaid ships logos as bare base64 PNG."""
    if not logo:
        return None
    if logo.startswith(("data:", "http://", "https://")):
        return logo
    return f"data:image/png;base64,{logo}"


def _category(raw: PlaidTransaction) -> Optional[str]:
    if raw.personal_finance_category:
        return raw.personal_finance_category.primary.lower()
    if raw.category:
        return raw.category[0]
    return None


def transform_transaction(raw: PlaidTransaction) -> Transaction:
    name = raw.merchant_name or raw.name or raw.original_description or "Unknown"
    return Transaction(
        id=raw.transaction_id,
        amount=absolute_amount(raw.amount),
        currency=raw.iso_currency_code or raw.unofficial_currency_code or DEFAULT_CURRENCY,
        date=normalize_date(raw.date),
        status="pending" if raw.pending else "posted",
        balance=None,
        category=_category(raw),
        method=map_transaction_method(raw.transaction_code),
        name=name,
        description=raw.original_description,
        currency_rate=None,
        currency_source=None,
    )


def transform_institution(raw: PlaidInstitution) -> Institution:
    return Institution(
        id=raw.institution_id,
        name=raw.name,
        logo=logo_data_url(raw.logo),
        provider="plaid",
    )


def transform_account(
    raw: PlaidAccount,
    institution: Optional[PlaidInstitution] = None,
    item_id: Optional[str] = None
) -> Account:
    """
    Convert a Plaid account.

    Args:
        raw: Account from /accounts/get
        institution: Institution of the item, when Plaid reported one
        item_id: Plaid item the account belongs to (exposed as enrollment_id)
    """
    return Account(
        id=raw.account_id,
        name=raw.name,
        currency=raw.balances.iso_currency_code or raw.balances.unofficial_currency_code or DEFAULT_CURRENCY,
        provider="plaid",
        institution=transform_institution(institution) if institution else None,
        type=map_account_type(raw.type),
        enrollment_id=item_id,
        routing_number=None,
    )


def transform_balance(raw: PlaidAccount) -> Optional[Balance]:
    """Available balance, falling back to current; None when Plaid has neither."""
    amount = raw.balances.available if raw.balances.available is not None else raw.balances.current
    if amount is None:
        return None
    currency = raw.balances.iso_currency_code or raw.balances.unofficial_currency_code or DEFAULT_CURRENCY
    return Balance(amount=amount, currency=currency)
