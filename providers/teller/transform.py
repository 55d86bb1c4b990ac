"""
Teller -> canonical transformations

Pure functions, no I/O. Teller only covers US institutions and omits the
currency on transactions and balances, so USD is implied.
"""

from typing import Dict, Optional

from core.schemas import Account, Balance, Institution, Transaction
from core.utils.money import absolute_amount
from core.utils.time import normalize_date
from .schemas import TellerAccount, TellerBalance, TellerInstitution, TellerTransaction


TELLER_CURRENCY = "USD"

TRANSACTION_METHODS: Dict[str, str] = {
    "ach": "transfer",
    "adjustment": "adjustment",
    "bill_payment": "payment",
    "card_payment": "payment",
    "deposit": "transfer",
    "digital_payment": "payment",
    "fee": "fee",
    "refund": "refund",
    "transfer": "transfer",
    "wire": "transfer",
    "withdrawal": "transfer",
}

ACCOUNT_TYPES: Dict[str, str] = {
    "depository": "depository",
    "credit": "credit",
}


def map_transaction_method(transaction_type: str) -> str:
    """
    Examples:
        >>> map_transaction_method("card_payment")
        'payment'
        >>> map_transaction_method("interest")
        'other'
    """
    return TRANSACTION_METHODS.get(transaction_type.lower(), "other")


def map_account_type(account_type: str) -> str:
    return ACCOUNT_TYPES.get(account_type.lower(), "other_asset")


def transform_transaction(raw: TellerTransaction) -> Transaction:
    counterparty = raw.details.counterparty if raw.details else None
    name = (counterparty.name if counterparty else None) or raw.description

    return Transaction(
        id=raw.id,
        amount=absolute_amount(raw.amount),
        currency=TELLER_CURRENCY,
        date=normalize_date(raw.date),
        status="pending" if raw.status == "pending" else "posted",
        balance=float(raw.running_balance) if raw.running_balance is not None else None,
        category=raw.details.category if raw.details else None,
        method=map_transaction_method(raw.type),
        name=name,
        description=raw.description,
        currency_rate=None,
        currency_source=None,
    )


def transform_institution(raw: TellerInstitution) -> Institution:
    return Institution(id=raw.id, name=raw.name, logo=None, provider="teller")


def transform_account(raw: TellerAccount) -> Account:
    return Account(
        id=raw.id,
        name=raw.name,
        currency=raw.currency,
        provider="teller",
        institution=transform_institution(raw.institution),
        type=map_account_type(raw.type),
        enrollment_id=raw.enrollment_id,
        routing_number=None,
    )


def transform_balance(raw: TellerBalance) -> Optional[Balance]:
    """Available balance, falling back to the ledger balance."""
    amount = raw.available if raw.available is not None else raw.ledger
    if amount is None:
        return None
    return Balance(amount=float(amount), currency=TELLER_CURRENCY)
