"""
GoCardless -> canonical transformations

Pure functions, no I/O. Amounts arrive as signed decimal strings in major
units; pending transactions frequently carry no identifier at all, in which
case a stable id is derived from the record itself.
"""

import hashlib
import json
from typing import Dict, Optional

from core.schemas import Account, Balance, Institution, Transaction
from core.utils.money import absolute_amount
from core.utils.time import normalize_date
from .schemas import (
    GoCardlessAccountDetail,
    GoCardlessAccountMetadata,
    GoCardlessBalances,
    GoCardlessCurrencyExchange,
    GoCardlessInstitution,
    GoCardlessTransaction,
)


# proprietaryBankTransactionCode, lower-cased
TRANSACTION_METHODS: Dict[str, str] = {
    "card_payment": "payment",
    "payment": "payment",
    "direct_debit": "payment",
    "standing_order": "payment",
    "card_refund": "refund",
    "refund": "refund",
    "transfer": "transfer",
    "topup": "transfer",
    "exchange": "transfer",
    "payout": "payout",
    "fee": "fee",
    "charge": "fee",
    "adjustment": "adjustment",
}

# ISO 20022 ExternalCashAccountType1Code
ACCOUNT_TYPES: Dict[str, str] = {
    "CACC": "depository",
    "CASH": "depository",
    "MOMA": "depository",
    "SLRY": "depository",
    "SVGS": "depository",
    "TRAN": "depository",
    "CARD": "credit",
    "LOAN": "loan",
    "MGLD": "loan",
}

# Preferred balance types, best first
BALANCE_PREFERENCE = ("interimAvailable", "expected", "closingBooked", "interimBooked")


def map_transaction_method(code: Optional[str]) -> str:
    if not code:
        return "other"
    return TRANSACTION_METHODS.get(code.lower(), "other")


def map_account_type(cash_account_type: Optional[str]) -> str:
    """
    Examples:
        >>> map_account_type("SVGS")
        'depository'
        >>> map_account_type(None)
        'other_asset'
    """
    if not cash_account_type:
        return "other_asset"
    return ACCOUNT_TYPES.get(cash_account_type.upper(), "other_asset")


def transaction_id(raw: GoCardlessTransaction) -> str:
    """Upstream id if any, else a sha1 of the record's canonical JSON."""
    if raw.transaction_id:
        return raw.transaction_id
    if raw.internal_transaction_id:
        return raw.internal_transaction_id
    payload = json.dumps(raw.model_dump(mode="json", by_alias=True), sort_keys=True)
    return hashlib.sha1(payload.encode("utf-8")).hexdigest()


def _exchange(raw: GoCardlessTransaction) -> Optional[GoCardlessCurrencyExchange]:
    exchange = raw.currency_exchange
    if isinstance(exchange, list):
        return exchange[0] if exchange else None
    return exchange


def _name(raw: GoCardlessTransaction) -> str:
    remittance = raw.remittance_information_unstructured_array or []
    return (
        raw.creditor_name
        or raw.debtor_name
        or raw.remittance_information_unstructured
        or (remittance[0] if remittance else None)
        or raw.additional_information
        or "Unknown"
    )


def transform_transaction(raw: GoCardlessTransaction, status: str = "posted") -> Transaction:
    """
    Convert a booked or pending GoCardless transaction.

    Args:
        raw: Transaction from either the booked or the pending list
        status: "posted" for booked, "pending" for pending
    """
    exchange = _exchange(raw)
    balance_after = raw.balance_after_transaction

    return Transaction(
        id=transaction_id(raw),
        amount=absolute_amount(raw.transaction_amount.amount),
        currency=raw.transaction_amount.currency,
        date=normalize_date(raw.booking_date or raw.value_date or raw.booking_date_time),
        status=status,
        balance=float(balance_after.balance_amount.amount) if balance_after else None,
        category=None,
        method=map_transaction_method(raw.proprietary_bank_transaction_code),
        name=_name(raw),
        description=raw.remittance_information_unstructured,
        currency_rate=float(exchange.exchange_rate) if exchange and exchange.exchange_rate else None,
        currency_source=exchange.source_currency if exchange else None,
    )


def transform_institution(raw: GoCardlessInstitution) -> Institution:
    return Institution(id=raw.id, name=raw.name, logo=raw.logo, provider="gocardless")


def transform_account(
    metadata: GoCardlessAccountMetadata,
    details: GoCardlessAccountDetail,
    institution: Optional[GoCardlessInstitution] = None,
    requisition_id: Optional[str] = None
) -> Account:
    name = (
        details.name
        or details.product
        or (institution.name if institution else None)
        or details.iban
        or metadata.iban
        or metadata.id
    )
    return Account(
        id=metadata.id,
        name=name,
        currency=details.currency,
        provider="gocardless",
        institution=transform_institution(institution) if institution else None,
        type=map_account_type(details.cash_account_type),
        enrollment_id=requisition_id,
        routing_number=None,
    )


def transform_balance(raw: GoCardlessBalances) -> Optional[Balance]:
    if not raw.balances:
        return None

    by_type = {entry.balance_type: entry for entry in raw.balances}
    entry = next((by_type[kind] for kind in BALANCE_PREFERENCE if kind in by_type), raw.balances[0])
    return Balance(amount=float(entry.balance_amount.amount), currency=entry.balance_amount.currency)
