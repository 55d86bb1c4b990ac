"""
Stripe -> canonical transformations

Pure functions, no I/O. Stripe reports amounts in minor units, so every
amount goes through core.utils.money.to_major_units.
"""

from typing import Dict, Optional

from core.schemas import Account, Balance, Institution, Transaction
from core.utils.money import to_major_units
from core.utils.time import epoch_to_iso
from .schemas import StripeBalance, StripeBalanceTransaction, StripeBankAccount


TRANSACTION_METHODS: Dict[str, str] = {
    "charge": "payment",
    "payment": "payment",
    "refund": "refund",
    "payment_refund": "refund",
    "transfer": "transfer",
    "payout": "payout",
    "adjustment": "adjustment",
    "stripe_fee": "fee",
    "application_fee": "fee",
}


def map_transaction_method(transaction_type: str) -> str:
    """
    Examples:
        >>> map_transaction_method("payment_refund")
        'refund'
        >>> map_transaction_method("topup")
        'other'
    """
    return TRANSACTION_METHODS.get(transaction_type, "other")


def transform_transaction(raw: StripeBalanceTransaction) -> Transaction:
    """
    Convert a Stripe balance transaction.

    Notes:
        - amount: abs(amount) / 100
        - status: "pending" only while Stripe reports it pending, else "posted"
        - balance: None, Stripe has no running balance per transaction
    """
    return Transaction(
        id=raw.id,
        amount=to_major_units(abs(raw.amount)),
        currency=raw.currency,
        date=epoch_to_iso(raw.created),
        status="pending" if raw.status == "pending" else "posted",
        balance=None,
        category=raw.reporting_category or None,
        method=map_transaction_method(raw.type),
        name=raw.description or raw.type,
        description=raw.description,
        currency_rate=raw.exchange_rate,
        currency_source=None,
    )


def transform_bank_account(raw: StripeBankAccount) -> Account:
    """Stripe bank accounts are always depository; the routing number identifies the bank."""
    name = raw.bank_name or raw.last4
    return Account(
        id=raw.id,
        name=name,
        currency=raw.currency,
        provider="stripe",
        institution=Institution(
            id=raw.routing_number or raw.id,
            name=name,
            logo=None,
            provider="stripe",
        ),
        type="depository",
        enrollment_id=None,
        routing_number=raw.routing_number or None,
    )


def transform_balance(raw: StripeBalance) -> Optional[Balance]:
    """First available balance entry in major units, None if Stripe reports none."""
    if not raw.available:
        return None
    entry = raw.available[0]
    return Balance(amount=to_major_units(entry.amount), currency=entry.currency)
