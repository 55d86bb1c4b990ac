"""
GoCardless Bank Account Data Raw Response Schemas

GoCardless follows the Berlin Group field naming (camelCase); models expose
snake_case attributes and read the upstream names through aliases.
"""

from typing import List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field, model_validator


class GoCardlessObject(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class GoCardlessToken(GoCardlessObject):
    """POST /token/new/"""

    access: str
    access_expires: Optional[int] = None


class GoCardlessRequisition(GoCardlessObject):
    """GET /requisitions/{id}/"""

    id: str
    status: Optional[str] = None
    institution_id: Optional[str] = None
    accounts: List[str] = []


class GoCardlessAccountMetadata(GoCardlessObject):
    """GET /accounts/{id}/"""

    id: str
    institution_id: str
    iban: Optional[str] = None
    status: Optional[str] = None
    owner_name: Optional[str] = None


class GoCardlessAccountDetail(GoCardlessObject):
    currency: str
    name: Optional[str] = None
    product: Optional[str] = None
    cash_account_type: Optional[str] = Field(None, alias="cashAccountType")
    iban: Optional[str] = None
    owner_name: Optional[str] = Field(None, alias="ownerName")


class GoCardlessAccountDetails(GoCardlessObject):
    """GET /accounts/{id}/details/"""

    account: GoCardlessAccountDetail


class GoCardlessInstitution(GoCardlessObject):
    """GET /institutions/{id}/ and /institutions/?country="""

    id: str
    name: str
    logo: Optional[str] = None
    bic: Optional[str] = None
    countries: List[str] = []


class GoCardlessAmount(GoCardlessObject):
    amount: str
    currency: str


class GoCardlessCurrencyExchange(GoCardlessObject):
    source_currency: Optional[str] = Field(None, alias="sourceCurrency")
    exchange_rate: Optional[str] = Field(None, alias="exchangeRate")
    target_currency: Optional[str] = Field(None, alias="targetCurrency")


class GoCardlessBalanceAfterTransaction(GoCardlessObject):
    balance_amount: GoCardlessAmount = Field(..., alias="balanceAmount")


class GoCardlessTransaction(GoCardlessObject):
    transaction_id: Optional[str] = Field(None, alias="transactionId")
    internal_transaction_id: Optional[str] = Field(None, alias="internalTransactionId")
    booking_date: Optional[str] = Field(None, alias="bookingDate")
    value_date: Optional[str] = Field(None, alias="valueDate")
    booking_date_time: Optional[str] = Field(None, alias="bookingDateTime")
    transaction_amount: GoCardlessAmount = Field(..., alias="transactionAmount")
    # Single object in older responses, list in newer ones
    currency_exchange: Optional[Union[GoCardlessCurrencyExchange, List[GoCardlessCurrencyExchange]]] = Field(
        None, alias="currencyExchange"
    )
    creditor_name: Optional[str] = Field(None, alias="creditorName")
    debtor_name: Optional[str] = Field(None, alias="debtorName")
    remittance_information_unstructured: Optional[str] = Field(None, alias="remittanceInformationUnstructured")
    remittance_information_unstructured_array: Optional[List[str]] = Field(
        None, alias="remittanceInformationUnstructuredArray"
    )
    additional_information: Optional[str] = Field(None, alias="additionalInformation")
    proprietary_bank_transaction_code: Optional[str] = Field(None, alias="proprietaryBankTransactionCode")
    balance_after_transaction: Optional[GoCardlessBalanceAfterTransaction] = Field(
        None, alias="balanceAfterTransaction"
    )

    @model_validator(mode="after")
    def require_a_date(self):
        if not (self.booking_date or self.value_date or self.booking_date_time):
            raise ValueError("transaction has no bookingDate, valueDate or bookingDateTime")
        return self


class GoCardlessTransactionGroups(GoCardlessObject):
    booked: List[GoCardlessTransaction] = []
    pending: List[GoCardlessTransaction] = []


class GoCardlessTransactions(GoCardlessObject):
    """GET /accounts/{id}/transactions/"""

    transactions: GoCardlessTransactionGroups


class GoCardlessBalanceEntry(GoCardlessObject):
    balance_amount: GoCardlessAmount = Field(..., alias="balanceAmount")
    balance_type: str = Field(..., alias="balanceType")


class GoCardlessBalances(GoCardlessObject):
    """GET /accounts/{id}/balances/"""

    balances: List[GoCardlessBalanceEntry] = []
