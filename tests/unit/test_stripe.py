"""
Unit Tests for the Stripe Adapter

HTTP traffic is served by tests.fakes.FakeHTTP through StripeAPIClient._request.

Run with:
    pytest tests/unit/test_stripe.py -v
"""

import pytest

from core.errors import UpstreamClientError, UpstreamContractError, ValidationError
from core.schemas import GetTransactionsRequest
from providers.stripe import StripeProvider
from providers.stripe.api_client import StripeAPIClient
from tests.fakes import Responses


def balance_transaction(txn_id: str, amount: int = 1000, type: str = "charge") -> dict:
    return {
        "id": txn_id,
        "object": "balance_transaction",
        "amount": amount,
        "currency": "usd",
        "created": 1718150400,
        "type": type,
        "status": "available",
        "net": amount - 30,
        "fee": 30,
        "reporting_category": "charge",
        "description": f"Payment {txn_id}",
    }


BANK_ACCOUNT = {
    "id": "ba_123",
    "object": "bank_account",
    "account": "acct_123",
    "bank_name": "STRIPE TEST BANK",
    "country": "US",
    "currency": "usd",
    "last4": "6789",
    "routing_number": "110000000",
    "status": "new",
}


@pytest.fixture
def stripe_http(fake_http, monkeypatch):
    return fake_http.install(monkeypatch, StripeAPIClient)


@pytest.fixture
def provider(test_settings):
    return StripeProvider(test_settings)


class TestTransactions:

    @pytest.mark.asyncio
    async def test_walks_every_page(self, provider, stripe_http):
        stripe_http.route("GET", "/balance_transactions", Responses([
            {"object": "list", "data": [balance_transaction("txn_1"), balance_transaction("txn_2")], "has_more": True},
            {"object": "list", "data": [balance_transaction("txn_3", -12345, "refund")], "has_more": False},
        ]))

        txns = await provider.get_transactions({"customer_id": "acct_123"})

        assert [t.id for t in txns] == ["txn_1", "txn_2", "txn_3"]
        assert txns[2].amount == 123.45
        assert txns[2].method == "refund"

        calls = stripe_http.calls_to("GET", "/balance_transactions")
        assert len(calls) == 2
        assert ("starting_after", "txn_2") in calls[1]["params"]
        assert calls[0]["headers"] == {"Stripe-Account": "acct_123"}

    @pytest.mark.asyncio
    async def test_explicit_limit_fetches_one_page(self, provider, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {
            "data": [balance_transaction("txn_1")], "has_more": True
        })

        txns = await provider.get_transactions(GetTransactionsRequest(customer_id="acct_123", limit=1))

        assert len(txns) == 1
        calls = stripe_http.calls_to("GET", "/balance_transactions")
        assert len(calls) == 1
        assert ("limit", "1") in calls[0]["params"]

    @pytest.mark.asyncio
    async def test_filters_are_forwarded(self, provider, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {"data": [], "has_more": False})

        await provider.get_transactions({
            "customer_id": "acct_123",
            "currency": "USD",
            "type": "payout",
            "expand": ["data.source"],
            "latest": True,
        })

        params = stripe_http.calls_to("GET", "/balance_transactions")[0]["params"]
        assert ("currency", "usd") in params
        assert ("type", "payout") in params
        assert ("expand[]", "data.source") in params

    @pytest.mark.asyncio
    async def test_empty_history(self, provider, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {"data": [], "has_more": False})
        assert await provider.get_transactions({"customer_id": "acct_123"}) == []

    @pytest.mark.asyncio
    async def test_requires_customer_id(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.get_transactions({})

        assert exc_info.value.fields == ["customer_id"]
        assert stripe_http.calls == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, 101])
    async def test_limit_out_of_range(self, provider, stripe_http, limit):
        with pytest.raises(ValidationError) as exc_info:
            await provider.get_transactions({"customer_id": "acct_123", "limit": limit})

        assert exc_info.value.fields == ["limit"]
        assert stripe_http.calls == []

    @pytest.mark.asyncio
    async def test_malformed_payload(self, provider, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {"data": [{"id": "txn_1"}], "has_more": False})

        with pytest.raises(UpstreamContractError):
            await provider.get_transactions({"customer_id": "acct_123"})


class TestAccounts:

    @pytest.mark.asyncio
    async def test_single_bank_account(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123/external_accounts/ba_123", BANK_ACCOUNT)

        accounts = await provider.get_accounts({"customer_id": "acct_123", "bank_account_id": "ba_123"})

        assert len(accounts) == 1
        assert accounts[0].id == "ba_123"
        assert accounts[0].routing_number == "110000000"
        assert accounts[0].type == "depository"

    @pytest.mark.asyncio
    async def test_requires_both_ids(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.get_accounts({"customer_id": "acct_123"})
        assert exc_info.value.fields == ["bank_account_id"]

    @pytest.mark.asyncio
    async def test_list_bank_accounts(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123/external_accounts", {
            "object": "list", "data": [BANK_ACCOUNT], "has_more": False
        })

        accounts = await provider.list_bank_accounts("acct_123", limit=5)

        assert [a.id for a in accounts] == ["ba_123"]
        params = stripe_http.calls_to("GET", "/accounts/acct_123/external_accounts")[0]["params"]
        assert params == {"object": "bank_account", "limit": "5"}

    @pytest.mark.asyncio
    async def test_delete_bank_account(self, provider, stripe_http):
        stripe_http.route("DELETE", "/accounts/acct_123/external_accounts/ba_123", {"id": "ba_123", "deleted": True})
        assert await provider.delete_bank_account("acct_123", "ba_123") is True

    @pytest.mark.asyncio
    async def test_delete_bank_account_requires_ids(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.delete_bank_account("acct_123")
        assert exc_info.value.fields == ["bank_account_id"]


class TestBalance:

    @pytest.mark.asyncio
    async def test_balance(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123/external_accounts/ba_123", BANK_ACCOUNT)
        stripe_http.route("GET", "/balance", {
            "object": "balance",
            "available": [{"amount": 250075, "currency": "usd"}],
            "pending": [{"amount": 0, "currency": "usd"}],
        })

        balance = await provider.get_account_balance({"account_id": "acct_123", "bank_account_id": "ba_123"})

        assert balance.amount == 2500.75
        assert balance.currency == "USD"
        assert stripe_http.calls_to("GET", "/balance")[0]["headers"] == {"Stripe-Account": "acct_123"}

    @pytest.mark.asyncio
    async def test_unknown_bank_account(self, provider, stripe_http):
        stripe_http.route(
            "GET",
            "/accounts/acct_123/external_accounts/ba_missing",
            UpstreamClientError("No such external account", provider="stripe", status_code=404),
        )

        with pytest.raises(UpstreamClientError):
            await provider.get_account_balance({"account_id": "acct_123", "bank_account_id": "ba_missing"})

        assert stripe_http.calls_to("GET", "/balance") == []


class TestDelete:

    @pytest.mark.asyncio
    async def test_delete_connected_account(self, provider, stripe_http):
        stripe_http.route("DELETE", "/accounts/acct_123", {"id": "acct_123", "object": "account", "deleted": True})
        assert await provider.delete_accounts({"account_id": "acct_123"}) is None

    @pytest.mark.asyncio
    async def test_unconfirmed_delete(self, provider, stripe_http):
        stripe_http.route("DELETE", "/accounts/acct_123", {"id": "acct_123", "deleted": False})
        with pytest.raises(UpstreamContractError):
            await provider.delete_accounts({"account_id": "acct_123"})


class TestHealth:

    @pytest.mark.asyncio
    async def test_ping_uses_platform_balance(self, provider, stripe_http):
        stripe_http.route("GET", "/balance", {"available": []})

        assert await provider.health_check() is True
        assert stripe_http.calls_to("GET", "/balance")[0]["headers"] is None

    def test_no_institutions(self, provider):
        assert not provider.supports("institutions")


class TestBankAccountManagement:

    @pytest.mark.asyncio
    async def test_get_bank_account(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123/external_accounts/ba_123", BANK_ACCOUNT)

        account = await provider.get_bank_account("acct_123", "ba_123")

        assert account.id == "ba_123"
        assert account.name == "STRIPE TEST BANK"
        assert account.currency == "USD"

    @pytest.mark.asyncio
    async def test_create_from_fields(self, provider, stripe_http):
        stripe_http.route("POST", "/accounts/acct_123/external_accounts", BANK_ACCOUNT)

        account = await provider.create_bank_account("acct_123", {
            "country": "US",
            "currency": "usd",
            "account_number": "000123456789",
            "routing_number": "110000000",
            "default_for_currency": True,
        })

        assert account.id == "ba_123"
        call = stripe_http.calls_to("POST", "/accounts/acct_123/external_accounts")[0]
        assert call["form"] == [
            ("external_account[object]", "bank_account"),
            ("external_account[country]", "US"),
            ("external_account[currency]", "usd"),
            ("external_account[account_number]", "000123456789"),
            ("external_account[routing_number]", "110000000"),
            ("external_account[default_for_currency]", "true"),
        ]
        assert call["json"] is None

    @pytest.mark.asyncio
    async def test_create_from_token(self, provider, stripe_http):
        stripe_http.route("POST", "/accounts/acct_123/external_accounts", BANK_ACCOUNT)

        await provider.create_bank_account("acct_123", "btok_123")

        call = stripe_http.calls_to("POST", "/accounts/acct_123/external_accounts")[0]
        assert call["form"] == [("external_account", "btok_123")]

    @pytest.mark.asyncio
    async def test_update_bank_account(self, provider, stripe_http):
        stripe_http.route(
            "POST",
            "/accounts/acct_123/external_accounts/ba_123",
            {**BANK_ACCOUNT, "account_holder_name": "Jane Doe"},
        )

        account = await provider.update_bank_account("acct_123", "ba_123", {
            "account_holder_name": "Jane Doe",
            "metadata": {"ref": "42"},
        })

        assert account.id == "ba_123"
        call = stripe_http.calls_to("POST", "/accounts/acct_123/external_accounts/ba_123")[0]
        assert call["form"] == [("account_holder_name", "Jane Doe"), ("metadata[ref]", "42")]

    @pytest.mark.asyncio
    async def test_create_requires_bank_account(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.create_bank_account("acct_123")

        assert exc_info.value.fields == ["bank_account"]
        assert stripe_http.calls == []

    @pytest.mark.asyncio
    async def test_update_requires_every_field(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.update_bank_account(account_id="acct_123")

        assert exc_info.value.fields == ["bank_account_id", "update"]
        assert stripe_http.calls == []


class TestBusinessAccount:

    @pytest.mark.asyncio
    async def test_raw_account_with_expand(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123", {
            "id": "acct_123",
            "object": "account",
            "type": "custom",
            "business_type": "company",
            "business_profile": {"name": "Acme Inc", "mcc": "5734"},
            "country": "US",
            "default_currency": "usd",
            "charges_enabled": True,
            "payouts_enabled": False,
            "requirements": {"currently_due": ["external_account"]},
        })

        account = await provider.get_business_account("acct_123", expand=["external_accounts", "settings"])

        assert account.id == "acct_123"
        assert account.business_profile.name == "Acme Inc"
        assert account.requirements.currently_due == ["external_account"]
        assert account.payouts_enabled is False
        params = stripe_http.calls_to("GET", "/accounts/acct_123")[0]["params"]
        assert params == [("expand[]", "external_accounts"), ("expand[]", "settings")]

    @pytest.mark.asyncio
    async def test_no_expand_sends_no_params(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123", {"id": "acct_123", "country": "US"})

        await provider.get_business_account("acct_123")

        assert stripe_http.calls_to("GET", "/accounts/acct_123")[0]["params"] is None

    @pytest.mark.asyncio
    async def test_requires_account_id(self, provider, stripe_http):
        with pytest.raises(ValidationError) as exc_info:
            await provider.get_business_account()
        assert exc_info.value.fields == ["account_id"]

    @pytest.mark.asyncio
    async def test_missing_country_is_contract_error(self, provider, stripe_http):
        stripe_http.route("GET", "/accounts/acct_123", {"id": "acct_123"})

        with pytest.raises(UpstreamContractError):
            await provider.get_business_account("acct_123")


class TestMalformedValues:

    @pytest.mark.asyncio
    async def test_bad_currency_code(self, provider, stripe_http):
        txn = {**balance_transaction("txn_1"), "currency": "usdx"}
        stripe_http.route("GET", "/balance_transactions", {"data": [txn], "has_more": False})

        with pytest.raises(UpstreamContractError) as exc_info:
            await provider.get_transactions({"customer_id": "acct_123"})

        assert exc_info.value.provider == "stripe"
