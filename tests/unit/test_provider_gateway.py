"""
Unit Tests for ProviderGateway

Covers provider selection, degraded mode, retry behaviour around provider
calls, provider-specific calls and the all-provider health check.

Run with:
    pytest tests/unit/test_provider_gateway.py -v
"""

import pytest

from core.errors import (
    ConfigurationError,
    InternalError,
    TransientUpstreamError,
    UnsupportedOperation,
    UpstreamClientError,
    UpstreamContractError,
    ValidationError,
)
from core.provider_gateway import ProviderGateway
from core.retry import RetryPolicy
from core.schemas import (
    DeleteAccountsRequest,
    GetAccountBalanceRequest,
    GetAccountsRequest,
    GetInstitutionsRequest,
    GetTransactionsRequest,
)
from providers.gocardless import GoCardlessProvider
from providers.plaid import PlaidProvider
from providers.stripe import StripeProvider
from providers.stripe.api_client import StripeAPIClient
from providers.teller import TellerProvider
from tests.fakes import Responses


FAST_RETRY = RetryPolicy(max_attempts=3, backoff="fixed", base_delay=0, max_delay=0)


@pytest.fixture
def stripe_http(fake_http, monkeypatch):
    return fake_http.install(monkeypatch, StripeAPIClient)


# ============================================
# Selection
# ============================================

class TestSelection:

    def test_explicit_provider(self, test_settings):
        gateway = ProviderGateway("stripe", config=test_settings)
        assert isinstance(gateway.provider, StripeProvider)
        assert gateway.provider_name == "stripe"
        assert not gateway.is_degraded

    def test_discriminant_from_settings(self, test_settings):
        config = test_settings.model_copy(update={"provider": "plaid"})
        assert isinstance(ProviderGateway(config=config).provider, PlaidProvider)

    @pytest.mark.parametrize("name", ["GoCardless", " gocardless ", "GOCARDLESS"])
    def test_case_insensitive(self, test_settings, name):
        assert isinstance(ProviderGateway(name, config=test_settings).provider, GoCardlessProvider)

    @pytest.mark.parametrize("name", [None, "", "yodlee"])
    def test_unknown_is_degraded(self, test_settings, name):
        gateway = ProviderGateway(name, config=test_settings)
        assert gateway.is_degraded
        assert gateway.provider_name is None
        assert repr(gateway) == "<ProviderGateway(provider=None)>"

    def test_missing_credentials_fail_construction(self, test_settings):
        config = test_settings.model_copy(update={"plaid_secret": None})
        with pytest.raises(ConfigurationError):
            ProviderGateway("plaid", config=config)

    def test_list_providers(self):
        assert ProviderGateway.list_providers() == ["plaid", "teller", "gocardless", "stripe"]


# ============================================
# Degraded Mode
# ============================================

class TestDegradedMode:

    @pytest.fixture
    def gateway(self, test_settings):
        return ProviderGateway("unknown", config=test_settings, retry_policy=FAST_RETRY)

    @pytest.mark.asyncio
    async def test_empty_results(self, gateway):
        assert await gateway.get_transactions(GetTransactionsRequest(customer_id="acct_1")) == []
        assert await gateway.get_accounts(GetAccountsRequest(access_token="t")) == []
        assert await gateway.get_account_balance(GetAccountBalanceRequest(account_id="a")) is None
        assert await gateway.get_institutions(GetInstitutionsRequest(country_code="GB")) == []
        assert await gateway.delete_accounts(DeleteAccountsRequest(account_id="a")) is None

    @pytest.mark.asyncio
    async def test_provider_specific_call(self, gateway):
        with pytest.raises(UnsupportedOperation):
            await gateway.call("list_bank_accounts", "acct_1")


# ============================================
# Data Operations
# ============================================

class TestOperations:

    @pytest.fixture
    def gateway(self, test_settings):
        return ProviderGateway("stripe", config=test_settings, retry_policy=FAST_RETRY)

    @pytest.mark.asyncio
    async def test_transactions(self, gateway, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {
            "data": [{"id": "txn_1", "amount": 12345, "currency": "usd", "created": 1718150400, "type": "refund"}],
            "has_more": False,
        })

        txns = await gateway.get_transactions(GetTransactionsRequest(customer_id="acct_1"))

        assert len(txns) == 1
        assert txns[0].amount == 123.45
        assert txns[0].method == "refund"

    @pytest.mark.asyncio
    async def test_transient_error_retried_until_success(self, gateway, stripe_http):
        outage = TransientUpstreamError("HTTP 503", provider="stripe", status_code=503)
        stripe_http.route("GET", "/balance_transactions", Responses([
            outage,
            outage,
            {"data": [], "has_more": False},
        ]))

        assert await gateway.get_transactions({"customer_id": "acct_1"}) == []
        assert len(stripe_http.calls) == 3

    @pytest.mark.asyncio
    async def test_retry_ceiling(self, gateway, stripe_http):
        stripe_http.route(
            "GET", "/balance_transactions",
            TransientUpstreamError("HTTP 503", provider="stripe", status_code=503),
        )

        with pytest.raises(TransientUpstreamError):
            await gateway.get_transactions({"customer_id": "acct_1"})

        assert len(stripe_http.calls) == 3

    @pytest.mark.asyncio
    async def test_client_error_not_retried(self, gateway, stripe_http):
        stripe_http.route(
            "GET", "/accounts/acct_1/external_accounts/ba_1",
            UpstreamClientError("HTTP 404", provider="stripe", status_code=404),
        )

        with pytest.raises(UpstreamClientError):
            await gateway.get_accounts({"customer_id": "acct_1", "bank_account_id": "ba_1"})

        assert len(stripe_http.calls) == 1

    @pytest.mark.asyncio
    async def test_validation_error_not_retried(self, gateway, stripe_http):
        with pytest.raises(ValidationError):
            await gateway.get_transactions({})
        assert stripe_http.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_operation(self, gateway, stripe_http):
        with pytest.raises(UnsupportedOperation) as exc_info:
            await gateway.get_institutions(GetInstitutionsRequest(country_code="US"))

        assert exc_info.value.provider == "stripe"
        assert stripe_http.calls == []

    @pytest.mark.asyncio
    async def test_provider_specific_call(self, gateway, stripe_http):
        stripe_http.route("GET", "/accounts/acct_1/external_accounts", {
            "data": [{"id": "ba_1", "currency": "usd", "last4": "6789", "bank_name": "Test Bank"}],
            "has_more": False,
        })

        accounts = await gateway.call("list_bank_accounts", account_id="acct_1", limit=3)

        assert [a.id for a in accounts] == ["ba_1"]

    @pytest.mark.asyncio
    async def test_business_account_call(self, gateway, stripe_http):
        stripe_http.route("GET", "/accounts/acct_1", {"id": "acct_1", "country": "US", "business_type": "company"})

        account = await gateway.call("get_business_account", account_id="acct_1", expand=["settings"])

        assert account.id == "acct_1"
        assert account.business_type == "company"
        assert stripe_http.calls_to("GET", "/accounts/acct_1")[0]["params"] == [("expand[]", "settings")]

    @pytest.mark.asyncio
    async def test_malformed_value_not_retried(self, gateway, stripe_http):
        stripe_http.route("GET", "/balance_transactions", {
            "data": [{"id": "txn_1", "amount": 100, "currency": "dollars", "created": 1718150400, "type": "charge"}],
            "has_more": False,
        })

        with pytest.raises(UpstreamContractError):
            await gateway.get_transactions({"customer_id": "acct_1"})

        assert len(stripe_http.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["teleport", "_ping", "__init__"])
    async def test_unknown_or_private_call(self, gateway, method):
        with pytest.raises(UnsupportedOperation):
            await gateway.call(method)


# ============================================
# Health Check
# ============================================

class TestHealthCheck:

    @pytest.mark.asyncio
    async def test_every_provider_reported(self, test_settings, stub_tls, monkeypatch):
        async def ok(self):
            return None

        async def down(self):
            raise TransientUpstreamError("down", provider=self.name)

        monkeypatch.setattr(PlaidProvider, "_ping", ok)
        monkeypatch.setattr(TellerProvider, "_ping", down)
        monkeypatch.setattr(GoCardlessProvider, "_ping", down)
        monkeypatch.setattr(StripeProvider, "_ping", down)

        gateway = ProviderGateway("stripe", config=test_settings)
        health = await gateway.get_health_check()

        assert health.providers == {"plaid": True, "teller": False, "gocardless": False, "stripe": False}
        assert health.to_response()["plaid"] == {"healthy": True}

    @pytest.mark.asyncio
    async def test_degraded_gateway_still_probes(self, test_settings, stub_tls, monkeypatch):
        async def ok(self):
            return None

        for provider_class in (PlaidProvider, TellerProvider, GoCardlessProvider, StripeProvider):
            monkeypatch.setattr(provider_class, "_ping", ok)

        health = await ProviderGateway(None, config=test_settings).get_health_check()

        assert all(health.providers.values())
        assert len(health.providers) == 4

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_unhealthy(self, test_settings, stub_tls, monkeypatch):
        async def ok(self):
            return None

        for provider_class in (PlaidProvider, TellerProvider, GoCardlessProvider, StripeProvider):
            monkeypatch.setattr(provider_class, "_ping", ok)

        config = test_settings.model_copy(update={"gocardless_secret_key": None})
        health = await ProviderGateway(None, config=config).get_health_check()

        assert health.providers["gocardless"] is False
        assert health.providers["plaid"] is True

    @pytest.mark.asyncio
    async def test_fan_out_failure(self, test_settings, monkeypatch):
        async def broken(self, name, provider_class):
            raise RuntimeError("event loop trouble")

        monkeypatch.setattr(ProviderGateway, "_probe", broken)

        with pytest.raises(InternalError) as exc_info:
            await ProviderGateway(None, config=test_settings).get_health_check()

        assert exc_info.value.http_status == 500
