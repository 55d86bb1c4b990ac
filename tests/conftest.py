"""
Shared fixtures

- test_settings: Settings with every credential filled and zero retry delay
- stub_tls: Skip loading the Teller client certificate
- fake_http: Route table standing in for BaseAPIClient._request
"""

import pytest

from core.config import Settings
from providers.teller import TellerProvider
from tests.fakes import FakeHTTP


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        provider=None,
        request_timeout=5,
        health_check_timeout=1,
        retry_max_attempts=3,
        retry_backoff="fixed",
        retry_base_delay=0,
        retry_max_delay=0,
        plaid_client_id="plaid-client",
        plaid_secret="plaid-secret",
        plaid_environment="sandbox",
        teller_certificate_path="/certs/teller.pem",
        teller_certificate_private_key_path="/certs/teller-key.pem",
        gocardless_secret_id="gc-id",
        gocardless_secret_key="gc-key",
        stripe_secret_key="sk_test_123",
    )


@pytest.fixture
def stub_tls(monkeypatch):
    """Teller adapters built without reading certificate files."""
    monkeypatch.setattr(TellerProvider, "_ssl_context", lambda self: None)


@pytest.fixture
def fake_http() -> FakeHTTP:
    return FakeHTTP()
