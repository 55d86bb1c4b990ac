"""
Provider Adapters

One sub-package per external provider, each exposing a ProviderInterface
subclass:

    plaid       aggregator (cursor-paginated transaction sync)
    teller      aggregator (mTLS, from_id pagination)
    gocardless  aggregator (requisitions, booked + pending transactions)
    stripe      payment processor (connected accounts, minor-unit amounts)

PROVIDER_REGISTRY is the lookup table the gateway resolves its provider
discriminant against. Adding a provider means adding one entry here.
"""

from typing import Dict, Type

from core.provider_interface import ProviderInterface
from providers.gocardless import GoCardlessProvider
from providers.plaid import PlaidProvider
from providers.stripe import StripeProvider
from providers.teller import TellerProvider


PROVIDER_REGISTRY: Dict[str, Type[ProviderInterface]] = {
    "plaid": PlaidProvider,
    "teller": TellerProvider,
    "gocardless": GoCardlessProvider,
    "stripe": StripeProvider,
}

__all__ = [
    "PROVIDER_REGISTRY",
    "GoCardlessProvider",
    "PlaidProvider",
    "StripeProvider",
    "TellerProvider",
]
