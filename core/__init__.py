"""
Core Package

Contains the provider-agnostic gateway logic:
- ProviderInterface: Abstract base class every provider adapter implements
- ProviderGateway: Facade selecting one adapter and routing calls through retry
- RetryPolicy: Bounded retry on transient upstream failures
- Schemas: Canonical Pydantic models (Account, Transaction, Balance, ...)
- Errors: Typed error taxonomy shared by adapters and callers

Nothing in this package knows about a specific provider.
"""
