"""
Test Suite

Structure:
- tests/unit/: Tests for individual components (schemas, transforms, adapters, gateway)

Uses pytest with pytest-asyncio for testing async functionality. No test
touches the network: provider API clients have their `_request` replaced
by the FakeHTTP fixture from conftest.py.
"""
