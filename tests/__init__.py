"""
Toolkit Broker Test Suite

Covers the catalog registry, broker dispatch, aliasing, rate limiting,
catalog validation and the HTTP surface. Fixtures build fresh services
per test; nothing relies on module-level state.
"""
