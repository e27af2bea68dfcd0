"""
Shared utilities for the pricing engine.

This package aggregates common building blocks consumed by the pricing
packages:

- config: Settings via pydantic-settings
- logging: Structured logging with checkout correlation
- metrics: Prometheus metrics helpers
- errors: Canonical error types and responses

Do not import from service_* packages into shared/.
"""
