"""
Shared utilities for the Resource Manager client.

This package aggregates common building blocks consumed by the client:

- config: Client configuration via pydantic-settings
- logging: Structured logging with trace correlation
- tracing: OpenTelemetry tracing helpers
- errors: Canonical error type, error kinds and responses
- retry: Retry controller with bounded exponential backoff

Do not import from resource_manager into shared/.
"""
