"""
Root pytest configuration.
"""

from __future__ import annotations

from collections.abc import Generator

import pytest


# Register netlog testing fixtures for all tests
pytest_plugins = ("netlog.testing.fixtures",)


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line(
        "markers",
        "critical: Tests that must never fail - core functionality",
    )
    config.addinivalue_line(
        "markers",
        "integration: Tests requiring a local HTTP server",
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests that take >1 second",
    )
    config.addinivalue_line(
        "markers",
        "property: Property-based tests (may be slow)",
    )


@pytest.fixture(autouse=True)
def reset_diagnostics_cache() -> Generator[None, None, None]:
    """Reset the cached diagnostics switch and rate limits around each test."""
    import netlog.core.diagnostics as diag

    diag._internal_logging_enabled = None
    diag._stream = None
    diag._reset_rate_limits()
    yield
    diag._internal_logging_enabled = None
    diag._stream = None
    diag._reset_rate_limits()


@pytest.fixture(autouse=True)
def reset_level_registry() -> Generator[None, None, None]:
    from netlog.core.levels import _reset_registry

    _reset_registry()
    yield
    _reset_registry()
