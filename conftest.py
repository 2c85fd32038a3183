"""
Pytest configuration and shared fixtures.

This file contains pytest configuration and fixtures that are available
to all test modules in the project.
"""

import logging
import io

import pytest

# Import all fixtures from the fixtures module
from tests.fixtures import *


def pytest_configure(config):
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that test individual components in isolation"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests that test component interactions"
    )
    config.addinivalue_line(
        "markers", "config: Configuration-related tests"
    )
    config.addinivalue_line(
        "markers", "routing: Rule matching and path template tests"
    )
    config.addinivalue_line(
        "markers", "proxy: Forwarding and orchestration tests"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location and content."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)

        if "config" in item.name:
            item.add_marker(pytest.mark.config)

        if "match" in item.name or "path" in item.name:
            item.add_marker(pytest.mark.routing)

        if "forward" in item.name or "proxy" in item.name:
            item.add_marker(pytest.mark.proxy)


@pytest.fixture(autouse=True)
def isolate_settings(monkeypatch, tmp_path):
    """Reset cached settings and point the loader at an empty config dir."""
    import route_proxy.config

    monkeypatch.setattr(route_proxy.config, "_proxy_settings", None)
    monkeypatch.setenv("ROUTE_PROXY_CONFIG_DIR", str(tmp_path / "config"))
    for key in ("ROUTE_PROXY_LOG_LEVEL", "ROUTE_PROXY_LOG_FORMAT", "ROUTE_PROXY_LOG_FILE", "ROUTE_PROXY_UPSTREAM_BASE_URL"):
        monkeypatch.delenv(key, raising=False)
    yield


@pytest.fixture
def capture_logs():
    """Capture log output during tests."""
    log_buffer = io.StringIO()

    handler = logging.StreamHandler(log_buffer)
    handler.setLevel(logging.DEBUG)

    root_logger = logging.getLogger()
    root_logger.addHandler(handler)
    original_level = root_logger.level
    root_logger.setLevel(logging.DEBUG)

    yield log_buffer

    root_logger.removeHandler(handler)
    root_logger.setLevel(original_level)
