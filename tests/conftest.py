"""Pytest configuration and shared fixtures for the flagbind test suite."""

import logging

import pytest

from flagbind import Binder, Command


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests - fast, isolated component tests")
    config.addinivalue_line("markers", "integration: Integration tests - component interaction tests")
    config.addinivalue_line("markers", "cli: Tests related to command-line interface")


@pytest.fixture
def command() -> Command:
    """Provide a fresh root command."""
    return Command("app")


@pytest.fixture
def binder(command: Command) -> Binder:
    """Provide a binder wrapping the ``command`` fixture."""
    return Binder(command)


@pytest.fixture
def debug_logs(caplog: pytest.LogCaptureFixture) -> pytest.LogCaptureFixture:
    """Capture flagbind debug logging."""
    caplog.set_level(logging.DEBUG, logger="flagbind")
    return caplog
