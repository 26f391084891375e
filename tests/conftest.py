"""Shared fixtures for the scanner test suite.

Run pytest from the project root; pythonpath in pyproject.toml covers src
and the project root (for tests.scanner_test_utils).
"""

from unittest.mock import MagicMock

import pytest

from rust_compliance_scanner.domain.config import ConfigurationLoader


@pytest.fixture
def config_loader() -> ConfigurationLoader:
    """Defaults, but with documentation checks off so fixtures stay small."""
    return ConfigurationLoader({"require_documentation": False})


@pytest.fixture
def telemetry() -> MagicMock:
    return MagicMock()
