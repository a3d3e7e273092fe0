"""
Shared pytest fixtures and configuration for worklane tests.

This module provides:
- Default runner and settings cleanup for test isolation
- structlog reset so CLI tests cannot leave loggers bound to closed streams
"""

from pathlib import Path
from typing import Generator

import pytest
import structlog

from worklane.core import settings as settings_module
from worklane.orchestration import reset_default_runner


# =============================================================================
# Test Markers Configuration
# =============================================================================


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Auto-mark tests based on their location."""
    for item in items:
        test_path = Path(item.fspath).relative_to(Path(__file__).parent)

        if "cli" in test_path.parts:
            item.add_marker(pytest.mark.integration)

        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


# =============================================================================
# Isolation Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def clean_default_runner() -> Generator[None, None, None]:
    """Drop any initializer / failure handler a test put on the default runner."""
    reset_default_runner()
    yield
    reset_default_runner()


@pytest.fixture(autouse=True)
def clean_settings_cache() -> Generator[None, None, None]:
    """Force settings to be re-read from the (monkeypatched) environment."""
    settings_module._settings = None
    yield
    settings_module._settings = None


@pytest.fixture(autouse=True)
def reset_structlog() -> Generator[None, None, None]:
    yield
    structlog.reset_defaults()

