"""Pytest configuration and shared fixtures for event registry tests.

This module provides:
- Event vocabularies used across test modules
- Registry and recorder fixtures
- Environment isolation for configuration overrides
- Temporary config file generators
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

import pytest

# =============================================================================
# Path Configuration
# =============================================================================

# Add project root to path for imports
PROJECT_ROOT = Path(__file__).parent.parent

sys.path.insert(0, str(PROJECT_ROOT))

from event_registry import DeliveryRecorder, EventRegistry, RegistryConfig  # noqa: E402


# =============================================================================
# Pytest Configuration Hooks
# =============================================================================

def pytest_collection_modifyitems(
    config: pytest.Config,
    items: list[pytest.Item]
) -> None:
    """Modify test collection - auto-apply markers based on name."""
    for item in items:
        if "dispatch" in item.name.lower() or "during" in item.name.lower():
            item.add_marker(pytest.mark.dispatch)


# =============================================================================
# Event Vocabularies
# =============================================================================

class FooBarEvents(Protocol):
    """Vocabulary shared by most tests."""

    def foo(self, a: int, b: bool) -> None: ...

    def bar(self) -> None: ...


# =============================================================================
# Registry Fixtures
# =============================================================================

@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Drop EVENT_REGISTRY_* overrides inherited from the outer environment."""
    import os

    for key in list(os.environ):
        if key.startswith("EVENT_REGISTRY_"):
            monkeypatch.delenv(key)


@pytest.fixture
def registry() -> EventRegistry:
    """A strict registry over ``FooBarEvents``."""
    return EventRegistry(FooBarEvents)


@pytest.fixture
def isolating_registry() -> EventRegistry:
    """A registry that logs handler errors instead of raising them."""
    return EventRegistry(FooBarEvents, RegistryConfig(handler_errors="isolate"))


@pytest.fixture
def open_registry() -> EventRegistry:
    """A registry that accepts any event name."""
    return EventRegistry()


@pytest.fixture
def recorder() -> DeliveryRecorder:
    return DeliveryRecorder()


# =============================================================================
# Config File Fixtures
# =============================================================================

@pytest.fixture
def tmp_config_file(tmp_path: Path) -> Callable[[str, str], Path]:
    """Factory fixture to create temporary config files.

    Usage:
        def test_something(tmp_config_file):
            path = tmp_config_file("registry.yaml", "handler_errors: isolate")
    """
    def _create(filename: str, content: str) -> Path:
        filepath = tmp_path / filename
        filepath.parent.mkdir(parents=True, exist_ok=True)
        filepath.write_text(content)
        return filepath
    return _create
