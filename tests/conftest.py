"""Shared pytest fixtures for the create-z3 test suite.

Provides reusable fixtures for:
- The bundled provider registry and a small custom registry
- A fake child-process runner that records every command
- A scaffold config that never touches the network or a real package manager
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from create_z3.config import ScaffoldConfig
from create_z3.providers import ProviderDescriptor, ProviderRegistry, load_registry


# ---------------------------------------------------------------------------
# Registries
# ---------------------------------------------------------------------------


@pytest.fixture(scope="session")
def registry() -> ProviderRegistry:
    """The registry loaded from the bundled providers.json."""
    return load_registry()


def _make_provider(provider_id: str, **overrides) -> ProviderDescriptor:
    prefix = provider_id.upper()
    data = {
        "id": provider_id,
        "display_name": provider_id.title(),
        "env_prefix": prefix,
        "social_provider_snippet": (
            "{\n"
            f"      clientId: process.env.{prefix}_CLIENT_ID as string,\n"
            f"      clientSecret: process.env.{prefix}_CLIENT_SECRET as string,\n"
            "    }"
        ),
        "readme_section": f"## {provider_id.title()} OAuth Setup\n\nCreate an app.",
    }
    data.update(overrides)
    return ProviderDescriptor.model_validate(data)


@pytest.fixture
def make_provider():
    """Factory building a minimal valid descriptor for a given id."""
    return _make_provider


@pytest.fixture
def acme_registry() -> ProviderRegistry:
    """Two fake providers, one of which declares a client-scoped variable."""
    return ProviderRegistry([
        _make_provider(
            "acme",
            env_entries=[
                {"name": "ACME_CLIENT_ID", "description": "Acme client id"},
                {"name": "ACME_PUBLISHABLE_KEY", "scope": "client", "description": "Acme key"},
            ],
        ),
        _make_provider("globex", popular=True),
    ])


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def scaffold_config() -> ScaffoldConfig:
    """Config using the bundled templates and npm."""
    return ScaffoldConfig(package_manager="npm")


# ---------------------------------------------------------------------------
# Child processes
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_runner() -> AsyncMock:
    """Runner stand-in that succeeds for every command.

    Set ``fake_runner.side_effect`` to customise per-command results.
    """
    return AsyncMock(return_value=(0, "", ""))

