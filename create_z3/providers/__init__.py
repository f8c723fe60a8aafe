"""OAuth provider registry.

Quick usage::

    from create_z3.providers import load_registry

    registry = load_registry()
    google = registry.get("google")
    print(google.client_id_var)
"""

from create_z3.providers.models import EnvEntry, ProviderDescriptor, ProviderDocs
from create_z3.providers.registry import (
    DuplicateProviderError,
    ProviderRegistry,
    UnknownProviderError,
    load_registry,
)

__all__ = [
    "DuplicateProviderError",
    "EnvEntry",
    "ProviderDescriptor",
    "ProviderDocs",
    "ProviderRegistry",
    "UnknownProviderError",
    "load_registry",
]
