"""Immutable registry of OAuth provider descriptors.

The registry is an explicit value: build it once at startup (usually with
:func:`load_registry`) and hand it to the generators and backends that need
it. There is no module-level mutable table.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator
from importlib import resources
from pathlib import Path
from types import MappingProxyType

from .models import ProviderDescriptor


class UnknownProviderError(LookupError):
    """Raised when a provider id is not present in the registry."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Unknown OAuth provider: {provider_id}")


class DuplicateProviderError(ValueError):
    """Raised when two descriptors share the same id."""

    def __init__(self, provider_id: str) -> None:
        self.provider_id = provider_id
        super().__init__(f"Duplicate OAuth provider id: {provider_id}")


class ProviderRegistry:
    """Read-only mapping of provider id to :class:`ProviderDescriptor`.

    Iteration order is the order the descriptors were supplied in (the data
    file lists popular providers first).
    """

    def __init__(self, providers: Iterable[ProviderDescriptor]) -> None:
        table: dict[str, ProviderDescriptor] = {}
        for provider in providers:
            if provider.id in table:
                raise DuplicateProviderError(provider.id)
            table[provider.id] = provider
        self._providers = MappingProxyType(table)

    def __len__(self) -> int:
        return len(self._providers)

    def __iter__(self) -> Iterator[ProviderDescriptor]:
        return iter(self._providers.values())

    def __contains__(self, provider_id: object) -> bool:
        return provider_id in self._providers

    def get(self, provider_id: str) -> ProviderDescriptor:
        """Return the descriptor for *provider_id*.

        Raises:
            UnknownProviderError: If the id is not registered.
        """
        try:
            return self._providers[provider_id]
        except KeyError:
            raise UnknownProviderError(provider_id) from None

    def resolve(self, provider_ids: Iterable[str]) -> list[ProviderDescriptor]:
        """Look up every id in order, failing on the first unknown one."""
        return [self.get(provider_id) for provider_id in provider_ids]

    def ids(self) -> list[str]:
        return list(self._providers)

    def popular(self) -> list[ProviderDescriptor]:
        return [p for p in self._providers.values() if p.popular]

    def additional(self) -> list[ProviderDescriptor]:
        return [p for p in self._providers.values() if not p.popular]

    def sorted_by_name(self) -> list[ProviderDescriptor]:
        """All providers A-Z by display name, as shown in provider pickers."""
        return sorted(self._providers.values(), key=lambda p: p.display_name.lower())

    def requiring_extra_config(self, provider_ids: Iterable[str]) -> list[ProviderDescriptor]:
        """Selected providers that need manual setup beyond id/secret."""
        return [p for p in self.resolve(provider_ids) if p.requires_extra_config]


def load_registry(path: str | Path | None = None) -> ProviderRegistry:
    """Load a registry from a JSON data file.

    Args:
        path: JSON file with a top-level ``"providers"`` array. Defaults to
            the ``providers.json`` bundled with this package.
    """
    if path is None:
        raw = resources.files(__package__).joinpath("providers.json").read_text(encoding="utf-8")
    else:
        raw = Path(path).read_text(encoding="utf-8")
    data = json.loads(raw)
    return ProviderRegistry(
        ProviderDescriptor.model_validate(item) for item in data["providers"]
    )
