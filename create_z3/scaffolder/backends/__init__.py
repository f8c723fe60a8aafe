"""Framework backends and the factory that picks one."""

from __future__ import annotations

from pathlib import Path

from create_z3.config import Framework
from create_z3.providers import ProviderRegistry

from .nextjs import NextJSBackend
from .tanstack import TanStackBackend

_BACKENDS = {
    Framework.NEXTJS: NextJSBackend,
    Framework.TANSTACK: TanStackBackend,
}


class UnsupportedFrameworkError(ValueError):
    def __init__(self, framework: object) -> None:
        self.framework = framework
        super().__init__(f"Unsupported framework: {framework}")


def create_backend(
    framework: Framework | str, target_path: Path, registry: ProviderRegistry
) -> NextJSBackend | TanStackBackend:
    """Instantiate the backend for *framework* bound to *target_path*."""
    try:
        backend_cls = _BACKENDS[Framework(framework)]
    except (ValueError, KeyError):
        raise UnsupportedFrameworkError(framework) from None
    return backend_cls(target_path, registry)


__all__ = [
    "NextJSBackend",
    "TanStackBackend",
    "UnsupportedFrameworkError",
    "create_backend",
]
