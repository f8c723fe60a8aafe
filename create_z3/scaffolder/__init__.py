"""Project scaffolder: template copy, marker substitution and post-processing.

Quick usage::

    from create_z3.providers import load_registry
    from create_z3.scaffolder import create_backend, init_project

    backend = create_backend("tanstack", Path("my-app"), load_registry())
    result = await init_project(backend, options)
"""

from create_z3.scaffolder.backends import (
    NextJSBackend,
    TanStackBackend,
    UnsupportedFrameworkError,
    create_backend,
)
from create_z3.scaffolder.installer import (
    FrameworkBackend,
    InitResult,
    copy_template,
    init_project,
)
from create_z3.scaffolder.markers import (
    Keep,
    MarkerNotFoundError,
    Remove,
    replace_marker,
)
from create_z3.scaffolder.tasks import CommandError

__all__ = [
    "CommandError",
    "FrameworkBackend",
    "InitResult",
    "Keep",
    "MarkerNotFoundError",
    "NextJSBackend",
    "Remove",
    "TanStackBackend",
    "UnsupportedFrameworkError",
    "copy_template",
    "create_backend",
    "init_project",
    "replace_marker",
]
