"""create-z3: scaffold Z3 Stack applications (Convex + Better Auth).

The package is split into:

* ``create_z3.providers`` -- the OAuth provider registry
* ``create_z3.scaffolder`` -- marker substitution, code generation, backends
  and the ``init_project`` driver
* ``create_z3.theme`` -- default theme, remote themes and OKLCH conversion
* ``create_z3.cli`` -- the ``create-z3`` command
"""

__version__ = "0.4.0"

from create_z3.config import Framework, ProjectOptions, ScaffoldConfig, ThemeSource

__all__ = [
    "Framework",
    "ProjectOptions",
    "ScaffoldConfig",
    "ThemeSource",
    "__version__",
]
