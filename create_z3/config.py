"""create-z3 configuration.

Two kinds of settings flow through a scaffold run:

* ``ProjectOptions`` -- the user's choices for one project (framework,
  authentication providers, theme, git/dependency setup). Built once from the
  CLI arguments and frozen before orchestration starts.
* ``ScaffoldConfig`` -- run-wide tunables (template location, package manager,
  theme conversion) that can also be supplied through environment variables.

Both are Pydantic v2 models so invalid input is rejected at construction time.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

_DEFAULT_TEMPLATE_ROOT = Path(__file__).parent / "scaffolder" / "templates"

PackageManager = Literal["npm", "pnpm", "yarn", "bun"]


class Framework(str, Enum):
    """Target web framework for the generated project."""

    NEXTJS = "nextjs"
    TANSTACK = "tanstack"

    @property
    def display_name(self) -> str:
        return {"nextjs": "Next.js", "tanstack": "TanStack Start"}[self.value]


class ThemeSource(BaseModel):
    """A user-supplied theme: either a URL to fetch or raw CSS."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["url", "css"]
    content: str = Field(..., min_length=1)


class ProjectOptions(BaseModel):
    """Everything the user chose for one scaffold invocation.

    ``oauth_providers`` behaves as an ordered set: ids are normalised to
    lowercase, duplicates are dropped and the first-seen order is kept. That
    order is the emission order of every generated block.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., min_length=1)
    framework: Framework = Framework.TANSTACK
    email_password_auth: bool = True
    oauth_providers: tuple[str, ...] = ()
    theme: Optional[ThemeSource] = None
    init_git: bool = True
    install_dependencies: bool = True
    create_github_repo: bool = False
    github_repo_private: bool = True

    @field_validator("oauth_providers", mode="before")
    @classmethod
    def _dedupe_providers(cls, value: object) -> tuple[str, ...]:
        if value is None:
            return ()
        if isinstance(value, str):
            value = [value]
        seen: dict[str, None] = {}
        for raw in value:  # type: ignore[union-attr]
            provider_id = str(raw).strip().lower()
            if provider_id:
                seen.setdefault(provider_id, None)
        return tuple(seen)

    @model_validator(mode="after")
    def _github_needs_git(self) -> "ProjectOptions":
        if self.create_github_repo and not self.init_git:
            raise ValueError("create_github_repo requires init_git")
        return self

    @property
    def has_authentication(self) -> bool:
        """True when at least one sign-in method was selected."""
        return self.email_password_auth or bool(self.oauth_providers)

    def auth_summary(self) -> str:
        """Human-readable one-liner describing the selected sign-in methods."""
        providers = ", ".join(self.oauth_providers)
        if self.email_password_auth and self.oauth_providers:
            return f"Email/Password + OAuth ({providers})"
        if self.email_password_auth:
            return "Email/Password"
        if self.oauth_providers:
            return f"OAuth ({providers})"
        return "None selected"


class ScaffoldConfig(BaseModel):
    """Run-wide settings that are not part of the user's project choices."""

    template_root: Path = Field(default=_DEFAULT_TEMPLATE_ROOT)
    package_manager: PackageManager = Field(default="npm")
    convert_theme_to_oklch: bool = Field(
        default=True, description="Rewrite colours of fetched URL themes to oklch()"
    )
    theme_fetch_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    commit_message: str = Field(default="Initial commit from create-z3")

    @classmethod
    def from_env(cls) -> "ScaffoldConfig":
        """Build a ``ScaffoldConfig`` from environment variables.

        Recognised variables (all optional):
            CREATE_Z3_TEMPLATE_DIR, CREATE_Z3_PACKAGE_MANAGER,
            CREATE_Z3_CONVERT_THEME, CREATE_Z3_THEME_TIMEOUT.

        When no package manager is forced, it is detected from
        ``npm_config_user_agent`` (set by ``npx``/``pnpm dlx``/``bunx``).
        """
        from create_z3.utils import detect_package_manager

        kwargs: dict[str, object] = {}
        if os.environ.get("CREATE_Z3_TEMPLATE_DIR"):
            kwargs["template_root"] = Path(os.environ["CREATE_Z3_TEMPLATE_DIR"])
        kwargs["package_manager"] = os.environ.get(
            "CREATE_Z3_PACKAGE_MANAGER"
        ) or detect_package_manager(os.environ.get("npm_config_user_agent", ""))
        if os.environ.get("CREATE_Z3_CONVERT_THEME"):
            kwargs["convert_theme_to_oklch"] = os.environ[
                "CREATE_Z3_CONVERT_THEME"
            ].strip().lower() not in ("0", "false", "no")
        if os.environ.get("CREATE_Z3_THEME_TIMEOUT"):
            raw = os.environ["CREATE_Z3_THEME_TIMEOUT"]
            try:
                kwargs["theme_fetch_timeout"] = float(raw)
            except ValueError:
                raise ValueError(
                    f"CREATE_Z3_THEME_TIMEOUT must be a number of seconds, got {raw!r}"
                ) from None
        return cls(**kwargs)
