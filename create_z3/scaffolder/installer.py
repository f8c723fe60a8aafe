"""Framework-agnostic project initialisation.

A framework backend only knows *where* things live in its template and which
marker/generator pairs apply to each file. The shared step sequence lives in
:func:`init_project`, which takes any object satisfying
:class:`FrameworkBackend`:

1. copy the template tree
2. auth configuration
3. auth UI configuration
4. ``.env.example``
5. typed env module
6. README setup guide
7. theme
8. git (and optionally a GitHub repository)
9. dependency install, lint, format

Steps 1-7 are fail-fast: the first error is reported and re-raised unchanged,
so no later step touches the tree. Lint and format failures only warn.
"""

from __future__ import annotations

import asyncio
import shutil
import time
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, Field

from create_z3.config import ProjectOptions, ScaffoldConfig
from create_z3.theme import resolve_theme
from create_z3.utils import format_duration, print_error, print_success, run_command, step_status

from . import tasks
from .tasks import CommandRunner


@runtime_checkable
class FrameworkBackend(Protocol):
    """Per-framework file layout and substitutions."""

    framework_name: str
    template_dir: str
    target_path: Path

    async def update_auth_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None: ...

    async def update_ui_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None: ...

    async def update_env_example(self, provider_ids: Sequence[str]) -> None: ...

    async def update_env_typed(self, provider_ids: Sequence[str]) -> None: ...

    async def update_readme(self, provider_ids: Sequence[str]) -> None: ...

    async def apply_theme(self, css: str) -> None: ...


class InitResult(BaseModel):
    """Outcome of a completed :func:`init_project` run."""

    framework: str
    target_path: Path
    steps_completed: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    duration: str = ""
    success: bool = False


async def copy_template(source: Path, destination: Path) -> None:
    """Copy the template tree into *destination* (which may already exist)."""
    if not source.is_dir():
        raise FileNotFoundError(f"Template directory not found: {source}")
    await asyncio.to_thread(shutil.copytree, source, destination, dirs_exist_ok=True)


async def _run_step(
    result: InitResult,
    name: str,
    running: str,
    done: str,
    failed: str,
    action: Callable[[], Awaitable[object]],
) -> None:
    try:
        with step_status(running):
            await action()
    except Exception:
        print_error(failed)
        raise
    print_success(done)
    result.steps_completed.append(name)


async def init_project(
    backend: FrameworkBackend,
    options: ProjectOptions,
    *,
    config: Optional[ScaffoldConfig] = None,
    runner: CommandRunner = run_command,
    http_client: Optional[httpx.AsyncClient] = None,
) -> InitResult:
    """Run the full initialisation sequence against *backend*.

    Args:
        backend: Framework backend bound to the target directory.
        options: The user's project choices.
        config: Run-wide settings. Defaults to ``ScaffoldConfig()``.
        runner: Child-process runner used for git/gh/package-manager calls.
        http_client: Optional client for fetching URL themes.

    Returns:
        An :class:`InitResult` with the completed steps and any warnings.

    Raises:
        Whatever the failing step raised (``OSError``,
        ``MarkerNotFoundError``, ``UnknownProviderError``,
        ``ThemeFetchError``, ``CommandError`` ...).
    """
    config = config or ScaffoldConfig()
    providers = list(options.oauth_providers)
    email_pw = options.email_password_auth
    result = InitResult(framework=backend.framework_name, target_path=backend.target_path)
    started = time.monotonic()

    await _run_step(
        result, "copy_template",
        "Copying template files...", "Template files copied", "Failed to copy template files",
        lambda: copy_template(config.template_root / backend.template_dir, backend.target_path),
    )
    await _run_step(
        result, "auth_config",
        "Configuring authentication...", "Authentication configured",
        "Failed to configure authentication",
        lambda: backend.update_auth_config(providers, email_pw),
    )
    await _run_step(
        result, "ui_config",
        "Configuring auth UI...", "Auth UI configured", "Failed to configure auth UI",
        lambda: backend.update_ui_config(providers, email_pw),
    )
    await _run_step(
        result, "env_example",
        "Updating .env.example...", ".env.example updated", "Failed to update .env.example",
        lambda: backend.update_env_example(providers),
    )
    await _run_step(
        result, "env_typed",
        "Updating environment schema...", "Environment schema updated",
        "Failed to update environment schema",
        lambda: backend.update_env_typed(providers),
    )
    await _run_step(
        result, "readme",
        "Updating README...", "README updated", "Failed to update README",
        lambda: backend.update_readme(providers),
    )

    try:
        theme_css = await resolve_theme(options.theme, config, http_client)
    except Exception:
        print_error("Failed to apply theme")
        raise
    await _run_step(
        result, "theme",
        "Applying theme...",
        "Custom theme applied" if options.theme else "Default theme applied",
        "Failed to apply theme",
        lambda: backend.apply_theme(theme_css),
    )

    target = backend.target_path
    if options.init_git:
        await tasks.init_git_repo(target, config.commit_message, runner)
        result.steps_completed.append("git")
        if options.create_github_repo:
            await tasks.create_github_repo(
                target, options.project_name, options.github_repo_private, runner
            )
            result.steps_completed.append("github")

    if options.install_dependencies:
        manager = config.package_manager
        await tasks.install_dependencies(target, manager, runner)
        result.steps_completed.append("install")

        if await tasks.lint_code(target, manager, runner):
            result.steps_completed.append("lint")
        else:
            result.warnings.append(
                f"Linting failed; run `{' '.join(tasks.lint_command(manager))}` manually"
            )
        if await tasks.format_code(target, manager, runner):
            result.steps_completed.append("format")
        else:
            result.warnings.append(
                f"Formatting failed; run `{' '.join(tasks.format_command(manager))}` manually"
            )

    result.duration = format_duration(time.monotonic() - started)
    result.success = True
    return result
