"""Shared utility functions for create-z3.

Provides async child-process execution, Rich-based status output, project
name validation and package-manager detection.
"""

from __future__ import annotations

import asyncio
import os
import re
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: Optional[float] = None,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a child process asynchronously and capture its output.

    Args:
        cmd: Program and arguments. No shell is involved.
        cwd: Working directory for the child process.
        timeout: Optional wall-clock limit in seconds. ``None`` waits forever.
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.

    Raises:
        FileNotFoundError: If the program does not exist on ``PATH``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Project name helpers
# ---------------------------------------------------------------------------

_NPM_NAME_RE = re.compile(r"^(?:@[a-z0-9-~][a-z0-9-._~]*/)?[a-z0-9-~][a-z0-9-._~]*$")


def validate_project_name(name: str) -> list[str]:
    """Check *name* against npm's rules for new package names.

    Returns:
        A list of problems. An empty list means the name is valid.
    """
    errors: list[str] = []
    if not name:
        return ["name length must be greater than zero"]
    if len(name) > 214:
        errors.append("name can no longer contain more than 214 characters")
    if name != name.strip():
        errors.append("name cannot contain leading or trailing spaces")
    if name.startswith((".", "_")):
        errors.append("name cannot start with a period or an underscore")
    if name.lower() != name:
        errors.append("name can no longer contain capital letters")
    if not _NPM_NAME_RE.match(name.lower()):
        errors.append("name can only contain URL-friendly characters")
    return errors


def resolve_project_name(name: str, cwd: Path) -> str:
    """Return the effective project name; ``"."`` means the current directory."""
    if name == ".":
        return cwd.name
    return name


def is_directory_empty(path: Path) -> bool:
    """True when *path* holds no visible (non-dot) entries."""
    if not path.is_dir():
        return True
    return not any(not entry.name.startswith(".") for entry in path.iterdir())


def detect_package_manager(user_agent: str) -> str:
    """Pick the package manager that launched us from ``npm_config_user_agent``."""
    if "pnpm" in user_agent:
        return "pnpm"
    if "yarn" in user_agent:
        return "yarn"
    if "bun" in user_agent:
        return "bun"
    return "npm"


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def format_duration(seconds: float) -> str:
    """Format a duration in seconds to a human-readable string.

    Examples::

        format_duration(3.7)    -> "3.7s"
        format_duration(65.2)   -> "1m 5s"
    """
    if seconds < 0:
        return "0.0s"
    minutes = int(seconds // 60)
    secs = seconds % 60
    if minutes:
        return f"{minutes}m {int(secs)}s"
    return f"{secs:.1f}s"


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


@contextmanager
def step_status(message: str) -> Iterator[None]:
    """Show a spinner with *message* while the body runs."""
    with console.status(f"[bold cyan]{escape(message)}[/bold cyan]", spinner="dots"):
        yield


def print_summary_table(data: dict[str, str], title: str = "Summary") -> None:
    """Print a two-column key/value summary table."""
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("Item", style="dim", no_wrap=True)
    table.add_column("Value")

    for key, value in data.items():
        table.add_row(key, str(value))

    console.print(table)
    console.print()


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]✓ {escape(message)}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]✗ {escape(message)}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]⚠ {escape(message)}[/bold yellow]")


def print_dim(message: str) -> None:
    console.print(f"[dim]{escape(message)}[/dim]")
