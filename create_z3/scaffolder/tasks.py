"""Child-process steps run after the template has been configured.

Git, GitHub and dependency installation failures are fatal and raise
:class:`CommandError`. Linting and formatting are cosmetic clean-up passes:
their failures are reported as warnings with the command to run by hand.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from pathlib import Path

from create_z3.utils import print_dim, print_success, print_warning, run_command, step_status

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]


class CommandError(RuntimeError):
    """A required external command failed or is not installed."""

    def __init__(self, message: str, cmd: list[str] | None = None, stderr: str = "") -> None:
        self.cmd = cmd or []
        self.stderr = stderr
        super().__init__(message)


async def _run_required(
    runner: CommandRunner, cmd: list[str], cwd: Path, what: str
) -> str:
    try:
        returncode, stdout, stderr = await runner(cmd, cwd=cwd)
    except FileNotFoundError as exc:
        raise CommandError(f"{what} failed: {cmd[0]} is not installed", cmd) from exc
    if returncode != 0:
        raise CommandError(f"{what} failed: {stderr or stdout or f'exit code {returncode}'}", cmd, stderr)
    return stdout


async def _require_tool(runner: CommandRunner, tool: str, hint: str) -> None:
    try:
        returncode, _, _ = await runner([tool, "--version"])
    except FileNotFoundError:
        returncode = 127
    if returncode != 0:
        raise CommandError(f"{tool} is not installed. {hint}", [tool, "--version"])


# ---------------------------------------------------------------------------
# Version control
# ---------------------------------------------------------------------------


async def init_git_repo(
    target: Path,
    commit_message: str,
    runner: CommandRunner = run_command,
) -> None:
    """``git init`` the project and commit every file."""
    with step_status("Initializing Git repository..."):
        await _require_tool(runner, "git", "Please install Git to initialize a repository.")
        await _run_required(runner, ["git", "init"], target, "Git initialization")
        await _run_required(runner, ["git", "add", "."], target, "Git initialization")
        await _run_required(
            runner, ["git", "commit", "-m", commit_message], target, "Git initialization"
        )
    print_success("Git repository initialized")


async def create_github_repo(
    target: Path,
    repo_name: str,
    private: bool,
    runner: CommandRunner = run_command,
) -> None:
    """Create a GitHub repository with ``gh`` and push the initial commit."""
    with step_status("Creating GitHub repository..."):
        await _require_tool(
            runner, "gh", "Please install it from https://cli.github.com/"
        )
        visibility = "--private" if private else "--public"
        try:
            await _run_required(
                runner,
                ["gh", "repo", "create", repo_name, visibility, "--source=.", "--push"],
                target,
                "GitHub repository creation",
            )
        except CommandError:
            print_dim('Make sure you are authenticated with GitHub CLI (run "gh auth login")')
            raise
    print_success(f"GitHub repository created: {repo_name}")


# ---------------------------------------------------------------------------
# Dependencies and clean-up
# ---------------------------------------------------------------------------


def lint_command(package_manager: str) -> list[str]:
    if package_manager == "pnpm":
        return ["pnpm", "lint", "--fix"]
    return [package_manager, "run", "lint", "--", "--fix"]


def format_command(package_manager: str) -> list[str]:
    return [package_manager, "run", "format"]


async def install_dependencies(
    target: Path,
    package_manager: str,
    runner: CommandRunner = run_command,
) -> None:
    with step_status(f"Installing dependencies with {package_manager}..."):
        await _run_required(
            runner, [package_manager, "install"], target, "Dependency installation"
        )
    print_success(f"Dependencies installed with {package_manager}")


async def _best_effort(
    runner: CommandRunner, cmd: list[str], target: Path, running: str, done: str
) -> bool:
    manual = " ".join(cmd)
    with step_status(running):
        try:
            returncode, _, stderr = await runner(cmd, cwd=target)
        except Exception as exc:  # noqa: BLE001
            returncode, stderr = -1, str(exc)
    if returncode == 0:
        print_success(done)
        return True
    print_warning(f"{running.rstrip('.')} failed (you may need to run `{manual}` manually)")
    if stderr:
        print_dim(stderr)
    return False


async def lint_code(
    target: Path, package_manager: str, runner: CommandRunner = run_command
) -> bool:
    """Run ``lint --fix``. Returns ``False`` (after warning) on failure."""
    return await _best_effort(
        runner, lint_command(package_manager), target,
        "Linting and fixing code...", "Code linted and fixed successfully",
    )


async def format_code(
    target: Path, package_manager: str, runner: CommandRunner = run_command
) -> bool:
    """Run the project's ``format`` script. Returns ``False`` (after warning) on failure."""
    return await _best_effort(
        runner, format_command(package_manager), target,
        "Formatting generated files...", "Code formatted successfully",
    )
