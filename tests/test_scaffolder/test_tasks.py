"""Tests for the git / GitHub / package-manager steps (create_z3.scaffolder.tasks)."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from create_z3.scaffolder.tasks import (
    CommandError,
    create_github_repo,
    format_code,
    format_command,
    init_git_repo,
    install_dependencies,
    lint_code,
    lint_command,
)

pytestmark = pytest.mark.unit


def _commands(runner: AsyncMock) -> list[list[str]]:
    return [call.args[0] for call in runner.await_args_list]


def _fail_on(program_args: list[str], result=(1, "", "boom")):
    """Runner that fails for one exact argv and succeeds otherwise."""

    async def runner(cmd, cwd=None, **kwargs):
        if cmd == program_args:
            if isinstance(result, Exception):
                raise result
            return result
        return (0, "", "")

    return AsyncMock(side_effect=runner)


# ---------------------------------------------------------------------------
# Command lines
# ---------------------------------------------------------------------------


class TestCommandLines:
    @pytest.mark.parametrize("manager, expected", [
        ("pnpm", ["pnpm", "lint", "--fix"]),
        ("npm", ["npm", "run", "lint", "--", "--fix"]),
        ("yarn", ["yarn", "run", "lint", "--", "--fix"]),
        ("bun", ["bun", "run", "lint", "--", "--fix"]),
    ])
    def test_lint_command(self, manager, expected):
        assert lint_command(manager) == expected

    def test_format_command(self):
        assert format_command("pnpm") == ["pnpm", "run", "format"]


# ---------------------------------------------------------------------------
# Git / GitHub
# ---------------------------------------------------------------------------


class TestGit:
    async def test_init_sequence(self, tmp_path: Path, fake_runner):
        await init_git_repo(tmp_path, "Initial commit from create-z3", fake_runner)

        assert _commands(fake_runner) == [
            ["git", "--version"],
            ["git", "init"],
            ["git", "add", "."],
            ["git", "commit", "-m", "Initial commit from create-z3"],
        ]
        assert fake_runner.await_args_list[1].kwargs["cwd"] == tmp_path

    async def test_missing_git(self, tmp_path: Path):
        runner = _fail_on(["git", "--version"], FileNotFoundError("git"))

        with pytest.raises(CommandError, match="git is not installed"):
            await init_git_repo(tmp_path, "msg", runner)
        assert runner.await_count == 1

    async def test_commit_failure_is_fatal(self, tmp_path: Path):
        runner = _fail_on(["git", "commit", "-m", "msg"], (128, "", "nothing to commit"))

        with pytest.raises(CommandError) as exc_info:
            await init_git_repo(tmp_path, "msg", runner)

        assert exc_info.value.cmd == ["git", "commit", "-m", "msg"]
        assert exc_info.value.stderr == "nothing to commit"
        assert "nothing to commit" in str(exc_info.value)

    @pytest.mark.parametrize("private, flag", [(True, "--private"), (False, "--public")])
    async def test_github_repo(self, tmp_path: Path, fake_runner, private, flag):
        await create_github_repo(tmp_path, "my-app", private, fake_runner)

        assert _commands(fake_runner) == [
            ["gh", "--version"],
            ["gh", "repo", "create", "my-app", flag, "--source=.", "--push"],
        ]

    async def test_github_cli_missing(self, tmp_path: Path):
        runner = _fail_on(["gh", "--version"], (127, "", ""))

        with pytest.raises(CommandError, match="cli.github.com"):
            await create_github_repo(tmp_path, "my-app", True, runner)

    async def test_github_create_failure(self, tmp_path: Path):
        runner = _fail_on(
            ["gh", "repo", "create", "my-app", "--private", "--source=.", "--push"],
            (1, "", "not logged in"),
        )

        with pytest.raises(CommandError, match="not logged in"):
            await create_github_repo(tmp_path, "my-app", True, runner)


# ---------------------------------------------------------------------------
# Install / lint / format
# ---------------------------------------------------------------------------


class TestPackageManager:
    async def test_install(self, tmp_path: Path, fake_runner):
        await install_dependencies(tmp_path, "pnpm", fake_runner)
        assert _commands(fake_runner) == [["pnpm", "install"]]

    async def test_install_failure_is_fatal(self, tmp_path: Path):
        runner = _fail_on(["npm", "install"], (1, "", "ERESOLVE"))
        with pytest.raises(CommandError, match="ERESOLVE"):
            await install_dependencies(tmp_path, "npm", runner)

    async def test_install_missing_manager(self, tmp_path: Path):
        runner = _fail_on(["bun", "install"], FileNotFoundError("bun"))
        with pytest.raises(CommandError, match="bun is not installed"):
            await install_dependencies(tmp_path, "bun", runner)

    async def test_lint_success(self, tmp_path: Path, fake_runner):
        assert await lint_code(tmp_path, "npm", fake_runner) is True
        assert _commands(fake_runner) == [["npm", "run", "lint", "--", "--fix"]]

    async def test_lint_failure_returns_false(self, tmp_path: Path):
        runner = _fail_on(["pnpm", "lint", "--fix"])
        assert await lint_code(tmp_path, "pnpm", runner) is False

    async def test_lint_exception_is_swallowed(self, tmp_path: Path):
        runner = _fail_on(["npm", "run", "lint", "--", "--fix"], FileNotFoundError("npm"))
        assert await lint_code(tmp_path, "npm", runner) is False

    async def test_format_failure_returns_false(self, tmp_path: Path):
        runner = _fail_on(["yarn", "run", "format"], (2, "", "no script"))
        assert await format_code(tmp_path, "yarn", runner) is False

    async def test_format_success(self, tmp_path: Path, fake_runner):
        assert await format_code(tmp_path, "yarn", fake_runner) is True
