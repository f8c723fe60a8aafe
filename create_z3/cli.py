"""Command-line entry point for ``create-z3``.

Usage::

    create-z3 my-app --framework nextjs --providers google,github
    create-z3 . --no-email-password --providers discord --theme-url https://tweakcn.com/r/themes/amber.css
    python -m create_z3 my-app --no-install --no-git
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from rich.panel import Panel

from create_z3 import __version__
from create_z3.config import Framework, ProjectOptions, ScaffoldConfig, ThemeSource
from create_z3.providers import ProviderRegistry, UnknownProviderError, load_registry
from create_z3.scaffolder import create_backend, init_project
from create_z3.utils import (
    console,
    is_directory_empty,
    print_dim,
    print_error,
    print_summary_table,
    print_warning,
    resolve_project_name,
    validate_project_name,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="create-z3",
        description="Scaffold a Z3 Stack app (Convex + Better Auth) for Next.js or TanStack Start",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  create-z3 my-app\n"
            "  create-z3 my-app --framework nextjs --providers google,github\n"
            "  create-z3 . --no-email-password --providers discord\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        default="my-z3-app",
        help='Project directory name, or "." for the current directory (default: my-z3-app)',
    )
    parser.add_argument(
        "--framework", "-f",
        choices=[f.value for f in Framework],
        default=Framework.TANSTACK.value,
        help="Target framework (default: tanstack)",
    )
    parser.add_argument(
        "--providers", "-p",
        default="",
        help="Comma-separated OAuth provider ids, e.g. google,github",
    )
    parser.add_argument(
        "--no-email-password",
        action="store_true",
        help="Disable email/password authentication",
    )
    theme = parser.add_mutually_exclusive_group()
    theme.add_argument("--theme-url", help="URL of a TweakCN theme stylesheet to fetch")
    theme.add_argument("--theme-file", type=Path, help="Local CSS file with theme variables")
    parser.add_argument("--no-git", action="store_true", help="Skip git repository initialization")
    parser.add_argument("--no-install", action="store_true", help="Skip dependency installation")
    parser.add_argument(
        "--github-repo",
        action="store_true",
        help="Create a GitHub repository with the gh CLI and push the initial commit",
    )
    parser.add_argument(
        "--public",
        action="store_true",
        help="Make the GitHub repository public (default: private)",
    )
    parser.add_argument(
        "--package-manager",
        choices=["npm", "pnpm", "yarn", "bun"],
        default=None,
        help="Package manager to use (default: detected from the invoking tool)",
    )
    parser.add_argument(
        "--list-providers",
        action="store_true",
        help="List the supported OAuth providers and exit",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _fail(message: str, *hints: str) -> None:
    print_error(message)
    for hint in hints:
        print_warning(hint)
    sys.exit(1)


def _parse_providers(raw: str, registry: ProviderRegistry) -> list[str]:
    ids = [part.strip().lower() for part in raw.split(",") if part.strip()]
    try:
        registry.resolve(ids)
    except UnknownProviderError as exc:
        _fail(str(exc), f"Supported providers: {', '.join(registry.ids())}")
    return ids


def _print_providers(registry: ProviderRegistry) -> None:
    popular = {p.id for p in registry.popular()}
    for provider in registry.sorted_by_name():
        marker = " *" if provider.id in popular else ""
        console.print(f"  [bold]{provider.id:<12}[/bold] {provider.display_name}{marker}")
    print_dim("* popular")


def _theme_from_args(args: argparse.Namespace) -> Optional[ThemeSource]:
    if args.theme_url:
        return ThemeSource(kind="url", content=args.theme_url)
    if args.theme_file:
        try:
            css = args.theme_file.read_text(encoding="utf-8")
        except OSError as exc:
            _fail(f"Cannot read theme file {args.theme_file}: {exc}")
        return ThemeSource(kind="css", content=css)
    return None


def _resolve_target(project_name: str, cwd: Path) -> tuple[str, Path]:
    name = resolve_project_name(project_name, cwd)
    errors = validate_project_name(name)
    if errors:
        _fail(
            f"Invalid project name '{name}'.",
            *(f"  - {error}" for error in errors),
            "Project names must be valid npm package names: lowercase, no spaces.",
        )

    if project_name == ".":
        if not is_directory_empty(cwd):
            _fail(
                "Current directory is not empty.",
                "Please use a different directory or provide a project name.",
            )
        return name, cwd

    target = cwd / project_name
    if target.exists():
        _fail(
            f"Directory '{project_name}' already exists.",
            "Please choose a different name or remove the existing directory.",
        )
    return name, target


def _print_next_steps(project_name: str, options: ProjectOptions, config: ScaffoldConfig) -> None:
    manager = config.package_manager
    console.print("[bold]Next steps:[/bold]")
    if project_name != ".":
        console.print(f"  cd {project_name}")
    if not options.install_dependencies:
        console.print(f"  {manager} install")
    console.print("  cp .env.example .env.local")
    console.print("  npx convex dev")
    console.print(f"  {manager} run dev")
    console.print()


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``create-z3`` and ``python -m create_z3``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    registry = load_registry()
    if args.list_providers:
        _print_providers(registry)
        return

    name, target = _resolve_target(args.project_name, Path.cwd())
    providers = _parse_providers(args.providers, registry)

    try:
        options = ProjectOptions(
            project_name=name,
            framework=Framework(args.framework),
            email_password_auth=not args.no_email_password,
            oauth_providers=providers,
            theme=_theme_from_args(args),
            init_git=not args.no_git,
            install_dependencies=not args.no_install,
            create_github_repo=args.github_repo,
            github_repo_private=not args.public,
        )
    except ValidationError as exc:
        _fail("Invalid options.", *(str(err["msg"]) for err in exc.errors()))

    try:
        config = ScaffoldConfig.from_env()
    except ValidationError as exc:
        _fail(
            "Invalid environment configuration.",
            *(f"  - {'.'.join(map(str, err['loc']))}: {err['msg']}" for err in exc.errors()),
        )
    except ValueError as exc:
        _fail(f"Invalid environment configuration: {exc}")
    if args.package_manager:
        config = config.model_copy(update={"package_manager": args.package_manager})

    for provider in registry.requiring_extra_config(options.oauth_providers):
        print_warning(f"{provider.display_name} requires additional configuration:")
        print_dim(f"  {provider.extra_config_notes}")
    if not options.has_authentication:
        print_warning(
            "No authentication method selected. Users will not be able to sign in."
        )

    console.print(
        Panel(
            f"[bold bright_cyan]create-z3[/bold bright_cyan] {__version__}\n"
            f"Project   : {name}\n"
            f"Framework : {options.framework.display_name}\n"
            f"Target    : {target.resolve()}",
            title="[bold]Scaffolding[/bold]",
            border_style="bright_cyan",
        )
    )

    try:
        target.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        _fail(
            f"Permission denied when creating '{target}'.",
            "Please check your directory permissions.",
        )

    backend = create_backend(options.framework, target, registry)
    try:
        result = asyncio.run(init_project(backend, options, config=config))
    except Exception as exc:  # noqa: BLE001
        print_error(f"Project initialization failed: {exc}")
        sys.exit(1)

    console.print()
    print_summary_table(
        {
            "Project": name,
            "Framework": options.framework.display_name,
            "Authentication": options.auth_summary(),
            "Theme": "Custom" if options.theme else "Default",
            "Git": "Initialized" if options.init_git else "Skipped",
            "Dependencies": (
                f"Installed with {config.package_manager}"
                if options.install_dependencies
                else "Skipped"
            ),
            "Duration": result.duration,
        },
        title="Project Created",
    )
    for warning in result.warnings:
        print_warning(warning)
    _print_next_steps(args.project_name, options, config)
    console.print("[bold green]Project created successfully![/bold green]")


if __name__ == "__main__":
    main()
