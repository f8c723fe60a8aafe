"""TanStack Start backend.

The email/password switch is folded into the auth-config block, so the
``AuthUIProvider`` in ``src/providers.tsx`` only receives the social list.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from create_z3.providers import ProviderRegistry

from .. import generators, markers
from ..markers import replace_marker


class TanStackBackend:
    framework_name = "tanstack"
    template_dir = "tanstack-start"

    public_prefix = "VITE_"
    env_validator = "z.string()"

    auth_file = Path("convex/auth/index.ts")
    ui_file = Path("src/providers.tsx")
    env_example_file = Path(".env.example")
    env_typed_file = Path("src/env.ts")
    readme_file = Path("README.md")
    stylesheet_file = Path("src/styles/globals.css")

    def __init__(self, target_path: Path, registry: ProviderRegistry) -> None:
        self.target_path = Path(target_path)
        self.registry = registry

    async def update_auth_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None:
        path = self.target_path / self.auth_file
        await replace_marker(
            path,
            markers.OAUTH_PROVIDERS,
            generators.generate_auth_config(self.registry, provider_ids, email_password_enabled),
        )
        await replace_marker(path, markers.EMAIL_PASSWORD_AUTH, "", graceful=True)

    async def update_ui_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None:
        await replace_marker(
            self.target_path / self.ui_file,
            markers.OAUTH_UI_PROVIDERS,
            generators.generate_ui_providers(self.registry, provider_ids),
        )

    async def update_env_example(self, provider_ids: Sequence[str]) -> None:
        await replace_marker(
            self.target_path / self.env_example_file,
            markers.ENV_OAUTH_VARS,
            generators.generate_env_example(self.registry, provider_ids, self.public_prefix),
        )

    async def update_env_typed(self, provider_ids: Sequence[str]) -> None:
        path = self.target_path / self.env_typed_file
        schema = generators.generate_env_schema(
            self.registry, provider_ids, self.public_prefix, self.env_validator
        )
        mapping = generators.generate_env_runtime_mapping(
            self.registry, provider_ids, self.public_prefix
        )
        await replace_marker(path, markers.OAUTH_ENV_SERVER_SCHEMA, schema)
        await replace_marker(path, markers.OAUTH_ENV_RUNTIME_MAPPING, mapping)

    async def update_readme(self, provider_ids: Sequence[str]) -> None:
        await replace_marker(
            self.target_path / self.readme_file,
            markers.OAUTH_SETUP_GUIDE,
            generators.generate_readme_section(self.registry, provider_ids),
            graceful=True,
        )

    async def apply_theme(self, css: str) -> None:
        await replace_marker(self.target_path / self.stylesheet_file, markers.TWEAKCN_THEME, css)
