"""Next.js backend.

Differs from TanStack Start in three places: the typed env module is
``src/env.mjs`` validated with ``z.string().min(1)``, the auth UI lives in
``src/auth/client.tsx`` and carries a separate ``credentials`` prop, and
client-side variables use the ``NEXT_PUBLIC_`` prefix.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from create_z3.providers import ProviderRegistry

from .. import generators, markers
from ..markers import replace_marker


class NextJSBackend:
    framework_name = "nextjs"
    template_dir = "nextjs"

    public_prefix = "NEXT_PUBLIC_"
    env_validator = "z.string().min(1)"

    auth_file = Path("convex/auth/index.ts")
    ui_file = Path("src/auth/client.tsx")
    env_example_file = Path(".env.example")
    env_typed_file = Path("src/env.mjs")
    readme_file = Path("README.md")
    stylesheet_file = Path("src/app/(frontend)/globals.css")

    def __init__(self, target_path: Path, registry: ProviderRegistry) -> None:
        self.target_path = Path(target_path)
        self.registry = registry

    def _path(self, relative: Path) -> Path:
        return self.target_path / relative

    async def update_auth_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None:
        # The generated block already carries emailAndPassword, so the
        # separate email marker is only cleaned up.
        path = self._path(self.auth_file)
        block = generators.generate_auth_config(
            self.registry, provider_ids, email_password_enabled
        )
        await replace_marker(path, markers.OAUTH_PROVIDERS, block)
        await replace_marker(path, markers.EMAIL_PASSWORD_AUTH, "", graceful=True)

    async def update_ui_config(
        self, provider_ids: Sequence[str], email_password_enabled: bool
    ) -> None:
        path = self._path(self.ui_file)
        await replace_marker(
            path,
            markers.OAUTH_UI_PROVIDERS,
            generators.generate_ui_providers(self.registry, provider_ids),
        )
        await replace_marker(
            path,
            markers.EMAIL_PASSWORD_CREDENTIALS,
            generators.generate_credentials_prop(email_password_enabled),
        )

    async def update_env_example(self, provider_ids: Sequence[str]) -> None:
        await replace_marker(
            self._path(self.env_example_file),
            markers.ENV_OAUTH_VARS,
            generators.generate_env_example(self.registry, provider_ids, self.public_prefix),
        )

    async def update_env_typed(self, provider_ids: Sequence[str]) -> None:
        path = self._path(self.env_typed_file)
        await replace_marker(
            path,
            markers.OAUTH_ENV_SERVER_SCHEMA,
            generators.generate_env_schema(
                self.registry, provider_ids, self.public_prefix, self.env_validator
            ),
        )
        await replace_marker(
            path,
            markers.OAUTH_ENV_RUNTIME_MAPPING,
            generators.generate_env_runtime_mapping(
                self.registry, provider_ids, self.public_prefix
            ),
        )

    async def update_readme(self, provider_ids: Sequence[str]) -> None:
        await replace_marker(
            self._path(self.readme_file),
            markers.OAUTH_SETUP_GUIDE,
            generators.generate_readme_section(self.registry, provider_ids),
            graceful=True,
        )

    async def apply_theme(self, css: str) -> None:
        await replace_marker(self._path(self.stylesheet_file), markers.TWEAKCN_THEME, css)
