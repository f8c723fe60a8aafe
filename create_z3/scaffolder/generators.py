"""Source-fragment generators for authentication scaffolding.

Every generator is a pure function of the provider registry, the ordered list
of selected provider ids and a few flags. Fragments are emitted in the order
the ids were given, never in registry order.

Empty input yields ``""`` (the UI list yields ``Remove()``), which
:func:`create_z3.scaffolder.markers.replace_marker` turns into "delete the
marker line". That is how unused scaffolding disappears without a special
"no auth selected" code path.

Any id missing from the registry raises
:class:`create_z3.providers.UnknownProviderError`.
"""

from __future__ import annotations

import json
import textwrap
from collections.abc import Sequence

from create_z3.providers import EnvEntry, ProviderDescriptor, ProviderRegistry

from .markers import Keep, Remove

INDENT = "  "

README_HEADING = "# OAuth Provider Setup"
README_SEPARATOR = "\n\n---\n\n"


# ---------------------------------------------------------------------------
# Auth configuration (convex/auth/index.ts)
# ---------------------------------------------------------------------------


def generate_auth_config(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
    email_password_enabled: bool,
) -> str:
    """Build the ``emailAndPassword`` / ``socialProviders`` entries for ``betterAuth({...})``.

    Each provider is rendered from its registry snippet and keyed by its id::

        socialProviders: {
          google: {
            clientId: process.env.GOOGLE_CLIENT_ID as string,
            clientSecret: process.env.GOOGLE_CLIENT_SECRET as string,
          },
        },
    """
    providers = registry.resolve(provider_ids)
    blocks: list[str] = []

    if email_password_enabled:
        blocks.append("\n".join([
            "emailAndPassword: {",
            f"{INDENT}enabled: true,",
            "},",
        ]))

    if providers:
        entries = [_social_provider_entry(provider) for provider in providers]
        blocks.append("\n".join(["socialProviders: {", *entries, "},"]))

    return "\n".join(blocks)


def _social_provider_entry(provider: ProviderDescriptor) -> str:
    head, _, body = provider.social_provider_snippet.strip().partition("\n")
    lines = [f"{provider.id}: {head}"]
    if body:
        lines.extend(textwrap.dedent(body).split("\n"))
        if provider.scopes:
            scopes = ", ".join(json.dumps(scope) for scope in provider.scopes)
            lines.insert(-1, f"{INDENT}scope: [{scopes}],")
    lines[-1] += ","
    return "\n".join(INDENT + line if line else "" for line in lines)


# ---------------------------------------------------------------------------
# Typed environment module (src/env.ts / src/env.mjs)
# ---------------------------------------------------------------------------


def env_var_name(entry: EnvEntry, public_prefix: str) -> str:
    """Name as it appears in the generated project: client vars get the public prefix."""
    if entry.scope == "client":
        return f"{public_prefix}{entry.name}"
    return entry.name


def _env_entries(registry: ProviderRegistry, provider_ids: Sequence[str]) -> list[EnvEntry]:
    return [entry for provider in registry.resolve(provider_ids) for entry in provider.env_entries]


def generate_env_schema(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
    public_prefix: str,
    validator: str = "z.string()",
) -> str:
    """One zod schema line per declared env entry, e.g. ``GOOGLE_CLIENT_ID: z.string(),``."""
    return "\n".join(
        f"{env_var_name(entry, public_prefix)}: {validator},"
        for entry in _env_entries(registry, provider_ids)
    )


def generate_env_runtime_mapping(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
    public_prefix: str,
) -> str:
    """One ``runtimeEnv`` assignment per declared env entry."""
    lines = []
    for entry in _env_entries(registry, provider_ids):
        name = env_var_name(entry, public_prefix)
        lines.append(f"{name}: process.env.{name},")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# .env.example
# ---------------------------------------------------------------------------


def generate_env_example(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
    public_prefix: str,
) -> str:
    """Commented, empty ``NAME=`` entries for every variable the providers need."""
    lines: list[str] = []
    for entry in _env_entries(registry, provider_ids):
        if entry.description:
            lines.append(f"# {entry.description}")
        lines.append(f"{env_var_name(entry, public_prefix)}=")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Client UI (AuthUIProvider props)
# ---------------------------------------------------------------------------


def generate_ui_providers(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
) -> Keep | Remove:
    """The ``social={{ providers: [...] }}`` prop, or ``Remove()`` when no provider is selected.

    The marker line *is* the prop, so removing the line drops the whole prop.
    """
    providers = registry.resolve(provider_ids)
    if not providers:
        return Remove("no OAuth providers selected")
    provider_list = ", ".join(f'"{provider.id}"' for provider in providers)
    return Keep(f"social={{{{\n{INDENT}providers: [{provider_list}]\n}}}}")


def generate_credentials_prop(enabled: bool) -> str:
    """``credentials`` prop toggling the email/password form in the auth UI."""
    return f"credentials={{{'true' if enabled else 'false'}}}"


# ---------------------------------------------------------------------------
# README
# ---------------------------------------------------------------------------


def generate_readme_section(
    registry: ProviderRegistry,
    provider_ids: Sequence[str],
) -> str:
    """Concatenate each provider's setup guide under one top-level heading.

    ``N`` providers are separated by exactly ``N - 1`` horizontal rules.
    """
    sections = [provider.readme_section.strip() for provider in registry.resolve(provider_ids)]
    if not sections:
        return ""
    return f"{README_HEADING}\n\n{README_SEPARATOR.join(sections)}"
