"""Pydantic models describing one OAuth provider supported by Better Auth."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


class EnvEntry(BaseModel):
    """One environment variable a provider needs.

    ``scope="client"`` entries are exposed to the browser and therefore get
    the framework's public prefix (``NEXT_PUBLIC_`` / ``VITE_``) when emitted.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]*$")
    scope: Literal["server", "client"] = "server"
    description: str = ""


class ProviderDocs(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: str = ""
    better_auth: str = ""


class ProviderDescriptor(BaseModel):
    """Static metadata and pre-rendered code for one OAuth provider.

    ``client_id_var`` / ``client_secret_var`` default to
    ``<ENV_PREFIX>_CLIENT_ID`` / ``<ENV_PREFIX>_CLIENT_SECRET``; a provider may
    override them (TikTok uses a client *key*). ``env_entries`` is the
    authoritative list of variables and may hold more than the default pair.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., pattern=r"^[a-z][a-z0-9]*$")
    display_name: str
    env_prefix: str = Field(..., pattern=r"^[A-Z][A-Z0-9_]*$")
    client_id_var: str = ""
    client_secret_var: str = ""
    popular: bool = False
    social_provider_snippet: str = Field(..., min_length=1)
    scopes: tuple[str, ...] = ()
    env_entries: tuple[EnvEntry, ...] = ()
    docs: ProviderDocs = Field(default_factory=ProviderDocs)
    requires_extra_config: bool = False
    extra_config_notes: str = ""
    readme_section: str = Field(..., min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _derive_env_vars(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        prefix = data.get("env_prefix", "")
        if not data.get("client_id_var"):
            data["client_id_var"] = f"{prefix}_CLIENT_ID"
        if not data.get("client_secret_var"):
            data["client_secret_var"] = f"{prefix}_CLIENT_SECRET"
        if not data.get("env_entries"):
            data["env_entries"] = [
                {"name": data["client_id_var"], "description": f"{data.get('display_name', prefix)} OAuth Client ID"},
                {"name": data["client_secret_var"], "description": f"{data.get('display_name', prefix)} OAuth Client Secret"},
            ]
        return data
