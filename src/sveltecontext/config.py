"""Configuration loading.

Settings are loaded in priority order (highest first):
  1. Environment variables    (SVELTECONTEXT__GITHUB__BRANCH=next)
  2. sveltecontext.yaml       (searched in cwd, then platform config dir)
  3. Hardcoded defaults

The config file is optional. The GitHub token additionally falls back to the
conventional GITHUB_PERSONAL_ACCESS_TOKEN / GITHUB_API_KEY variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import platformdirs
from pydantic import BaseModel, Field
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    YamlConfigSettingsSource,
)

_TOKEN_ENV_VARS = ("GITHUB_PERSONAL_ACCESS_TOKEN", "GITHUB_API_KEY")


def _find_config_file() -> str | None:
    """Return the path of the first sveltecontext.yaml found, or None."""
    candidates = [
        Path("sveltecontext.yaml"),
        Path(platformdirs.user_config_dir("sveltecontext")) / "sveltecontext.yaml",
    ]
    for path in candidates:
        if path.exists():
            return str(path)
    return None


class ServerSettings(BaseModel):
    transport: Literal["stdio", "http"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8080
    # HTTP transport only; an empty key with auth enabled generates one at startup
    auth_enabled: bool = False
    auth_key: str | None = None


class GitHubSettings(BaseModel):
    api_url: str = "https://api.github.com"
    owner: str = "huntabyte"
    repo: str = "shadcn-svelte"
    branch: str = "main"
    token: str | None = None
    timeout_seconds: float = 30.0
    # Registry manifests reference files relative to the docs app
    registry_path_prefix: str = "src/lib/registry/"
    repo_path_prefix: str = "docs/src/lib/registry/"


class RegistrySettings(BaseModel):
    source: Literal["github", "http"] = "github"
    manifest_path: str = "docs/registry.json"
    url: str = "https://shadcn-svelte.com/registry/index.json"


class CacheSettings(BaseModel):
    ttl_seconds: float = 3600.0


class RetrySettings(BaseModel):
    max_attempts: int = Field(default=3, ge=1)
    initial_delay_seconds: float = Field(default=1.0, ge=0)


class TreeSettings(BaseModel):
    default_path: str = "packages"
    depth_limit: int = Field(default=8, ge=1)
    max_depth_limit: int = Field(default=16, ge=1)


class LoggingSettings(BaseModel):
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    format: Literal["json", "text"] = "json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        # Double-underscore separates nesting: SVELTECONTEXT__CACHE__TTL_SECONDS=60
        env_prefix="SVELTECONTEXT__",
        env_nested_delimiter="__",
        yaml_file=_find_config_file(),
        yaml_file_encoding="utf-8",
    )

    server: ServerSettings = ServerSettings()
    github: GitHubSettings = GitHubSettings()
    registry: RegistrySettings = RegistrySettings()
    cache: CacheSettings = CacheSettings()
    retry: RetrySettings = RetrySettings()
    tree: TreeSettings = TreeSettings()
    logging: LoggingSettings = LoggingSettings()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
        **kwargs: Any,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            YamlConfigSettingsSource(settings_cls),
        )


def resolve_github_token(settings: Settings) -> str | None:
    """Return the configured GitHub token, or None for unauthenticated access."""
    if settings.github.token and settings.github.token.strip():
        return settings.github.token.strip()
    for name in _TOKEN_ENV_VARS:
        value = os.environ.get(name, "").strip()
        if value:
            return value
    return None
