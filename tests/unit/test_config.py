"""Unit tests for settings loading and GitHub token resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from sveltecontext.config import Settings, resolve_github_token

if TYPE_CHECKING:
    from pathlib import Path


class TestDefaults:
    def test_repository_defaults(self) -> None:
        settings = Settings()
        assert settings.github.owner == "huntabyte"
        assert settings.github.repo == "shadcn-svelte"
        assert settings.github.branch == "main"

    def test_operational_defaults(self) -> None:
        settings = Settings()
        assert settings.cache.ttl_seconds == 3600
        assert settings.retry.max_attempts == 3
        assert settings.retry.initial_delay_seconds == 1.0
        assert settings.tree.default_path == "packages"
        assert settings.tree.depth_limit == 8
        assert settings.registry.source == "github"
        assert settings.server.transport == "stdio"


class TestEnvironment:
    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SVELTECONTEXT__GITHUB__BRANCH", "next")
        monkeypatch.setenv("SVELTECONTEXT__CACHE__TTL_SECONDS", "60")
        settings = Settings()
        assert settings.github.branch == "next"
        assert settings.cache.ttl_seconds == 60

    def test_init_args_win_over_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SVELTECONTEXT__REGISTRY__SOURCE", "http")
        assert Settings(registry={"source": "github"}).registry.source == "github"

    def test_invalid_retry_attempts_rejected(self) -> None:
        with pytest.raises(ValueError):
            Settings(retry={"max_attempts": 0})


class TestYamlFile:
    def test_yaml_file_is_read(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config = tmp_path / "sveltecontext.yaml"
        config.write_text("github:\n  branch: dev\ntree:\n  depth_limit: 3\n", encoding="utf-8")

        class _FileSettings(Settings):
            model_config = {**Settings.model_config, "yaml_file": str(config)}

        settings = _FileSettings()
        assert settings.github.branch == "dev"
        assert settings.tree.depth_limit == 3


class TestResolveGitHubToken:
    def test_no_token(self) -> None:
        assert resolve_github_token(Settings()) is None

    def test_settings_token_first(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "from-pat")
        settings = Settings(github={"token": " from-settings "})
        assert resolve_github_token(settings) == "from-settings"

    def test_personal_access_token_before_api_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "from-pat")
        monkeypatch.setenv("GITHUB_API_KEY", "from-api-key")
        assert resolve_github_token(Settings()) == "from-pat"

    def test_api_key_last(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_API_KEY", "from-api-key")
        assert resolve_github_token(Settings()) == "from-api-key"

    def test_blank_values_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "   ")
        assert resolve_github_token(Settings(github={"token": ""})) is None
