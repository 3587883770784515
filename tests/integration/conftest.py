"""Integration test fixtures.

Provides a fully wired AppState around a real httpx client (mocked per test
with respx) and an isolated cache, plus the environment for subprocess-based
MCP wire tests.
"""

from __future__ import annotations

import os
from typing import TYPE_CHECKING

import pytest

from sveltecontext.cache import TTLCache
from sveltecontext.fetcher import build_http_client
from sveltecontext.state import build_app_state

if TYPE_CHECKING:
    from pathlib import Path

    from sveltecontext.config import Settings
    from sveltecontext.state import AppState


@pytest.fixture()
def subprocess_env(tmp_path: Path) -> dict[str, str]:
    """Baseline env for a server subprocess.

    Runs from an empty directory so no local sveltecontext.yaml is picked up,
    and points the GitHub API at a closed port so startup never reaches the
    network.
    """
    env = os.environ.copy()
    for name in ("GITHUB_PERSONAL_ACCESS_TOKEN", "GITHUB_API_KEY", "SVELTECONTEXT__GITHUB__TOKEN"):
        env.pop(name, None)
    env["SVELTECONTEXT__SERVER__TRANSPORT"] = "stdio"
    env["SVELTECONTEXT__GITHUB__API_URL"] = "http://127.0.0.1:1"
    env["SVELTECONTEXT__GITHUB__TIMEOUT_SECONDS"] = "2"
    env["SVELTECONTEXT__RETRY__MAX_ATTEMPTS"] = "1"
    env["SVELTECONTEXT__LOGGING__LEVEL"] = "WARNING"
    return env


@pytest.fixture()
async def app_state(settings: Settings) -> AppState:
    """AppState wired exactly as the server lifespan does, minus the token."""
    async with build_http_client(settings.github) as client:
        yield build_app_state(settings, client, TTLCache(settings.cache.ttl_seconds))
