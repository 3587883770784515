"""Shared test fixtures for the sveltecontext test suite."""

from __future__ import annotations

import base64
from typing import Any

import pytest

from sveltecontext.cache import TTLCache
from sveltecontext.config import Settings

_CONTENTS_URL = "https://api.github.com/repos/huntabyte/shadcn-svelte/contents"


class FakeClock:
    """Manually advanced monotonic clock for TTL tests."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def _no_ambient_token(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's GitHub token out of the tests."""
    for name in (
        "GITHUB_PERSONAL_ACCESS_TOKEN",
        "GITHUB_API_KEY",
        "SVELTECONTEXT__GITHUB__TOKEN",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def settings() -> Settings:
    """Default settings with backoff sleeps disabled."""
    return Settings(retry={"max_attempts": 3, "initial_delay_seconds": 0})


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(3600, clock=clock)


@pytest.fixture()
def sample_manifest() -> dict[str, Any]:
    """Trimmed registry.json: two UI components plus one non-UI item."""
    return {
        "name": "shadcn-svelte",
        "items": [
            {
                "name": "button",
                "type": "registry:ui",
                "description": "Displays a button or a component that looks like a button.",
                "dependencies": ["tailwind-variants", "bits-ui"],
                "registryDependencies": [],
                "files": [
                    {"path": "src/lib/registry/ui/button/button.svelte", "type": "registry:ui"},
                    {"path": "src/lib/registry/ui/button/index.ts", "type": "registry:ui"},
                ],
            },
            {
                "name": "alert-dialog",
                "type": "registry:ui",
                "dependencies": ["bits-ui", "bits-ui"],
                "registryDependencies": ["button"],
                "files": [
                    {"path": "src/lib/registry/ui/alert-dialog/index.ts", "type": "registry:ui"},
                ],
            },
            {
                "name": "utils",
                "type": "registry:lib",
                "files": [{"path": "src/lib/registry/lib/utils.ts", "type": "registry:lib"}],
            },
        ],
    }


def encode(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture()
def file_payload():
    """Factory for a contents-API single-file response body."""

    def _make(path: str, text: str) -> dict[str, Any]:
        return {
            "type": "file",
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": "0" * 40,
            "size": len(text),
            "download_url": f"https://raw.githubusercontent.com/huntabyte/shadcn-svelte/main/{path}",
            "content": encode(text),
            "encoding": "base64",
        }

    return _make


@pytest.fixture()
def listing_entry():
    """Factory for one entry of a contents-API directory listing."""

    def _make(path: str, kind: str = "file") -> dict[str, Any]:
        return {
            "type": kind,
            "name": path.rsplit("/", 1)[-1],
            "path": path,
            "sha": "1" * 40,
            "size": 0 if kind == "dir" else 42,
            "download_url": None if kind == "dir" else f"https://raw.example/{path}",
        }

    return _make


@pytest.fixture()
def contents_url():
    """Factory for the default repository's contents URL of ``path``."""

    def _make(path: str) -> str:
        return f"{_CONTENTS_URL}/{path}?ref=main"

    return _make
