"""Integration tests for MCP tool handlers.

Tests the full path through each handler: input validation → resolution →
output serialisation. Uses a real AppState with the GitHub API mocked.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import httpx
import pytest
import respx

import sveltecontext.tools.get_component as t_get_component
import sveltecontext.tools.get_component_demo as t_get_demo
import sveltecontext.tools.get_component_metadata as t_get_metadata
import sveltecontext.tools.get_directory_structure as t_get_tree
import sveltecontext.tools.list_components as t_list
from sveltecontext.components import FALLBACK_COMPONENTS
from sveltecontext.errors import ErrorCode, SvelteContextError

if TYPE_CHECKING:
    from sveltecontext.state import AppState

REGISTRY_FILES = {
    "docs/src/lib/registry/ui/button/button.svelte": "<button class={cn(className)}><slot /></button>\n",
    "docs/src/lib/registry/ui/button/index.ts": "export { default as Button } from './button.svelte';\n",
    "docs/src/lib/registry/ui/alert-dialog/index.ts": "export * from 'bits-ui';\n",
}


@pytest.fixture()
def github(sample_manifest: dict, contents_url, file_payload):
    """respx router serving the sample manifest and its component files."""
    with respx.mock(assert_all_called=False) as router:
        router.get(contents_url("docs/registry.json")).mock(
            return_value=httpx.Response(
                200, json=file_payload("docs/registry.json", json.dumps(sample_manifest))
            )
        )
        for path, text in REGISTRY_FILES.items():
            router.get(contents_url(path)).mock(
                return_value=httpx.Response(200, json=file_payload(path, text))
            )
        yield router


@pytest.fixture()
def github_down(contents_url):
    """respx router where the manifest request always fails."""
    with respx.mock(assert_all_called=False) as router:
        router.get(contents_url("docs/registry.json")).mock(return_value=httpx.Response(503))
        yield router


class TestGetComponentHandler:
    async def test_returns_source_document(self, app_state: AppState, github) -> None:
        result = await t_get_component.handle("button", app_state)
        assert result.startswith("// button component from shadcn-svelte")
        assert "<button class={cn(className)}><slot /></button>" in result
        assert "export { default as Button }" in result

    async def test_name_is_normalised(self, app_state: AppState, github) -> None:
        result = await t_get_component.handle("  Button ", app_state)
        assert result.startswith("// button component")

    async def test_unknown_component(self, app_state: AppState, github) -> None:
        with pytest.raises(SvelteContextError) as exc_info:
            await t_get_component.handle("not-a-thing", app_state)
        assert exc_info.value.code == ErrorCode.COMPONENT_NOT_FOUND

    @pytest.mark.parametrize("name", ["", "   ", "../etc/passwd", "Button!", "a" * 101])
    async def test_invalid_name(self, app_state: AppState, name: str) -> None:
        with pytest.raises(SvelteContextError) as exc_info:
            await t_get_component.handle(name, app_state)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT
        assert exc_info.value.recoverable is False

    async def test_fallback_when_registry_down(self, app_state: AppState, github_down) -> None:
        result = await t_get_component.handle("carousel", app_state)
        assert "// File: carousel" in result
        assert "// Content not available" in result


class TestGetComponentDemoHandler:
    async def test_includes_docs_link(self, app_state: AppState, github) -> None:
        result = await t_get_demo.handle("button", app_state)
        assert "# button Component" in result
        assert result.endswith("For full examples, visit: https://shadcn-svelte.com/docs/components/button")


class TestGetComponentMetadataHandler:
    async def test_json_shape(self, app_state: AppState, github) -> None:
        result = await t_get_metadata.handle("alert-dialog", app_state)
        assert result["name"] == "alert-dialog"
        assert result["kind"] == "registry:ui"
        assert result["npm_dependencies"] == ["bits-ui"]
        assert result["registry_dependencies"] == ["button"]
        assert result["degraded"] is False
        json.dumps(result)


class TestListComponentsHandler:
    async def test_from_registry(self, app_state: AppState, github) -> None:
        result = await t_list.handle(app_state)
        assert result == {"components": ["alert-dialog", "button"], "total": 2}

    async def test_fallback_list(self, app_state: AppState, github_down) -> None:
        result = await t_list.handle(app_state)
        assert result["total"] == len(FALLBACK_COMPONENTS)
        assert result["components"] == sorted(FALLBACK_COMPONENTS)


class TestSearchComponentsHandler:
    async def test_substring(self, app_state: AppState, github) -> None:
        result = await t_list.handle_search("dialog", app_state)
        assert result == {"query": "dialog", "matches": ["alert-dialog"], "total": 1}

    async def test_empty_query(self, app_state: AppState) -> None:
        with pytest.raises(SvelteContextError) as exc_info:
            await t_list.handle_search("  ", app_state)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT


class TestGetDirectoryStructureHandler:
    async def test_default_path(self, app_state: AppState, contents_url, listing_entry) -> None:
        with respx.mock() as router:
            router.get(contents_url("packages")).mock(
                return_value=httpx.Response(200, json=[listing_entry("packages/package.json")])
            )
            result = await t_get_tree.handle(app_state)

        assert result["type"] == "directory"
        assert result["path"] == "packages"
        assert result["children"]["package.json"]["type"] == "file"
        # Unset optional fields are not serialised
        assert "error" not in result

    async def test_rate_limited_returns_skeleton(self, app_state: AppState, contents_url) -> None:
        with respx.mock() as router:
            router.get(contents_url("packages")).mock(
                return_value=httpx.Response(
                    403,
                    json={"message": "API rate limit exceeded"},
                    headers={"x-ratelimit-remaining": "0"},
                )
            )
            result = await t_get_tree.handle(app_state)

        assert result["degraded"] is True
        assert set(result["children"]) == {"cli", "registry"}

    async def test_repository_override(self, app_state: AppState, listing_entry) -> None:
        with respx.mock() as router:
            route = router.get("https://api.github.com/repos/me/fork/contents/src?ref=main").mock(
                return_value=httpx.Response(200, json=[listing_entry("src/a.ts")])
            )
            await t_get_tree.handle(app_state, path="/src/", owner="me", repo="fork")
        assert route.called

    @pytest.mark.parametrize("path", ["../secrets", "packages/./cli"])
    async def test_rejects_relative_segments(self, app_state: AppState, path: str) -> None:
        with pytest.raises(SvelteContextError) as exc_info:
            await t_get_tree.handle(app_state, path=path)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT

    @pytest.mark.parametrize("depth_limit", [0, -1])
    async def test_rejects_non_positive_depth(self, app_state: AppState, depth_limit: int) -> None:
        with pytest.raises(SvelteContextError) as exc_info:
            await t_get_tree.handle(app_state, depth_limit=depth_limit)
        assert exc_info.value.code == ErrorCode.INVALID_INPUT
