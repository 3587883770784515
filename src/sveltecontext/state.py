"""Application state container.

AppState is created once at server startup (inside the FastMCP lifespan context
manager) and injected into every tool handler via the MCP Context object.
Tests build it directly with isolated caches and mocked HTTP.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from sveltecontext.cache import TTLCache
from sveltecontext.components import ComponentResolver
from sveltecontext.fetcher import GitHubClient
from sveltecontext.registry import RegistryIndexResolver, build_manifest_source
from sveltecontext.retry import RetryPolicy
from sveltecontext.tree import DirectoryTreeBuilder

if TYPE_CHECKING:
    import httpx

    from sveltecontext.config import Settings
    from sveltecontext.protocols import CacheProtocol


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every tool handler."""

    settings: Settings
    http_client: httpx.AsyncClient
    cache: CacheProtocol
    github: GitHubClient
    registry: RegistryIndexResolver
    components: ComponentResolver
    tree: DirectoryTreeBuilder


def build_app_state(
    settings: Settings,
    http_client: httpx.AsyncClient,
    cache: CacheProtocol | None = None,
) -> AppState:
    """Wire the resolvers around one shared client and one shared cache."""
    cache = cache if cache is not None else TTLCache(settings.cache.ttl_seconds)
    retry = RetryPolicy(
        max_attempts=settings.retry.max_attempts,
        initial_delay=settings.retry.initial_delay_seconds,
    )
    github = GitHubClient(http_client, settings.github)
    registry = RegistryIndexResolver(build_manifest_source(settings, github), cache, retry)
    components = ComponentResolver(
        registry,
        github,
        cache,
        retry,
        registry_path_prefix=settings.github.registry_path_prefix,
        repo_path_prefix=settings.github.repo_path_prefix,
    )
    tree = DirectoryTreeBuilder(
        github,
        cache,
        retry,
        default_repo=github.default_repo,
        max_depth_limit=settings.tree.max_depth_limit,
    )
    return AppState(
        settings=settings,
        http_client=http_client,
        cache=cache,
        github=github,
        registry=registry,
        components=components,
        tree=tree,
    )
