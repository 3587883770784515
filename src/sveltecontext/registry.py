"""Component registry: manifest sources, index building, and cached resolution."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from sveltecontext.errors import ErrorCode, SvelteContextError
from sveltecontext.fetcher import decode_content
from sveltecontext.models.registry import (
    UI_COMPONENT_TYPE,
    ComponentFile,
    ComponentMetadata,
    RegistryIndex,
    RegistryItem,
)
from sveltecontext.retry import RetryPolicy, fetch_with_policy

if TYPE_CHECKING:
    from sveltecontext.config import Settings
    from sveltecontext.fetcher import GitHubClient
    from sveltecontext.protocols import CacheProtocol, ManifestSource

log = structlog.get_logger()

REGISTRY_INDEX_CACHE_KEY = "registry-index"


def _items_from_document(document: Any, source: str) -> list[dict[str, Any]]:
    """Accept either ``{"items": [...]}`` or a bare list of items."""
    if isinstance(document, dict):
        document = document.get("items")
    if not isinstance(document, list):
        raise SvelteContextError(
            code=ErrorCode.UNEXPECTED_RESPONSE,
            message=f"Registry manifest from {source} has no item list",
            suggestion="The manifest must be a list of items or an object with an 'items' list.",
            recoverable=False,
        )
    return [item for item in document if isinstance(item, dict)]


class GitHubManifestSource:
    """Reads ``registry.json`` from the repository through the contents API."""

    def __init__(self, github: GitHubClient, manifest_path: str) -> None:
        self._github = github
        self._manifest_path = manifest_path

    async def fetch_items(self) -> list[dict[str, Any]]:
        contents = await self._github.get_contents(self._manifest_path)
        if isinstance(contents, list):
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Registry manifest path {self._manifest_path} is a directory",
                suggestion="Point registry.manifest_path at the registry.json file.",
                recoverable=False,
            )
        try:
            document = json.loads(decode_content(contents))
        except json.JSONDecodeError as exc:
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Registry manifest is not valid JSON: {exc}",
                suggestion="The manifest in the repository may be mid-update.",
                recoverable=True,
            ) from exc
        return _items_from_document(document, self._manifest_path)


class HttpManifestSource:
    """Reads a JSON manifest from a plain HTTP endpoint."""

    def __init__(self, github: GitHubClient, url: str) -> None:
        self._github = github
        self._url = url

    async def fetch_items(self) -> list[dict[str, Any]]:
        document = await self._github.get_json(self._url)
        return _items_from_document(document, self._url)


def build_manifest_source(settings: Settings, github: GitHubClient) -> ManifestSource:
    if settings.registry.source == "http":
        return HttpManifestSource(github, settings.registry.url)
    return GitHubManifestSource(github, settings.registry.manifest_path)


def build_index(raw_items: list[dict[str, Any]]) -> RegistryIndex:
    """Build the component index from raw manifest items.

    Keeps only named UI-component items. Malformed items are skipped so one
    bad entry does not discard the whole manifest.
    """
    index: RegistryIndex = {}
    skipped = 0

    for raw in raw_items:
        try:
            item = RegistryItem.model_validate(raw)
        except ValidationError:
            skipped += 1
            continue
        if item.type != UI_COMPONENT_TYPE or not item.name:
            continue

        index[item.name] = ComponentMetadata(
            name=item.name,
            kind=item.type,
            files=tuple(
                ComponentFile(path=f.path, role=f.type, target=f.target) for f in item.files
            ),
            npm_dependencies=item.dependencies,
            registry_dependencies=item.registry_dependencies,
            description=item.description or f"{item.name} component from shadcn-svelte",
        )

    if skipped:
        log.warning("registry_items_skipped", reason="invalid_item", count=skipped)
    return index


class RegistryIndexResolver:
    """Resolves the registry index, cached for one TTL window."""

    def __init__(
        self,
        source: ManifestSource,
        cache: CacheProtocol,
        retry: RetryPolicy | None = None,
    ) -> None:
        self._source = source
        self._cache = cache
        self._retry = retry or RetryPolicy()

    async def get_index(self) -> RegistryIndex:
        """Return the index, or an empty one when the manifest is unavailable.

        Never raises: an empty result tells callers to fall back to static data.
        Empty results are not cached so the next call tries the remote again.
        """
        cached = self._cache.get(REGISTRY_INDEX_CACHE_KEY)
        if cached is not None:
            return cached

        try:
            raw_items = await fetch_with_policy(self._source.fetch_items, self._retry)
            index = build_index(raw_items)
        except Exception as exc:
            log.warning("registry_index_unavailable", error=str(exc), exc_info=True)
            return {}

        if not index:
            log.warning("registry_index_unavailable", reason="no_ui_components")
            return {}

        self._cache.set(REGISTRY_INDEX_CACHE_KEY, index)
        log.info("registry_index_loaded", components=len(index))
        return index
