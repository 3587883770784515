"""Component resolution: registry index first, static name list as fallback.

Each public query has one fallback decision point. A component listed in the
index is returned with every file body the remote could supply; a component
only known from FALLBACK_COMPONENTS is returned as a degraded single-file
stub; anything else is absent.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog
from rapidfuzz import fuzz, process

from sveltecontext.errors import ErrorCode, SvelteContextError
from sveltecontext.formatting import render_component_context, render_component_source
from sveltecontext.models.registry import (
    UI_COMPONENT_TYPE,
    ComponentDependencies,
    ComponentFile,
    ComponentMetadata,
)
from sveltecontext.retry import RetryPolicy, fetch_with_policy

if TYPE_CHECKING:
    from sveltecontext.protocols import CacheProtocol, ContentSourceProtocol
    from sveltecontext.registry import RegistryIndexResolver

log = structlog.get_logger()

COMPONENTS_LIST_CACHE_KEY = "components-list"

# Known shadcn-svelte components, used only when the manifest is unavailable
FALLBACK_COMPONENTS: tuple[str, ...] = (
    "accordion",
    "alert",
    "alert-dialog",
    "aspect-ratio",
    "avatar",
    "badge",
    "breadcrumb",
    "button",
    "calendar",
    "card",
    "carousel",
    "chart",
    "checkbox",
    "collapsible",
    "combobox",
    "command",
    "context-menu",
    "data-table",
    "date-picker",
    "dialog",
    "drawer",
    "dropdown-menu",
    "formsnap",
    "hover-card",
    "input",
    "input-otp",
    "label",
    "menubar",
    "navigation-menu",
    "pagination",
    "popover",
    "progress",
    "radio-group",
    "range-calendar",
    "resizable",
    "scroll-area",
    "select",
    "separator",
    "sheet",
    "sidebar",
    "skeleton",
    "slider",
    "sonner",
    "switch",
    "table",
    "tabs",
    "textarea",
    "toggle",
    "toggle-group",
    "tooltip",
    "typography",
)


def component_cache_key(name: str) -> str:
    return f"component-{name}"


def fallback_component(name: str) -> ComponentMetadata:
    """Minimal contentless metadata for a name from the static list."""
    return ComponentMetadata(
        name=name,
        kind=UI_COMPONENT_TYPE,
        files=(ComponentFile(path=f"$lib/components/ui/{name}", role=UI_COMPONENT_TYPE),),
        description=f"{name} component from shadcn-svelte",
        degraded=True,
    )


class ComponentResolver:
    """Assembles component metadata and file bodies for the tool surface."""

    def __init__(
        self,
        registry: RegistryIndexResolver,
        source: ContentSourceProtocol,
        cache: CacheProtocol,
        retry: RetryPolicy | None = None,
        *,
        registry_path_prefix: str = "src/lib/registry/",
        repo_path_prefix: str = "docs/src/lib/registry/",
        fallback_names: tuple[str, ...] = FALLBACK_COMPONENTS,
    ) -> None:
        self._registry = registry
        self._source = source
        self._cache = cache
        self._retry = retry or RetryPolicy()
        self._registry_path_prefix = registry_path_prefix
        self._repo_path_prefix = repo_path_prefix
        self._fallback_names = fallback_names

    def repo_path(self, registry_path: str) -> str:
        """Map a manifest file path to its location in the repository."""
        if registry_path.startswith(self._registry_path_prefix):
            return self._repo_path_prefix + registry_path[len(self._registry_path_prefix) :]
        return registry_path

    async def _fetch_file(self, file: ComponentFile) -> ComponentFile:
        path = self.repo_path(file.path)
        try:
            content = await fetch_with_policy(lambda: self._source.get_file_text(path), self._retry)
        except SvelteContextError as exc:
            log.warning("component_file_fetch_failed", path=path, code=exc.code, error=exc.message)
            content = ""
        return file.model_copy(update={"content": content})

    async def get_component(self, name: str) -> ComponentMetadata | None:
        """Resolve ``name`` to metadata with file bodies, a degraded stub, or None."""
        cache_key = component_cache_key(name)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached

        index = await self._registry.get_index()
        indexed = index.get(name)
        if indexed is not None:
            files = await asyncio.gather(*(self._fetch_file(f) for f in indexed.files))
            component = indexed.model_copy(update={"files": tuple(files)})
            self._cache.set(cache_key, component)
            log.info(
                "component_resolved",
                component=name,
                source="registry",
                files=len(files),
                files_missing=sum(1 for f in files if not f.content),
            )
            return component

        if name in self._fallback_names:
            component = fallback_component(name)
            self._cache.set(cache_key, component)
            log.info("component_resolved", component=name, source="fallback_list")
            return component

        log.info("component_not_found", component=name, index_size=len(index))
        return None

    async def require_component(self, name: str) -> ComponentMetadata:
        component = await self.get_component(name)
        if component is None:
            raise SvelteContextError(
                code=ErrorCode.COMPONENT_NOT_FOUND,
                message=f'Component "{name}" not found in shadcn-svelte registry',
                suggestion="Call list_components or search_components to find valid names.",
                recoverable=False,
            )
        return component

    async def get_component_source(self, name: str) -> str:
        component = await self.require_component(name)
        return render_component_source(component)

    async def get_component_context(self, name: str) -> str:
        component = await self.require_component(name)
        return render_component_context(component)

    async def get_component_dependencies(self, name: str) -> ComponentDependencies:
        component = await self.get_component(name)
        if component is None:
            return ComponentDependencies()
        return ComponentDependencies(
            npm=list(component.npm_dependencies),
            registry=list(component.registry_dependencies),
        )

    async def get_available_components(self) -> list[str]:
        """Component names from the index, or the static list when it is empty."""
        cached = self._cache.get(COMPONENTS_LIST_CACHE_KEY)
        if cached is not None:
            return list(cached)

        index = await self._registry.get_index()
        if index:
            names = tuple(index)
        else:
            log.warning("components_list_fallback", reason="registry_index_empty")
            names = self._fallback_names

        self._cache.set(COMPONENTS_LIST_CACHE_KEY, names)
        return list(names)

    async def component_exists(self, name: str) -> bool:
        return name.lower() in await self.get_available_components()

    async def search_components(
        self,
        query: str,
        *,
        fuzzy_score_cutoff: int = 70,
        fuzzy_max_results: int = 5,
    ) -> list[str]:
        """Substring matches in list order; fuzzy matches only when none hit."""
        names = await self.get_available_components()
        term = query.strip().lower()
        if not term:
            return []

        matches = [name for name in names if term in name.lower()]
        if matches:
            return matches

        results = process.extract(
            term,
            names,
            scorer=fuzz.ratio,
            limit=fuzzy_max_results,
            score_cutoff=fuzzy_score_cutoff,
        )
        return [name for name, _score, _idx in results]

    def clear_cache(self) -> None:
        self._cache.clear()
