"""Protocol interfaces for swappable components.

Resolvers and AppState reference these protocols, not the concrete
implementations. This allows:
- Tests to inject isolated caches and fake sources
- The registry manifest to come from GitHub or a plain JSON endpoint
  without changing resolver code
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from sveltecontext.models.github import ContentsResponse, RepoRef


class CacheProtocol(Protocol):
    """Interface for the in-memory resolution cache."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def clear(self) -> None: ...


class ContentSourceProtocol(Protocol):
    """Interface for the hierarchical content endpoint (GitHub contents API)."""

    async def get_contents(self, path: str, repo: RepoRef | None = None) -> ContentsResponse: ...

    async def get_file_text(self, path: str, repo: RepoRef | None = None) -> str: ...


class ManifestSource(Protocol):
    """Strategy that returns the raw item list of the component manifest."""

    async def fetch_items(self) -> list[dict[str, Any]]: ...
