"""Depth-bounded directory tree builder over the GitHub contents API.

Descent is sequential and top-down. A subdirectory that fails to load is
recorded as a child carrying an ``error`` message and its siblings are kept.
Depth is the number of segments in the current path; directories are only
expanded while it is below ``depth_limit``, deeper levels are omitted.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.errors import RateLimitError, SvelteContextError
from sveltecontext.models.tree import DirectoryNode, FileNode
from sveltecontext.retry import RetryPolicy, fetch_with_policy

if TYPE_CHECKING:
    from sveltecontext.models.github import ContentEntry, ContentsResponse, RepoRef
    from sveltecontext.models.tree import TreeNode
    from sveltecontext.protocols import CacheProtocol, ContentSourceProtocol

log = structlog.get_logger()

DEFAULT_DEPTH_LIMIT = 8
MAX_DEPTH_LIMIT = 16


def path_depth(path: str) -> int:
    return len([segment for segment in path.strip("/").split("/") if segment])


def basic_repository_structure() -> DirectoryNode:
    """Hand-written layout returned when the request quota is exhausted."""
    return DirectoryNode(
        path="packages",
        note="Basic structure provided due to API limitations",
        additional_info="Components are installed to your project at $lib/components/ui/",
        degraded=True,
        children={
            "cli": DirectoryNode(
                path="packages/cli",
                description="shadcn-svelte CLI tool",
                note="Command-line interface for adding components",
            ),
            "registry": DirectoryNode(
                path="packages/registry",
                description="Component registry and metadata",
                note="Registry system for component definitions",
            ),
        },
    )


def _file_node(entry: ContentEntry) -> FileNode:
    return FileNode(path=entry.path, name=entry.name, url=entry.download_url, sha=entry.sha)


class DirectoryTreeBuilder:
    def __init__(
        self,
        source: ContentSourceProtocol,
        cache: CacheProtocol,
        retry: RetryPolicy | None = None,
        *,
        default_repo: RepoRef,
        max_depth_limit: int = MAX_DEPTH_LIMIT,
    ) -> None:
        self._source = source
        self._cache = cache
        self._retry = retry or RetryPolicy()
        self._default_repo = default_repo
        self._max_depth_limit = max_depth_limit

    async def _list(self, path: str, repo: RepoRef) -> ContentsResponse:
        cache_key = f"listing-{repo}:{path}"
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached
        contents = await fetch_with_policy(lambda: self._source.get_contents(path, repo), self._retry)
        self._cache.set(cache_key, contents)
        return contents

    async def build_tree(
        self,
        path: str,
        depth_limit: int = DEFAULT_DEPTH_LIMIT,
        repo: RepoRef | None = None,
    ) -> TreeNode:
        """Fetch ``path`` and everything below it, up to ``depth_limit`` segments."""
        repo = repo or self._default_repo
        depth_limit = max(1, min(depth_limit, self._max_depth_limit))
        return await self._build(path.strip("/"), depth_limit, repo)

    async def _build(self, path: str, depth_limit: int, repo: RepoRef) -> TreeNode:
        contents = await self._list(path, repo)

        if not isinstance(contents, list):
            return _file_node(contents)

        children: dict[str, TreeNode] = {}
        descend = path_depth(path) < depth_limit

        for entry in contents:
            if entry.type == "file":
                children[entry.name] = _file_node(entry)
            elif entry.type == "dir" and descend:
                children[entry.name] = await self._build_child(entry, depth_limit, repo)

        return DirectoryNode(path=path, children=children)

    async def _build_child(self, entry: ContentEntry, depth_limit: int, repo: RepoRef) -> TreeNode:
        try:
            return await self._build(entry.path, depth_limit, repo)
        except SvelteContextError as exc:
            log.warning(
                "subtree_fetch_failed",
                repo=str(repo),
                path=entry.path,
                code=exc.code,
                error=exc.message,
            )
            return DirectoryNode(path=entry.path, error=f"Failed to fetch contents: {exc.message}")

    async def build_tree_with_fallback(
        self,
        path: str,
        depth_limit: int = DEFAULT_DEPTH_LIMIT,
        repo: RepoRef | None = None,
    ) -> TreeNode:
        """``build_tree``, but an exhausted quota yields the skeleton layout."""
        try:
            return await self.build_tree(path, depth_limit, repo)
        except RateLimitError as exc:
            log.warning(
                "tree_fallback_used",
                path=path,
                reset_at=exc.reset_at.isoformat() if exc.reset_at else None,
            )
            return basic_repository_structure()
