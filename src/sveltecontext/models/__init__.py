from __future__ import annotations

from sveltecontext.models.cache import CacheEntry
from sveltecontext.models.github import (
    ContentEntry,
    ErrorEnvelope,
    RateLimitStatus,
    RepoRef,
)
from sveltecontext.models.registry import (
    ComponentDependencies,
    ComponentFile,
    ComponentMetadata,
    RegistryIndex,
    RegistryItem,
    RegistryItemFile,
)
from sveltecontext.models.tools import (
    ComponentNameInput,
    DirectoryStructureInput,
    ListComponentsOutput,
    SearchComponentsInput,
    SearchComponentsOutput,
)
from sveltecontext.models.tree import DirectoryNode, FileNode, TreeNode

__all__ = [
    # cache
    "CacheEntry",
    # github
    "ContentEntry",
    "ErrorEnvelope",
    "RateLimitStatus",
    "RepoRef",
    # registry
    "RegistryItem",
    "RegistryItemFile",
    "ComponentFile",
    "ComponentMetadata",
    "ComponentDependencies",
    "RegistryIndex",
    # tree
    "FileNode",
    "DirectoryNode",
    "TreeNode",
    # tools
    "ComponentNameInput",
    "SearchComponentsInput",
    "DirectoryStructureInput",
    "ListComponentsOutput",
    "SearchComponentsOutput",
]
