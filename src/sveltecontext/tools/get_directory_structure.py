"""Tool handler for get_directory_structure.

Builds the repository tree below ``path``. When GitHub reports an exhausted
quota the handler returns the degraded skeleton instead of an error.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.errors import ErrorCode, SvelteContextError
from sveltecontext.models.github import RepoRef
from sveltecontext.models.tools import DirectoryStructureInput

if TYPE_CHECKING:
    from sveltecontext.state import AppState


async def handle(
    state: AppState,
    path: str | None = None,
    owner: str | None = None,
    repo: str | None = None,
    branch: str | None = None,
    depth_limit: int | None = None,
) -> dict:
    """Handle a get_directory_structure tool call."""
    tree_settings = state.settings.tree
    log = structlog.get_logger().bind(tool="get_directory_structure", path=path)
    log.info("handler_called")

    try:
        validated = DirectoryStructureInput(
            path=path or tree_settings.default_path,
            owner=owner,
            repo=repo,
            branch=branch,
            depth_limit=tree_settings.depth_limit if depth_limit is None else depth_limit,
        )
    except ValueError as exc:
        raise SvelteContextError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a repository-relative path without '..' and a depth_limit >= 1.",
            recoverable=False,
        ) from exc

    default = state.github.default_repo
    repo_ref = RepoRef(
        owner=validated.owner or default.owner,
        repo=validated.repo or default.repo,
        branch=validated.branch or default.branch,
    )

    tree = await state.tree.build_tree_with_fallback(
        validated.path,
        validated.depth_limit,
        repo_ref,
    )
    return tree.model_dump(mode="json", exclude_none=True)
