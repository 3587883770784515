"""Tool handlers for list_components and search_components."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.errors import ErrorCode, SvelteContextError
from sveltecontext.models.tools import (
    ListComponentsOutput,
    SearchComponentsInput,
    SearchComponentsOutput,
)

if TYPE_CHECKING:
    from sveltecontext.state import AppState


async def handle(state: AppState) -> dict:
    """Handle a list_components tool call."""
    log = structlog.get_logger().bind(tool="list_components")
    log.info("handler_called")

    components = sorted(await state.components.get_available_components())
    output = ListComponentsOutput(components=components, total=len(components))
    return output.model_dump(mode="json")


async def handle_search(query: str, state: AppState) -> dict:
    """Handle a search_components tool call."""
    log = structlog.get_logger().bind(tool="search_components", query=query)
    log.info("handler_called")

    try:
        validated = SearchComponentsInput(query=query)
    except ValueError as exc:
        raise SvelteContextError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion="Provide a non-empty search term (max 100 chars).",
            recoverable=False,
        ) from exc

    matches = await state.components.search_components(validated.query)
    log.info("search_complete", match_count=len(matches))

    output = SearchComponentsOutput(query=validated.query, matches=matches, total=len(matches))
    return output.model_dump(mode="json")
