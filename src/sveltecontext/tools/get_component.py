"""Tool handler for get_component.

Validates the component name, resolves it and returns the combined source
document. No MCP or FastMCP imports; server.py handles the MCP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.errors import ErrorCode, SvelteContextError
from sveltecontext.models.tools import ComponentNameInput

if TYPE_CHECKING:
    from sveltecontext.state import AppState


def validate_component_name(component_name: str) -> str:
    try:
        return ComponentNameInput(component_name=component_name).component_name
    except ValueError as exc:
        raise SvelteContextError(
            code=ErrorCode.INVALID_INPUT,
            message=str(exc),
            suggestion='Provide a kebab-case component name such as "button" or "alert-dialog".',
            recoverable=False,
        ) from exc


async def handle(component_name: str, state: AppState) -> str:
    """Handle a get_component tool call."""
    log = structlog.get_logger().bind(tool="get_component", component=component_name)
    log.info("handler_called")

    name = validate_component_name(component_name)
    source = await state.components.get_component_source(name)

    log.info("handler_complete", content_length=len(source))
    return source
