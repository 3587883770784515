"""Tool handler for get_component_metadata."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.tools.get_component import validate_component_name

if TYPE_CHECKING:
    from sveltecontext.state import AppState


async def handle(component_name: str, state: AppState) -> dict:
    """Handle a get_component_metadata tool call."""
    log = structlog.get_logger().bind(tool="get_component_metadata", component=component_name)
    log.info("handler_called")

    name = validate_component_name(component_name)
    component = await state.components.require_component(name)
    return component.model_dump(mode="json")
