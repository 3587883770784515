"""Tool handler for get_component_demo.

shadcn-svelte keeps its demos on the documentation site, so this returns the
component context summary plus a link to the full examples.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from sveltecontext.formatting import DOCS_BASE_URL
from sveltecontext.tools.get_component import validate_component_name

if TYPE_CHECKING:
    from sveltecontext.state import AppState


async def handle(component_name: str, state: AppState) -> str:
    """Handle a get_component_demo tool call."""
    log = structlog.get_logger().bind(tool="get_component_demo", component=component_name)
    log.info("handler_called")

    name = validate_component_name(component_name)
    context = await state.components.get_component_context(name)
    return f"{context}\nFor full examples, visit: {DOCS_BASE_URL}/{name}"
