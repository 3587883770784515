"""MCP server entrypoint.

Responsibilities (and nothing more):
- Configure structlog
- Create AppState via the FastMCP lifespan context manager
- Register tools and resources
- Start the correct transport (stdio or HTTP)
"""

from __future__ import annotations

import json
import logging
import sys
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

import structlog
from mcp.server.fastmcp import Context, FastMCP
from mcp.types import CallToolResult, TextContent

import sveltecontext.tools.get_component as t_get_component
import sveltecontext.tools.get_component_demo as t_get_demo
import sveltecontext.tools.get_component_metadata as t_get_metadata
import sveltecontext.tools.get_directory_structure as t_get_tree
import sveltecontext.tools.list_components as t_list
from sveltecontext import __version__
from sveltecontext.config import Settings, resolve_github_token
from sveltecontext.errors import SvelteContextError
from sveltecontext.fetcher import build_http_client
from sveltecontext.formatting import install_command
from sveltecontext.state import AppState, build_app_state
from sveltecontext.transport import run_http_server

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Awaitable

log = structlog.get_logger()


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(settings: Settings) -> None:
    """Configure structlog. Called once at startup before any log statements."""
    log_level = logging.getLevelNamesMapping()[settings.logging.level]

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if settings.logging.format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        shared_processors.append(structlog.processors.format_exc_info)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        # stdout carries the MCP JSON-RPC stream in stdio mode
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


async def _report_anonymous_quota(state: AppState) -> None:
    """Warn once about the unauthenticated quota. Never fails startup."""
    try:
        quota = await state.github.get_rate_limit()
    except SvelteContextError as exc:
        log.warning("rate_limit_check_failed", code=exc.code, error=exc.message)
        return

    log.warning(
        "github_token_missing",
        limit=quota.limit,
        remaining=quota.remaining,
        reset_at=quota.reset_at.isoformat() if quota.reset_at else None,
        hint="Set GITHUB_PERSONAL_ACCESS_TOKEN for a higher request quota",
    )


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncGenerator[AppState, None]:
    """Create and tear down all shared resources for the server's lifetime."""
    settings = Settings()
    _setup_logging(settings)

    log.info(
        "server_starting",
        version=__version__,
        transport=settings.server.transport,
        repo=f"{settings.github.owner}/{settings.github.repo}@{settings.github.branch}",
        registry_source=settings.registry.source,
    )

    token = resolve_github_token(settings)
    http_client = build_http_client(settings.github, token)
    state = build_app_state(settings, http_client)

    if token is None:
        await _report_anonymous_quota(state)

    log.info("server_started", version=__version__, authenticated=token is not None)

    try:
        yield state
    finally:
        await http_client.aclose()
        log.info("server_stopping")


# ---------------------------------------------------------------------------
# FastMCP instance, tools and resources
# ---------------------------------------------------------------------------

mcp = FastMCP("sveltecontext", lifespan=lifespan)
# FastMCP doesn't expose a version kwarg; the initialize handshake reads it here
mcp._mcp_server.version = __version__  # pyright: ignore[reportPrivateUsage]


def _serialise_tool_error(error: SvelteContextError) -> CallToolResult:
    """Convert a SvelteContextError to the MCP tool error result envelope."""
    return CallToolResult(
        content=[TextContent(type="text", text=json.dumps(error.to_dict()))],
        isError=True,
    )


async def _run_tool(tool: str, call: Awaitable[object]) -> object:
    try:
        return await call
    except SvelteContextError as exc:
        log.warning(
            "tool_error",
            tool=tool,
            code=exc.code,
            message=exc.message,
            recoverable=exc.recoverable,
        )
        return _serialise_tool_error(exc)
    except Exception:
        log.error("tool_unexpected_error", tool=tool, exc_info=True)
        raise


def _state(ctx: Context) -> AppState:
    return ctx.request_context.lifespan_context


@mcp.tool()
async def get_component(component_name: str, ctx: Context) -> object:
    """Get the source code of a shadcn-svelte component.

    Returns every file of the component with a header listing its npm
    dependencies, required components and install command.
    """
    return await _run_tool("get_component", t_get_component.handle(component_name, _state(ctx)))


@mcp.tool()
async def get_component_demo(component_name: str, ctx: Context) -> object:
    """Get usage information and a docs link with demos for a shadcn-svelte component."""
    return await _run_tool("get_component_demo", t_get_demo.handle(component_name, _state(ctx)))


@mcp.tool()
async def list_components(ctx: Context) -> object:
    """List all available shadcn-svelte components."""
    return await _run_tool("list_components", t_list.handle(_state(ctx)))


@mcp.tool()
async def search_components(query: str, ctx: Context) -> object:
    """Search component names by substring, falling back to fuzzy matching."""
    return await _run_tool("search_components", t_list.handle_search(query, _state(ctx)))


@mcp.tool()
async def get_component_metadata(component_name: str, ctx: Context) -> object:
    """Get registry metadata for a component: type, files and dependencies."""
    return await _run_tool(
        "get_component_metadata",
        t_get_metadata.handle(component_name, _state(ctx)),
    )


@mcp.tool()
async def get_directory_structure(
    ctx: Context,
    path: str | None = None,
    owner: str | None = None,
    repo: str | None = None,
    branch: str | None = None,
    depth_limit: int | None = None,
) -> object:
    """Get the directory tree of the shadcn-svelte repository.

    Defaults to the ``packages`` directory. When the GitHub quota is
    exhausted a basic, hand-written layout is returned and marked degraded.
    """
    return await _run_tool(
        "get_directory_structure",
        t_get_tree.handle(
            _state(ctx),
            path=path,
            owner=owner,
            repo=repo,
            branch=branch,
            depth_limit=depth_limit,
        ),
    )


@mcp.resource("shadcn-svelte://components", mime_type="application/json")
async def components_resource() -> str:
    """JSON array of every available component name."""
    state: AppState = mcp.get_context().request_context.lifespan_context
    return json.dumps(sorted(await state.components.get_available_components()))


@mcp.resource("shadcn-svelte://install/{package_manager}/{component}", mime_type="text/plain")
def install_resource(package_manager: str, component: str) -> str:
    """Install command for a component with npm, pnpm, yarn or bun."""
    return install_command(component, package_manager)


# ---------------------------------------------------------------------------
# Entrypoint
# ---------------------------------------------------------------------------


def main() -> None:
    settings = Settings()

    if settings.server.transport == "http":
        _setup_logging(settings)
        run_http_server(mcp, settings)
        return

    mcp.run()


if __name__ == "__main__":
    main()
