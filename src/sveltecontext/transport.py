"""Streamable HTTP transport for the MCP server.

The ASGI app produced by FastMCP is wrapped in a small guard that runs before
any MCP handling: optional bearer key, localhost-only Origin, and a known
MCP-Protocol-Version. Requests without Origin or protocol headers pass.
"""

from __future__ import annotations

import re
import secrets
from typing import TYPE_CHECKING

import structlog
import uvicorn
from starlette.datastructures import Headers
from starlette.responses import PlainTextResponse

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP
    from starlette.types import ASGIApp, Receive, Scope, Send

    from sveltecontext.config import Settings

log = structlog.get_logger()

SUPPORTED_PROTOCOL_VERSIONS: frozenset[str] = frozenset({"2025-11-25", "2025-06-18", "2025-03-26"})
_LOCAL_ORIGIN = re.compile(r"^https?://(localhost|127\.0\.0\.1|\[::1\])(:\d+)?$")


class MCPSecurityMiddleware:
    """Pure ASGI guard so streamed responses are never buffered."""

    def __init__(
        self,
        app: ASGIApp,
        *,
        auth_enabled: bool,
        auth_key: str | None = None,
    ) -> None:
        self.app = app
        self.auth_enabled = auth_enabled
        self.auth_key = auth_key

    def _rejection(self, headers: Headers) -> PlainTextResponse | None:
        if self.auth_enabled:
            scheme, _, key = headers.get("authorization", "").partition(" ")
            if scheme != "Bearer" or not key or not secrets.compare_digest(key, self.auth_key or ""):
                return PlainTextResponse("Unauthorized", status_code=401)

        origin = headers.get("origin")
        if origin and not _LOCAL_ORIGIN.match(origin):
            return PlainTextResponse("Forbidden", status_code=403)

        version = headers.get("mcp-protocol-version")
        if version and version not in SUPPORTED_PROTOCOL_VERSIONS:
            return PlainTextResponse(f"Unsupported protocol version: {version}", status_code=400)

        return None

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http":
            rejection = self._rejection(Headers(scope=scope))
            if rejection is not None:
                log.info(
                    "http_request_rejected",
                    status=rejection.status_code,
                    path=scope.get("path"),
                )
                await rejection(scope, receive, send)
                return
        await self.app(scope, receive, send)


def run_http_server(mcp: FastMCP, settings: Settings) -> None:
    """Serve ``mcp`` over Streamable HTTP until interrupted."""
    http_log = log.bind(transport="http", host=settings.server.host, port=settings.server.port)

    auth_key = settings.server.auth_key or None
    if settings.server.auth_enabled and auth_key is None:
        auth_key = secrets.token_urlsafe(32)
        http_log.warning("http_auth_key_generated", auth_key=auth_key)
    elif not settings.server.auth_enabled:
        http_log.warning("http_auth_disabled")

    app = MCPSecurityMiddleware(
        mcp.streamable_http_app(),
        auth_enabled=settings.server.auth_enabled,
        auth_key=auth_key,
    )
    http_log.info("http_server_starting")
    # structlog owns logging; uvicorn's own config would duplicate it
    uvicorn.run(app, host=settings.server.host, port=settings.server.port, log_config=None)
