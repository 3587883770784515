"""GitHub HTTP boundary.

All network I/O goes through a single GitHubClient shared across tool calls.
The client receives an httpx.AsyncClient via constructor injection; the
lifespan owns the client lifecycle. Responses are narrowed to the models in
models/github.py and failures are raised as classified SvelteContextError
instances so fetch_with_retry can decide whether to try again.
"""

from __future__ import annotations

import base64
import binascii
from typing import TYPE_CHECKING, Any, NoReturn

import httpx
import structlog
from pydantic import TypeAdapter, ValidationError

from sveltecontext import __version__
from sveltecontext.errors import ErrorCode, RateLimitError, SvelteContextError
from sveltecontext.models.github import (
    ContentEntry,
    ContentsResponse,
    ErrorEnvelope,
    RateLimitStatus,
    RepoRef,
)

if TYPE_CHECKING:
    from sveltecontext.config import GitHubSettings

log = structlog.get_logger()

_LISTING_ADAPTER: TypeAdapter[list[ContentEntry]] = TypeAdapter(list[ContentEntry])


def build_http_client(settings: GitHubSettings, token: str | None = None) -> httpx.AsyncClient:
    """Create the shared httpx client. Called once at startup."""
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": f"sveltecontext/{__version__}",
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return httpx.AsyncClient(
        base_url=settings.api_url,
        follow_redirects=True,
        timeout=httpx.Timeout(settings.timeout_seconds),
        headers=headers,
        limits=httpx.Limits(
            max_connections=10,
            max_keepalive_connections=5,
        ),
    )


def decode_content(entry: ContentEntry) -> str:
    """Decode the base64 body of a single-file contents response."""
    if entry.content is None:
        raise SvelteContextError(
            code=ErrorCode.UNEXPECTED_RESPONSE,
            message=f"No inline content returned for {entry.path}",
            suggestion="The file may be too large for the contents API.",
            recoverable=False,
        )
    try:
        return base64.b64decode(entry.content).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as exc:
        raise SvelteContextError(
            code=ErrorCode.UNEXPECTED_RESPONSE,
            message=f"Could not decode content of {entry.path}: {exc}",
            suggestion="The file is not valid base64-encoded UTF-8 text.",
            recoverable=False,
        ) from exc


def _rate_limit_error(target: str, status: RateLimitStatus | None, detail: str) -> RateLimitError:
    reset_at = status.reset_at if status is not None else None
    log.warning(
        "github_rate_limited",
        target=target,
        reset_at=reset_at.isoformat() if reset_at else None,
    )
    return RateLimitError(f"GitHub API rate limit exceeded: {detail}", reset_at=reset_at)


def _not_found_error(target: str) -> SvelteContextError:
    return SvelteContextError(
        code=ErrorCode.NOT_FOUND,
        message=f"Path not found: {target}",
        suggestion="The path may not exist in the repository.",
        recoverable=False,
    )


def _raise_for_envelope(
    envelope: ErrorEnvelope, target: str, status: RateLimitStatus | None
) -> NoReturn:
    if envelope.is_rate_limit:
        raise _rate_limit_error(target, status, envelope.message)
    if envelope.is_not_found:
        raise _not_found_error(target)
    raise SvelteContextError(
        code=ErrorCode.UNEXPECTED_RESPONSE,
        message=f"GitHub API error for {target}: {envelope.message}",
        suggestion="The GitHub API returned an error body instead of content.",
        recoverable=True,
    )


def _message_of(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200]
    if isinstance(payload, dict):
        return str(payload.get("message", ""))
    return ""


def classify_response(response: httpx.Response, target: str) -> None:
    """Raise a classified error for a non-2xx response. No-op on success."""
    if response.is_success:
        return

    status = RateLimitStatus.from_headers(response.headers)
    message = _message_of(response)

    if response.status_code == 404:
        raise _not_found_error(target)

    # 429 is always a quota signal; 403 only with an exhausted quota or a rate-limit message
    if response.status_code == 429 or (
        response.status_code == 403
        and ((status is not None and status.exceeded) or "rate limit" in message.lower())
    ):
        raise _rate_limit_error(target, status, message or f"HTTP {response.status_code}")

    if response.status_code == 401:
        raise SvelteContextError(
            code=ErrorCode.FETCH_FAILED,
            message=f"Authentication failed fetching {target}",
            suggestion="Check the GitHub token, or unset it to use unauthenticated access.",
            recoverable=False,
        )

    detail = f": {message}" if message else ""
    raise SvelteContextError(
        code=ErrorCode.FETCH_FAILED,
        message=f"HTTP {response.status_code} fetching {target}{detail}",
        suggestion="GitHub may be temporarily unavailable.",
        recoverable=True,
    )


def parse_contents(payload: Any, target: str, status: RateLimitStatus | None = None) -> ContentsResponse:
    """Narrow a contents-API JSON payload to a file descriptor or a listing."""
    try:
        if isinstance(payload, list):
            return _LISTING_ADAPTER.validate_python(payload)
        if isinstance(payload, dict):
            if "type" in payload:
                return ContentEntry.model_validate(payload)
            if "message" in payload:
                _raise_for_envelope(ErrorEnvelope.model_validate(payload), target, status)
    except ValidationError as exc:
        raise SvelteContextError(
            code=ErrorCode.UNEXPECTED_RESPONSE,
            message=f"Unexpected response shape for {target}: {exc.error_count()} validation errors",
            suggestion="The GitHub contents API returned a payload this server does not understand.",
            recoverable=True,
        ) from exc

    raise SvelteContextError(
        code=ErrorCode.UNEXPECTED_RESPONSE,
        message=f"Unexpected response type from GitHub API for {target}",
        suggestion="The GitHub contents API returned a payload this server does not understand.",
        recoverable=True,
    )


class GitHubClient:
    """Read-only access to repository contents through the GitHub REST API."""

    def __init__(self, client: httpx.AsyncClient, settings: GitHubSettings) -> None:
        self._client = client
        self._settings = settings
        self.default_repo = RepoRef(
            owner=settings.owner,
            repo=settings.repo,
            branch=settings.branch,
        )

    async def _get(
        self,
        url: str,
        target: str,
        *,
        params: dict[str, str] | None = None,
        send_auth: bool = True,
    ) -> httpx.Response:
        try:
            request = self._client.build_request("GET", url, params=params)
            if not send_auth:
                # The bearer token is only meant for the GitHub API host
                request.headers.pop("Authorization", None)
            response = await self._client.send(request)
        except httpx.HTTPError as exc:
            raise SvelteContextError(
                code=ErrorCode.FETCH_FAILED,
                message=f"Network error fetching {target}: {exc}",
                suggestion="GitHub may be temporarily unavailable.",
                recoverable=True,
            ) from exc
        classify_response(response, target)
        return response

    async def get_contents(self, path: str, repo: RepoRef | None = None) -> ContentsResponse:
        """Fetch a file descriptor or a directory listing for ``path``."""
        repo = repo or self.default_repo
        path = path.strip("/")
        target = f"{repo}:{path}"
        response = await self._get(
            f"/repos/{repo.owner}/{repo.repo}/contents/{path}",
            target,
            params={"ref": repo.branch},
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Non-JSON response for {target}",
                suggestion="The GitHub contents API returned a payload this server does not understand.",
                recoverable=True,
            ) from exc

        contents = parse_contents(payload, target, RateLimitStatus.from_headers(response.headers))
        log.debug(
            "contents_fetched",
            target=target,
            kind="listing" if isinstance(contents, list) else contents.type,
        )
        return contents

    async def get_file_text(self, path: str, repo: RepoRef | None = None) -> str:
        """Fetch and decode a single file's body."""
        contents = await self.get_contents(path, repo)
        if isinstance(contents, list) or contents.type != "file":
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Expected a file at {path}, got a directory",
                suggestion="Check the file path in the registry manifest.",
                recoverable=False,
            )
        return decode_content(contents)

    async def get_json(self, url: str) -> Any:
        """Fetch an absolute URL and parse it as JSON (used for HTTP manifests)."""
        api_host = httpx.URL(self._settings.api_url).host
        response = await self._get(url, url, send_auth=httpx.URL(url).host == api_host)
        try:
            return response.json()
        except ValueError as exc:
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Non-JSON response from {url}",
                suggestion="The manifest URL must serve a JSON document.",
                recoverable=True,
            ) from exc

    async def get_rate_limit(self) -> RateLimitStatus:
        """Current core quota from ``/rate_limit`` (does not count against it)."""
        response = await self._get("/rate_limit", "rate_limit")
        try:
            payload = response.json()
            core = payload["resources"]["core"]
            return RateLimitStatus.model_validate(
                {
                    "limit": core.get("limit", 0),
                    "remaining": core.get("remaining", 0),
                    "used": core.get("used", 0),
                    "reset_at": core.get("reset"),
                }
            )
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            raise SvelteContextError(
                code=ErrorCode.UNEXPECTED_RESPONSE,
                message=f"Unexpected /rate_limit response: {exc}",
                suggestion="The GitHub rate-limit endpoint returned a payload this server does not understand.",
                recoverable=True,
            ) from exc
