"""Narrowed shapes of GitHub REST responses.

Every contents-API payload is validated into one of these at the fetch
boundary (see fetcher.py); nothing downstream inspects raw JSON.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Literal

from pydantic import BaseModel

if TYPE_CHECKING:
    from collections.abc import Mapping


class ContentEntry(BaseModel):
    """A file or directory descriptor from ``/repos/{o}/{r}/contents/{path}``."""

    type: Literal["file", "dir", "symlink", "submodule"]
    name: str
    path: str
    sha: str = ""
    size: int = 0
    download_url: str | None = None
    content: str | None = None  # base64, only on single-file responses
    encoding: str | None = None


class ErrorEnvelope(BaseModel):
    """GitHub's ``{"message": ..., "documentation_url": ...}`` error body."""

    message: str
    documentation_url: str | None = None

    @property
    def is_rate_limit(self) -> bool:
        return "rate limit" in self.message.lower()

    @property
    def is_not_found(self) -> bool:
        return "not found" in self.message.lower()


class RateLimitStatus(BaseModel):
    """Quota status derived from ``x-ratelimit-*`` headers or ``/rate_limit``."""

    limit: int
    remaining: int
    used: int = 0
    reset_at: datetime | None = None

    @property
    def exceeded(self) -> bool:
        return self.remaining <= 0

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RateLimitStatus | None:
        """Return None when the response carries no rate-limit headers."""
        remaining = headers.get("x-ratelimit-remaining")
        if remaining is None:
            return None
        try:
            reset_raw = headers.get("x-ratelimit-reset")
            reset_at = datetime.fromtimestamp(int(reset_raw), tz=UTC) if reset_raw else None
            return cls(
                limit=int(headers.get("x-ratelimit-limit", "0")),
                remaining=int(remaining),
                used=int(headers.get("x-ratelimit-used", "0")),
                reset_at=reset_at,
            )
        except ValueError:
            return None


ContentsResponse = ContentEntry | list[ContentEntry]


class RepoRef(BaseModel):
    """Repository coordinates for a contents request."""

    owner: str
    repo: str
    branch: str

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}@{self.branch}"
