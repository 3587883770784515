from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime


class ErrorCode(StrEnum):
    NOT_FOUND = "NOT_FOUND"
    RATE_LIMITED = "RATE_LIMITED"
    FETCH_FAILED = "FETCH_FAILED"
    UNEXPECTED_RESPONSE = "UNEXPECTED_RESPONSE"
    COMPONENT_NOT_FOUND = "COMPONENT_NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"


class SvelteContextError(Exception):
    """Raised for all expected failure conditions.

    The HTTP boundary raises it with a classified code so the retry loop can
    decide whether another attempt is worthwhile. Resolvers may convert it
    into a degraded result; anything that reaches server.py is serialised
    into the MCP error response.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        suggestion: str,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.recoverable = recoverable

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "suggestion": self.suggestion,
                "recoverable": self.recoverable,
            }
        }


class RateLimitError(SvelteContextError):
    """GitHub reported that the request quota is exhausted."""

    def __init__(self, message: str, *, reset_at: datetime | None = None) -> None:
        suggestion = (
            "Set GITHUB_PERSONAL_ACCESS_TOKEN for a higher request quota, "
            "or wait for the quota window to reset."
        )
        if reset_at is not None:
            suggestion = f"Quota resets at {reset_at.isoformat()}. " + suggestion
        super().__init__(
            code=ErrorCode.RATE_LIMITED,
            message=message,
            suggestion=suggestion,
            recoverable=True,
        )
        self.reset_at = reset_at

    def to_dict(self) -> dict:
        payload = super().to_dict()
        payload["error"]["reset_at"] = self.reset_at.isoformat() if self.reset_at else None
        return payload
