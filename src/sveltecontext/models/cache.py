from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A cached value and the monotonic time it was stored."""

    value: Any
    stored_at: float
