"""Per-attempt submission tokens for admin mutations.

The admin form sends a fresh token with every submission attempt. A token
that is still in flight, or that already completed recently, is refused,
so a double click cannot create the same article twice.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class TokenState(str, Enum):
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"


@dataclass
class TokenEntry:
    """Tracks one submission token."""

    state: TokenState
    updated_at: float


class SubmissionGuard:
    """In-memory token registry with periodic cleanup.

    Single-process only; entries older than ``ttl_seconds`` are forgotten.
    """

    def __init__(self, ttl_seconds: int = 600):
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, TokenEntry] = {}
        self._last_cleanup = time.time()
        self._cleanup_interval = 60

    def _cleanup_expired(self, current_time: float) -> None:
        """Remove expired entries to prevent memory growth."""
        if current_time - self._last_cleanup < self._cleanup_interval:
            return

        expired = [
            token for token, entry in self._entries.items()
            if current_time - entry.updated_at > self.ttl_seconds
        ]
        for token in expired:
            del self._entries[token]

        self._last_cleanup = current_time

    def state(self, token: str) -> Optional[TokenState]:
        entry = self._entries.get(token)
        return entry.state if entry else None

    def begin(self, token: str) -> bool:
        """Claim a token for a new attempt.

        Returns:
            False if the token is in flight or completed within the TTL.
        """
        current_time = time.time()
        self._cleanup_expired(current_time)

        entry = self._entries.get(token)
        if entry is not None and current_time - entry.updated_at <= self.ttl_seconds:
            return False

        self._entries[token] = TokenEntry(TokenState.IN_FLIGHT, current_time)
        return True

    def complete(self, token: str) -> None:
        """Mark a token's attempt as succeeded; it cannot be reused."""
        self._entries[token] = TokenEntry(TokenState.COMPLETED, time.time())

    def release(self, token: str) -> None:
        """Forget a failed attempt so the same token may be retried."""
        self._entries.pop(token, None)


submission_guard = SubmissionGuard()
