"""
rate_limit.py — Fixed-window admission control for login and payments
=====================================================================
Counts requests per client key over a fixed window using the `limits`
strategies that back slowapi. The window table lives in a `limits`
storage backend chosen by URI ("memory://" by default, "redis://..." for
a shared cache), so the backing store can be swapped without touching
the gatekeeper. The memory backend purges expired windows on its own.

Only the login and payment routes consult the limiter.
"""
from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Optional

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import FixedWindowRateLimiter
from slowapi.util import get_remote_address

from .config import settings

# Re-exported so routes derive the client key the same way slowapi does.
client_key_for = get_remote_address


@dataclass(frozen=True)
class Decision:
    """Outcome of one admission check."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: float  # epoch seconds

    @property
    def retry_after(self) -> int:
        return max(0, math.ceil(self.reset_at - time.time()))

    @property
    def reset_at_iso(self) -> str:
        return datetime.fromtimestamp(self.reset_at, tz=timezone.utc).isoformat()

    def as_headers(self) -> Dict[str, str]:
        headers = {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.retry_after),
        }
        if not self.allowed:
            headers["Retry-After"] = str(self.retry_after)
        return headers


class RateLimiter:
    def __init__(
        self,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        storage_uri: Optional[str] = None,
    ) -> None:
        self.max_requests = settings.rate_limit_max_requests if max_requests is None else max_requests
        self.window_seconds = settings.rate_limit_window_seconds if window_seconds is None else window_seconds
        if self.max_requests < 1 or self.window_seconds < 1:
            raise ValueError("Rate limit requests and window must both be positive")
        self._item = RateLimitItemPerSecond(self.max_requests, self.window_seconds)
        self._storage = storage_from_string(settings.rate_limit_storage_uri if storage_uri is None else storage_uri)
        self._strategy = FixedWindowRateLimiter(self._storage)
        self._lock = threading.Lock()

    def check(self, client_key: str) -> Decision:
        """
        Count one request for ``client_key`` and decide.

        The first hit opens a window with count 1; hits up to max_requests
        are allowed, later ones denied until the window expires. Increment
        and decision happen under one lock.
        """
        with self._lock:
            allowed = self._strategy.hit(self._item, client_key)
            reset_at, remaining = self._strategy.get_window_stats(self._item, client_key)
        return Decision(
            allowed=allowed,
            limit=self.max_requests,
            remaining=max(0, int(remaining)),
            reset_at=float(reset_at),
        )

    def reset(self) -> None:
        """Drop every window (test and admin use)."""
        with self._lock:
            self._storage.reset()
