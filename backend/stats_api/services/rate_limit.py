"""In-memory sliding-window rate limiter keyed by caller signature.

State lives in the process only; restarting the service forgets every
window. Each identity keeps the timestamps of its recent requests and a
request is admitted while fewer than ``max_requests`` of them fall inside
the trailing window.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], float]


@dataclass
class RateConfig:
    window_seconds: float
    max_requests: int


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_time: datetime

    def reset_time_iso(self) -> str:
        return self.reset_time.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class RateLimitExceededError(Exception):
    """Raised when a caller has used up its window."""

    def __init__(self, decision: RateLimitDecision) -> None:
        super().__init__("Rate limit exceeded")
        self.decision = decision


class RateLimiter:
    def __init__(self, config: RateConfig, *, clock: Clock = time.time) -> None:
        self._config = config
        self._clock = clock
        # identity -> timestamps (epoch seconds), oldest first
        self._requests: dict[str, list[float]] = {}
        self._lock = threading.Lock()

    def check(self, identity: str) -> RateLimitDecision:
        """Record a request for ``identity`` if the window still has room."""

        window = float(self._config.window_seconds)
        limit = max(0, int(self._config.max_requests))
        with self._lock:
            now = self._clock()
            cutoff = now - window
            recent = [t for t in self._requests.get(identity, ()) if t > cutoff]
            allowed = len(recent) < limit
            if allowed:
                recent.append(now)
            # denied requests still store the pruned list
            self._requests[identity] = recent
            self._cleanup(now, window)

        return RateLimitDecision(
            allowed=allowed,
            remaining=max(0, limit - len(recent)),
            reset_time=datetime.fromtimestamp(now + window, tz=timezone.utc),
        )

    def _cleanup(self, now: float, window: float) -> None:
        threshold = now - 2 * window
        for identity in list(self._requests):
            kept = [t for t in self._requests[identity] if t > threshold]
            if kept:
                self._requests[identity] = kept
            else:
                del self._requests[identity]

    def tracked_identities(self) -> list[str]:
        with self._lock:
            return list(self._requests)
